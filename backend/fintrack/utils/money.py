"""Money rounding helpers."""
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

CENT = Decimal("0.01")

Number = Union[Decimal, float, int, str]


def to_money(value: Number) -> Decimal:
    """Quantize to 2 decimals, half up."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def base_amount(amount: Number, exchange_rate: Number) -> Decimal:
    """Amount in the base currency: amount x rate, rounded to 2 decimals."""
    return to_money(Decimal(str(amount)) * Decimal(str(exchange_rate)))
