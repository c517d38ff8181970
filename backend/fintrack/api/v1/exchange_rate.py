from __future__ import annotations
"""Exchange rate routes - rates into the base currency."""
from typing import Annotated

from fastapi import APIRouter, Depends

from fintrack.api.deps import CurrentActor
from fintrack.api.schemas import CamelModel
from fintrack.services.exchange_rate import ExchangeRateService, get_exchange_rate_service


router = APIRouter(prefix="/exchange-rate", tags=["exchange-rate"])

RateService = Annotated[ExchangeRateService, Depends(get_exchange_rate_service)]


class ExchangeRateResponse(CamelModel):
    currency: str
    rate: float
    base: str


@router.get("/{currency}", response_model=ExchangeRateResponse)
async def get_exchange_rate(currency: str, actor: CurrentActor, service: RateService):
    """Rate of 1 unit of `currency` in the base currency."""
    rate = await service.get_rate(currency)
    return ExchangeRateResponse(currency=currency.upper(), rate=rate, base=service.base_currency)
