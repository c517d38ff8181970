from __future__ import annotations
"""Account model - bank, cash, UPI and overdraft accounts."""
from decimal import Decimal
from enum import Enum

from sqlalchemy import Boolean, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from fintrack.core.database import Base


class AccountType(str, Enum):
    """Account type."""
    CURRENT = "current"
    OD_CC = "od_cc"        # Overdraft / credit line, may go negative
    CASH = "cash"
    UPI = "upi"


class Account(Base):
    """
    Money account.

    current_balance is a cache of opening_balance plus every approved
    transaction touching the account. Only BalanceService writes it.
    """
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)

    opening_balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    current_balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Account {self.name}: {self.current_balance}>"
