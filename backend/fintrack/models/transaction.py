from __future__ import annotations
"""Transaction model - income, expense, transfer and opening balance entries."""
import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fintrack.core.database import Base

if TYPE_CHECKING:
    from fintrack.models.account import Account
    from fintrack.models.category import Category


class TransactionType(str, Enum):
    """Transaction type."""
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"
    OPENING_BALANCE = "opening_balance"


class TransactionStatus(str, Enum):
    """Lifecycle: draft -> submitted -> approved | rejected."""
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class Transaction(Base):
    """
    A single money movement.

    base_amount is amount x exchange_rate in the base currency, rounded to
    2 decimals. Only approved transactions affect balances and reports.
    """
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)

    # Amount
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="INR", nullable=False)
    exchange_rate: Mapped[Decimal] = mapped_column(Numeric(14, 6), default=Decimal("1"), nullable=False)
    base_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    type: Mapped[str] = mapped_column(String(20), nullable=False)

    category_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("categories.id"),
        nullable=True,
        index=True
    )
    account_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("accounts.id"),
        nullable=False,
        index=True
    )
    # Destination account, set for transfers only
    to_account_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("accounts.id"),
        nullable=True
    )

    # Details
    description: Mapped[Optional[str]] = mapped_column(String(255))
    notes: Mapped[Optional[str]] = mapped_column(Text)
    attachment_url: Mapped[Optional[str]] = mapped_column(String(500))

    status: Mapped[str] = mapped_column(
        String(20),
        default=TransactionStatus.DRAFT.value,
        nullable=False,
        index=True
    )

    # Audit
    # Identity ids, kept after the user is removed
    created_by: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now()
    )
    # Reviewer of the row: set on approval and on rejection
    approved_by: Mapped[Optional[int]] = mapped_column(Integer)
    approved_at: Mapped[Optional[dt.datetime]] = mapped_column(DateTime(timezone=True))

    # Relationships
    category: Mapped[Optional["Category"]] = relationship(foreign_keys=[category_id])
    account: Mapped["Account"] = relationship(foreign_keys=[account_id])
    to_account: Mapped[Optional["Account"]] = relationship(foreign_keys=[to_account_id])

    def __repr__(self) -> str:
        return f"<Transaction {self.id} {self.type}: {self.base_amount} ({self.status})>"

    @property
    def is_approved(self) -> bool:
        return self.status == TransactionStatus.APPROVED.value
