from __future__ import annotations
"""Goal model - revenue targets and expense caps."""
import datetime as dt
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, DateTime, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from fintrack.core.database import Base


class GoalType(str, Enum):
    REVENUE = "revenue"
    EXPENSE = "expense"


class GoalPeriod(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"


class Goal(Base):
    """Comparison target for aggregated approved transactions. Stores no derived state."""
    __tablename__ = "goals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    target_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    period: Mapped[str] = mapped_column(String(20), nullable=False)
    start_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    end_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<Goal {self.type} {self.target_amount} ({self.period})>"
