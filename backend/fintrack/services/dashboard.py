from __future__ import annotations
"""Dashboard and report aggregation over approved transactions."""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.core.config import settings
from fintrack.models.account import Account, AccountType
from fintrack.models.category import Category
from fintrack.models.transaction import Transaction, TransactionStatus, TransactionType
from fintrack.utils.dates import month_bounds

logger = logging.getLogger(__name__)

TOP_CATEGORIES = 5
UNCATEGORIZED = "Uncategorized"


@dataclass
class DashboardStats:
    month: str
    total_available_funds: Decimal = Decimal("0")
    current_month_profit_loss: Decimal = Decimal("0")
    monthly_income: Decimal = Decimal("0")
    monthly_expense: Decimal = Decimal("0")
    od_limit_used: Decimal = Decimal("0")
    od_limit_remaining: Decimal = Decimal("0")
    top_expenses: List[Dict[str, object]] = field(default_factory=list)
    revenue_by_service: List[Dict[str, object]] = field(default_factory=list)


@dataclass
class CategoryLine:
    category_id: Optional[int]
    category: str
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")

    @property
    def net(self) -> Decimal:
        return self.income - self.expense


def top_n(totals: Dict[str, Decimal], limit: int = TOP_CATEGORIES) -> List[Tuple[str, Decimal]]:
    """Largest positive totals first; equal totals keep name order."""
    ranked = sorted(
        ((name, amount) for name, amount in totals.items() if amount > 0),
        key=lambda item: (-item[1], item[0])
    )
    return ranked[:limit]


class DashboardService:
    """Read-only summaries. Only approved transactions count."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _approved_between(self, start: date, end: date, inclusive_end: bool = False):
        """Approved transactions with their category name, in [start, end) or [start, end]."""
        end_clause = Transaction.date <= end if inclusive_end else Transaction.date < end
        stmt = (
            select(Transaction, Category.name)
            .outerjoin(Category, Transaction.category_id == Category.id)
            .where(
                Transaction.status == TransactionStatus.APPROVED.value,
                Transaction.date >= start,
                end_clause,
            )
        )
        result = await self.db.execute(stmt)
        return result.all()

    async def get_stats(self, month: Optional[str] = None) -> DashboardStats:
        start, end = month_bounds(month)
        stats = DashboardStats(month=start.strftime("%Y-%m"))

        # Funds across active accounts, independent of month
        result = await self.db.execute(
            select(Account).where(Account.is_active.is_(True)).order_by(Account.id)
        )
        accounts = result.scalars().all()
        stats.total_available_funds = sum(
            (Decimal(a.current_balance) for a in accounts), Decimal("0")
        )

        od_limit = Decimal(str(settings.od_limit))
        od_account = next((a for a in accounts if a.type == AccountType.OD_CC.value), None)
        if od_account:
            stats.od_limit_used = abs(min(Decimal("0"), Decimal(od_account.current_balance)))
        stats.od_limit_remaining = od_limit - stats.od_limit_used

        expense_by_category: Dict[str, Decimal] = {}
        income_by_category: Dict[str, Decimal] = {}

        for tx, category_name in await self._approved_between(start, end):
            amount = Decimal(tx.base_amount)
            if tx.type == TransactionType.INCOME.value:
                stats.monthly_income += amount
                if tx.category_id:
                    name = category_name or "Unknown"
                    income_by_category[name] = income_by_category.get(name, Decimal("0")) + amount
            elif tx.type == TransactionType.EXPENSE.value:
                stats.monthly_expense += amount
                if tx.category_id:
                    name = category_name or "Unknown"
                    expense_by_category[name] = expense_by_category.get(name, Decimal("0")) + amount

        stats.current_month_profit_loss = stats.monthly_income - stats.monthly_expense
        stats.top_expenses = [
            {"category": name, "amount": amount} for name, amount in top_n(expense_by_category)
        ]
        stats.revenue_by_service = [
            {"service": name, "amount": amount} for name, amount in top_n(income_by_category)
        ]
        return stats

    async def category_report(self, month: Optional[str] = None) -> Dict[str, object]:
        """Per-category approved income and expense for a month."""
        start, end = month_bounds(month)
        lines: Dict[Optional[int], CategoryLine] = {}
        total_income = Decimal("0")
        total_expense = Decimal("0")

        for tx, category_name in await self._approved_between(start, end):
            if tx.type not in (TransactionType.INCOME.value, TransactionType.EXPENSE.value):
                continue
            line = lines.setdefault(
                tx.category_id,
                CategoryLine(tx.category_id, category_name or UNCATEGORIZED)
            )
            amount = Decimal(tx.base_amount)
            if tx.type == TransactionType.INCOME.value:
                line.income += amount
                total_income += amount
            else:
                line.expense += amount
                total_expense += amount

        categories = sorted(
            (line for line in lines.values() if line.income or line.expense),
            key=lambda line: (-(line.income + line.expense), line.category)
        )
        return {
            "month": start.strftime("%Y-%m"),
            "categories": categories,
            "total_income": total_income,
            "total_expense": total_expense,
            "net": total_income - total_expense,
        }

    async def actual_for_period(self, tx_type: TransactionType, start: date, end: date) -> Decimal:
        """Sum of approved transactions of one type in [start, end]."""
        total = Decimal("0")
        for tx, _ in await self._approved_between(start, end, inclusive_end=True):
            if tx.type == tx_type.value:
                total += Decimal(tx.base_amount)
        return total
