from __future__ import annotations
"""Default categories and accounts for an empty database."""
from decimal import Decimal
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.models.account import Account, AccountType
from fintrack.models.category import Category

logger = logging.getLogger(__name__)


DEFAULT_CATEGORIES = [
    ("Sales Revenue", True),
    ("Consulting Fees", True),
    ("Office Rent", False),
    ("Salaries", False),
    ("Software Subscriptions", False),
    ("Office Supplies", False),
    ("Travel", False),
]

DEFAULT_ACCOUNTS = [
    ("Main Bank Account (HDFC)", AccountType.CURRENT, Decimal("100000")),
    ("Petty Cash", AccountType.CASH, Decimal("5000")),
    ("Corporate Credit Card", AccountType.OD_CC, Decimal("0")),
]


async def seed_defaults(db: AsyncSession) -> bool:
    """Insert defaults when no categories exist yet. Returns True if seeded."""
    existing = await db.scalar(select(func.count()).select_from(Category))
    if existing:
        return False

    logger.info("🌱 Seeding default categories and accounts...")
    for name, is_system in DEFAULT_CATEGORIES:
        db.add(Category(name=name, is_system=is_system, is_enabled=True))

    for name, account_type, opening in DEFAULT_ACCOUNTS:
        db.add(Account(
            name=name,
            type=account_type.value,
            opening_balance=opening,
            current_balance=opening,
            is_active=True,
        ))

    await db.commit()
    return True
