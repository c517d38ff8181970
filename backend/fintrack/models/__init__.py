from __future__ import annotations
# Models module - import all models to register them with SQLAlchemy

from fintrack.models.user import User, AppUser
from fintrack.models.category import Category
from fintrack.models.account import Account, AccountType
from fintrack.models.transaction import Transaction, TransactionType, TransactionStatus
from fintrack.models.client import Client
from fintrack.models.invoice import Invoice, InvoiceItem, InvoiceStatus
from fintrack.models.goal import Goal, GoalType, GoalPeriod
from fintrack.models.audit_log import AuditLog

__all__ = [
    "User",
    "AppUser",
    "Category",
    "Account",
    "AccountType",
    "Transaction",
    "TransactionType",
    "TransactionStatus",
    "Client",
    "Invoice",
    "InvoiceItem",
    "InvoiceStatus",
    "Goal",
    "GoalType",
    "GoalPeriod",
    "AuditLog",
]
