from __future__ import annotations
"""
Transaction lifecycle.

    draft -> submitted -> approved | rejected

Approval and rejection are admin only and succeed only from `submitted`,
so the balance delta of a transaction can never be applied twice.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fintrack.core.errors import InvalidStateTransition, NotFound, PermissionDenied, ValidationFailed
from fintrack.core.permissions import Action, Actor, Role
from fintrack.models.account import Account
from fintrack.models.category import Category
from fintrack.models.transaction import Transaction, TransactionStatus, TransactionType
from fintrack.services.audit import AuditService
from fintrack.services.balance import BalanceService
from fintrack.utils.dates import month_bounds
from fintrack.utils.money import base_amount, to_money

logger = logging.getLogger(__name__)


# Fields that move money; frozen once a transaction is approved
FINANCIAL_FIELDS = frozenset({
    "amount", "currency", "exchange_rate", "type", "account_id", "to_account_id",
})

EDITABLE_FIELDS = FINANCIAL_FIELDS | {
    "date", "category_id", "description", "notes", "attachment_url",
}


@dataclass
class TransactionFilters:
    month: Optional[str] = None
    account_id: Optional[int] = None
    category_id: Optional[int] = None
    status: Optional[str] = None


class TransactionService:
    """Creates, edits and moves transactions through their lifecycle."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.balances = BalanceService(db)
        self.audit = AuditService(db)

    # ==================== READ ====================

    async def list_transactions(self, filters: Optional[TransactionFilters] = None) -> List[Transaction]:
        filters = filters or TransactionFilters()
        stmt = select(Transaction).options(
            selectinload(Transaction.category),
            selectinload(Transaction.account),
            selectinload(Transaction.to_account),
        )

        if filters.month:
            start, end = month_bounds(filters.month)
            stmt = stmt.where(Transaction.date >= start, Transaction.date < end)
        if filters.account_id:
            stmt = stmt.where(Transaction.account_id == filters.account_id)
        if filters.category_id:
            stmt = stmt.where(Transaction.category_id == filters.category_id)
        if filters.status:
            stmt = stmt.where(Transaction.status == filters.status)

        stmt = stmt.order_by(Transaction.date.desc(), Transaction.id.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get(self, transaction_id: int) -> Transaction:
        stmt = (
            select(Transaction)
            .options(
                selectinload(Transaction.category),
                selectinload(Transaction.account),
                selectinload(Transaction.to_account),
            )
            .where(Transaction.id == transaction_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        tx = result.scalar_one_or_none()
        if not tx:
            raise NotFound("Transaction not found")
        return tx

    # ==================== CREATE / EDIT ====================

    async def create(self, actor: Actor, data: Dict[str, Any]) -> Transaction:
        """Create a transaction. Admins may create it already approved."""
        actor.require(Action.TRANSACTION_CREATE)

        status = self._initial_status(actor, data.get("status") or TransactionStatus.DRAFT.value)
        fields = {k: v for k, v in data.items() if k in EDITABLE_FIELDS}
        fields.setdefault("currency", "INR")
        fields.setdefault("exchange_rate", Decimal("1"))
        fields["currency"] = fields["currency"].upper()
        await self._validate(fields)

        tx = Transaction(
            **fields,
            base_amount=base_amount(fields["amount"], fields["exchange_rate"]),
            status=status,
            created_by=actor.user_id,
        )
        self.db.add(tx)
        await self.db.flush()

        if status == TransactionStatus.APPROVED.value:
            tx.approved_by = actor.user_id
            tx.approved_at = datetime.now(timezone.utc)
            await self.balances.apply(tx)

        self.audit.record(actor, "create", "transaction", tx.id, {"status": status, "type": tx.type})
        await self.db.commit()
        logger.info(f"Transaction {tx.id} created by user {actor.user_id} as {status}")
        return await self.get(tx.id)

    def _initial_status(self, actor: Actor, requested: str) -> str:
        if actor.role == Role.DATA_ENTRY:
            if requested != TransactionStatus.DRAFT.value:
                logger.info(f"Data entry user {actor.user_id} requested '{requested}', saving as draft")
            return TransactionStatus.DRAFT.value

        if requested == TransactionStatus.REJECTED.value:
            raise ValidationFailed("A new transaction cannot be rejected")
        if requested == TransactionStatus.APPROVED.value:
            actor.require(Action.TRANSACTION_APPROVE)
        elif requested == TransactionStatus.SUBMITTED.value:
            actor.require(Action.TRANSACTION_SUBMIT)
        elif requested != TransactionStatus.DRAFT.value:
            raise ValidationFailed(f"Unknown status '{requested}'")
        return requested

    async def update(self, actor: Actor, transaction_id: int, changes: Dict[str, Any]) -> Transaction:
        """Edit fields of a transaction. Status is never changed here."""
        tx = await self.get(transaction_id)
        changes = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
        if "currency" in changes and changes["currency"]:
            changes["currency"] = changes["currency"].upper()

        if tx.status == TransactionStatus.REJECTED.value:
            raise InvalidStateTransition("Rejected transactions cannot be edited")

        if tx.is_approved:
            actor.require(Action.TRANSACTION_EDIT_APPROVED)
            moved = sorted(
                field for field in FINANCIAL_FIELDS & changes.keys()
                if changes[field] != getattr(tx, field)
            )
            if moved:
                raise InvalidStateTransition(
                    f"Approved transactions only allow descriptive edits (cannot change {', '.join(moved)})"
                )
        else:
            actor.require(Action.TRANSACTION_EDIT)
            if not actor.is_admin and tx.created_by != actor.user_id:
                raise PermissionDenied("You can only edit your own transactions")

        merged = {field: getattr(tx, field) for field in EDITABLE_FIELDS}
        merged.update(changes)
        await self._validate(merged, check_category="category_id" in changes)

        for field, value in changes.items():
            setattr(tx, field, value)
        tx.base_amount = base_amount(tx.amount, tx.exchange_rate)

        await self.db.commit()
        return await self.get(tx.id)

    async def _validate(self, fields: Dict[str, Any], check_category: bool = True) -> None:
        tx_type = fields.get("type")
        if tx_type not in {t.value for t in TransactionType}:
            raise ValidationFailed(f"Invalid transaction type '{tx_type}'")
        # Amounts are stored with 2 decimals; compare what would be stored
        if fields.get("amount") is None or to_money(fields["amount"]) <= 0:
            raise ValidationFailed("amount must be greater than 0")
        if Decimal(str(fields.get("exchange_rate") or 0)) <= 0:
            raise ValidationFailed("exchangeRate must be greater than 0")
        if base_amount(fields["amount"], fields["exchange_rate"]) <= 0:
            raise ValidationFailed("amount in base currency must be greater than 0")

        currency = fields.get("currency") or ""
        if len(currency) != 3 or not (currency.isascii() and currency.isalpha()):
            raise ValidationFailed("currency must be a 3-letter code")

        to_account_id = fields.get("to_account_id")
        if tx_type == TransactionType.TRANSFER.value:
            if not to_account_id:
                raise ValidationFailed("toAccountId is required for transfers")
            if to_account_id == fields.get("account_id"):
                raise ValidationFailed("Cannot transfer to the same account")
        elif to_account_id:
            raise ValidationFailed("toAccountId is only allowed for transfers")

        for account_id in filter(None, (fields.get("account_id"), to_account_id)):
            if not await self.db.get(Account, account_id):
                raise NotFound(f"Account {account_id} not found")

        category_id = fields.get("category_id")
        if category_id and check_category:
            category = await self.db.get(Category, category_id)
            if not category:
                raise NotFound(f"Category {category_id} not found")
            if not category.is_enabled:
                raise ValidationFailed(f"Category '{category.name}' is disabled")

    # ==================== LIFECYCLE ====================

    async def submit(self, actor: Actor, transaction_id: int) -> Transaction:
        """draft -> submitted."""
        actor.require(Action.TRANSACTION_SUBMIT)
        tx = await self.get(transaction_id)
        await self._transition(tx, TransactionStatus.DRAFT, TransactionStatus.SUBMITTED)
        await self.db.commit()
        logger.info(f"Transaction {tx.id} submitted by user {actor.user_id}")
        return await self.get(tx.id)

    async def approve(self, actor: Actor, transaction_id: int) -> Transaction:
        """submitted -> approved; applies the balance delta in the same commit."""
        actor.require(Action.TRANSACTION_APPROVE)
        tx = await self.get(transaction_id)
        await self._transition(
            tx,
            TransactionStatus.SUBMITTED,
            TransactionStatus.APPROVED,
            approved_by=actor.user_id,
            approved_at=datetime.now(timezone.utc),
        )
        await self.balances.apply(tx)
        self.audit.record(actor, "approve", "transaction", tx.id, {"amount": str(tx.base_amount)})
        await self.db.commit()
        logger.info(f"Transaction {tx.id} approved by user {actor.user_id}")
        return await self.get(tx.id)

    async def reject(self, actor: Actor, transaction_id: int) -> Transaction:
        """submitted -> rejected; no balance effect."""
        actor.require(Action.TRANSACTION_REJECT)
        tx = await self.get(transaction_id)
        await self._transition(
            tx,
            TransactionStatus.SUBMITTED,
            TransactionStatus.REJECTED,
            approved_by=actor.user_id,
            approved_at=datetime.now(timezone.utc),
        )
        self.audit.record(actor, "reject", "transaction", tx.id)
        await self.db.commit()
        logger.info(f"Transaction {tx.id} rejected by user {actor.user_id}")
        return await self.get(tx.id)

    async def _transition(
        self,
        tx: Transaction,
        source: TransactionStatus,
        target: TransactionStatus,
        **stamps: Any
    ) -> None:
        if tx.status != source.value:
            raise InvalidStateTransition(
                f"Cannot move transaction from '{tx.status}' to '{target.value}'"
            )
        # Compare-and-set on the stored status; a concurrent transition wins once
        stmt = (
            update(Transaction)
            .where(Transaction.id == tx.id, Transaction.status == source.value)
            .values(status=target.value, **stamps)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if result.rowcount != 1:
            raise InvalidStateTransition(
                f"Transaction {tx.id} changed concurrently; expected '{source.value}'"
            )

    # ==================== DELETE ====================

    async def delete(self, actor: Actor, transaction_id: int) -> None:
        """
        Admins may delete anything; others only their own drafts.
        Deleting an approved transaction leaves balances as they are.
        """
        tx = await self.get(transaction_id)

        if not actor.can(Action.TRANSACTION_DELETE_ANY):
            own_draft = (
                tx.created_by == actor.user_id
                and tx.status == TransactionStatus.DRAFT.value
            )
            if not (own_draft and actor.can(Action.TRANSACTION_DELETE_OWN_DRAFT)):
                raise PermissionDenied("You can only delete your own draft transactions")

        if tx.is_approved:
            logger.warning(
                f"Deleting approved transaction {tx.id}; balance effect on account(s) "
                f"{tx.account_id}{'/' + str(tx.to_account_id) if tx.to_account_id else ''} is not reversed"
            )

        self.audit.record(
            actor, "delete", "transaction", tx.id,
            {"status": tx.status, "type": tx.type, "amount": str(tx.base_amount)}
        )
        await self.db.delete(tx)
        await self.db.commit()
