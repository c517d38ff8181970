from __future__ import annotations
"""Account management and balance reconciliation."""
from typing import Any, Dict, List
import logging

from sqlalchemy import exists, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.core.errors import NotFound, ValidationFailed
from fintrack.core.permissions import Action, Actor
from fintrack.models.account import Account
from fintrack.models.transaction import Transaction
from fintrack.services.audit import AuditService
from fintrack.services.balance import BalanceService, Reconciliation
from fintrack.utils.money import to_money

logger = logging.getLogger(__name__)


class AccountService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def list_accounts(self) -> List[Account]:
        result = await self.db.execute(
            select(Account).order_by(Account.id).execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def get(self, account_id: int) -> Account:
        account = await self.db.get(Account, account_id, populate_existing=True)
        if not account:
            raise NotFound("Account not found")
        return account

    async def create(self, actor: Actor, data: Dict[str, Any]) -> Account:
        """New accounts start with current balance equal to opening balance."""
        actor.require(Action.ACCOUNT_MANAGE)
        opening = to_money(data.pop("opening_balance", 0) or 0)
        account = Account(**data, opening_balance=opening, current_balance=opening)
        self.db.add(account)
        await self.db.commit()
        await self.db.refresh(account)
        return account

    async def update(self, actor: Actor, account_id: int, changes: Dict[str, Any]) -> Account:
        """Rename, retype or (de)activate. Balances are not editable here."""
        actor.require(Action.ACCOUNT_MANAGE)
        account = await self.get(account_id)
        for field, value in changes.items():
            setattr(account, field, value)
        await self.db.commit()
        await self.db.refresh(account)
        return account

    async def delete(self, actor: Actor, account_id: int) -> None:
        actor.require(Action.ACCOUNT_MANAGE)
        account = await self.get(account_id)

        in_use = await self.db.scalar(
            select(exists().where(or_(
                Transaction.account_id == account_id,
                Transaction.to_account_id == account_id,
            )))
        )
        if in_use:
            raise ValidationFailed("Account has transactions; deactivate it instead")

        await self.db.delete(account)
        await self.db.commit()
        logger.info(f"Account {account_id} deleted by user {actor.user_id}")

    async def reconcile(self, actor: Actor, account_id: int) -> Reconciliation:
        """Recompute the cached balance from the approved transaction log."""
        actor.require(Action.ACCOUNT_RECONCILE)
        outcome = await BalanceService(self.db).recompute(account_id)
        self.audit.record(
            actor, "reconcile", "account", account_id,
            {"previous": str(outcome.previous_balance), "current": str(outcome.current_balance)}
        )
        await self.db.commit()
        return outcome
