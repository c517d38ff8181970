from __future__ import annotations
"""
Balance maintenance.

Account.current_balance is a cache of opening_balance plus every approved
transaction touching the account. `apply` runs exactly once per transaction,
when it enters the approved state. Each leg is one UPDATE evaluated by the
database relative to the stored value, so concurrent approvals against the
same account never lose an increment. Nothing here commits: the status
change and every leg are committed together by the caller.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import List
import logging

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.core.errors import NotFound
from fintrack.models.account import Account
from fintrack.models.transaction import Transaction, TransactionStatus, TransactionType

logger = logging.getLogger(__name__)


@dataclass
class BalanceLeg:
    """One signed change to one account."""
    account_id: int
    delta: Decimal
    opening: bool = False


@dataclass
class Reconciliation:
    account_id: int
    previous_balance: Decimal
    current_balance: Decimal

    @property
    def difference(self) -> Decimal:
        return self.current_balance - self.previous_balance


def legs_for(tx: Transaction) -> List[BalanceLeg]:
    """Signed balance changes caused by approving `tx`."""
    amount = Decimal(tx.base_amount)

    if tx.type == TransactionType.INCOME.value:
        return [BalanceLeg(tx.account_id, amount)]
    if tx.type == TransactionType.EXPENSE.value:
        return [BalanceLeg(tx.account_id, -amount)]
    if tx.type == TransactionType.TRANSFER.value:
        if tx.to_account_id is None:
            logger.warning(f"Transfer {tx.id} has no destination account, balances untouched")
            return []
        return [
            BalanceLeg(tx.account_id, -amount),
            BalanceLeg(tx.to_account_id, amount),
        ]
    if tx.type == TransactionType.OPENING_BALANCE.value:
        return [BalanceLeg(tx.account_id, amount, opening=True)]
    return []


class BalanceService:
    """Applies approved transactions to cached account balances."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def apply(self, tx: Transaction) -> int:
        """
        Apply the balance effect of `tx`. Returns the number of legs applied.

        A leg whose account is missing or inactive is skipped with a warning;
        the transaction itself is still persisted by the caller.
        """
        applied = 0
        for leg in legs_for(tx):
            if await self._increment(leg):
                applied += 1
            else:
                logger.warning(
                    f"Skipped balance update for transaction {tx.id}: "
                    f"account {leg.account_id} missing or inactive"
                )
        logger.info(f"Applied {applied} balance leg(s) for transaction {tx.id} ({tx.type} {tx.base_amount})")
        return applied

    async def _increment(self, leg: BalanceLeg) -> bool:
        values = {"current_balance": Account.current_balance + leg.delta}
        if leg.opening:
            values["opening_balance"] = Account.opening_balance + leg.delta

        stmt = (
            update(Account)
            .where(Account.id == leg.account_id, Account.is_active.is_(True))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def recompute(self, account_id: int) -> Reconciliation:
        """
        Rebuild current_balance from opening_balance and the approved log.

        Opening balance transactions are already folded into
        opening_balance, so they are not counted twice.
        """
        account = await self.db.get(Account, account_id, populate_existing=True)
        if not account:
            raise NotFound("Account not found")

        stmt = select(Transaction).where(
            Transaction.status == TransactionStatus.APPROVED.value,
            or_(
                Transaction.account_id == account_id,
                Transaction.to_account_id == account_id,
            )
        )
        result = await self.db.execute(stmt)

        total = Decimal(account.opening_balance)
        for tx in result.scalars().all():
            for leg in legs_for(tx):
                if leg.account_id == account_id and not leg.opening:
                    total += leg.delta

        previous = Decimal(account.current_balance)
        account.current_balance = total
        if previous != total:
            logger.warning(f"Account {account_id} balance drift corrected: {previous} -> {total}")
        return Reconciliation(account_id=account_id, previous_balance=previous, current_balance=total)
