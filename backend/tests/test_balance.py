from datetime import date
from decimal import Decimal

import pytest

from fintrack.models import Account, Transaction
from fintrack.services.balance import BalanceService, legs_for
from fintrack.utils.money import base_amount


def make_tx(**kwargs) -> Transaction:
    fields = {
        "id": 1,
        "date": date(2026, 3, 1),
        "amount": Decimal("100"),
        "exchange_rate": Decimal("1"),
        "base_amount": Decimal("100"),
        "type": "expense",
        "account_id": 1,
        "status": "approved",
        "created_by": 1,
    }
    fields.update(kwargs)
    return Transaction(**fields)


def test_legs_for_each_type():
    assert [(l.account_id, l.delta) for l in legs_for(make_tx(type="income"))] == [(1, Decimal("100"))]
    assert [(l.account_id, l.delta) for l in legs_for(make_tx(type="expense"))] == [(1, Decimal("-100"))]

    transfer = legs_for(make_tx(type="transfer", to_account_id=2))
    assert [(l.account_id, l.delta) for l in transfer] == [(1, Decimal("-100")), (2, Decimal("100"))]

    opening = legs_for(make_tx(type="opening_balance"))
    assert opening[0].opening


def test_transfer_without_destination_has_no_legs():
    assert legs_for(make_tx(type="transfer", to_account_id=None)) == []


def test_base_amount_rounds_half_up():
    assert base_amount(Decimal("10"), Decimal("83.125")) == Decimal("831.25")
    assert base_amount(Decimal("0.5"), Decimal("0.01")) == Decimal("0.01")


async def _balance(session_maker, account_id: int) -> Decimal:
    async with session_maker() as session:
        account = await session.get(Account, account_id)
        return Decimal(account.current_balance)


@pytest.mark.asyncio
async def test_apply_transfer_moves_both_legs(db, session_maker, accounts):
    bank, cash = accounts["bank"], accounts["cash"]
    tx = make_tx(type="transfer", account_id=bank.id, to_account_id=cash.id, base_amount=Decimal("250"))
    db.add(tx)
    await db.flush()

    applied = await BalanceService(db).apply(tx)
    await db.commit()

    assert applied == 2
    assert await _balance(session_maker, bank.id) == Decimal("750")
    assert await _balance(session_maker, cash.id) == Decimal("250")


@pytest.mark.asyncio
async def test_apply_skips_inactive_account(db, session_maker, accounts):
    cash = accounts["cash"]
    cash.is_active = False
    await db.commit()

    tx = make_tx(type="income", account_id=cash.id)
    db.add(tx)
    await db.flush()

    assert await BalanceService(db).apply(tx) == 0
    await db.commit()
    assert await _balance(session_maker, cash.id) == Decimal("0")


@pytest.mark.asyncio
async def test_recompute_restores_drifted_balance(db, session_maker, accounts):
    bank = accounts["bank"]
    db.add(make_tx(type="income", account_id=bank.id, base_amount=Decimal("300")))
    db.add(make_tx(id=2, type="expense", account_id=bank.id, base_amount=Decimal("50")))
    db.add(make_tx(id=3, type="expense", account_id=bank.id, base_amount=Decimal("999"), status="draft"))
    bank.current_balance = Decimal("1")
    await db.commit()

    outcome = await BalanceService(db).recompute(bank.id)
    await db.commit()

    assert outcome.previous_balance == Decimal("1")
    assert outcome.current_balance == Decimal("1250")
    assert await _balance(session_maker, bank.id) == Decimal("1250")


@pytest.mark.asyncio
async def test_opening_balance_is_not_counted_twice(db, session_maker, accounts):
    bank = accounts["bank"]
    tx = make_tx(type="opening_balance", account_id=bank.id, base_amount=Decimal("400"))
    db.add(tx)
    await db.flush()
    await BalanceService(db).apply(tx)
    await db.commit()

    async with session_maker() as session:
        account = await session.get(Account, bank.id)
        assert Decimal(account.opening_balance) == Decimal("1400")
        assert Decimal(account.current_balance) == Decimal("1400")

    outcome = await BalanceService(db).recompute(bank.id)
    await db.commit()
    assert outcome.difference == Decimal("0")
    assert await _balance(session_maker, bank.id) == Decimal("1400")
