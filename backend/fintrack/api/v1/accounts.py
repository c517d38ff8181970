from __future__ import annotations
"""Account routes - CRUD and balance reconciliation."""
from decimal import Decimal
from typing import List, Literal, Optional

from fastapi import APIRouter, Response, status

from fintrack.api.deps import CurrentActor, Database
from fintrack.api.schemas import CamelModel, Money
from fintrack.services.accounts import AccountService


router = APIRouter(prefix="/accounts", tags=["accounts"])

AccountTypeName = Literal["current", "od_cc", "cash", "upi"]


class AccountCreate(CamelModel):
    name: str
    type: AccountTypeName
    opening_balance: Decimal = Decimal("0")
    is_active: bool = True


class AccountUpdate(CamelModel):
    name: Optional[str] = None
    type: Optional[AccountTypeName] = None
    is_active: Optional[bool] = None


class AccountResponse(CamelModel):
    id: int
    name: str
    type: str
    opening_balance: Money
    current_balance: Money
    is_active: bool


class ReconcileResponse(CamelModel):
    account_id: int
    previous_balance: Money
    current_balance: Money
    difference: Money


@router.get("", response_model=List[AccountResponse])
async def list_accounts(actor: CurrentActor, db: Database):
    return await AccountService(db).list_accounts()


@router.post("", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
async def create_account(data: AccountCreate, actor: CurrentActor, db: Database):
    return await AccountService(db).create(actor, data.model_dump())


@router.get("/{account_id}", response_model=AccountResponse)
async def get_account(account_id: int, actor: CurrentActor, db: Database):
    return await AccountService(db).get(account_id)


@router.put("/{account_id}", response_model=AccountResponse)
async def update_account(account_id: int, data: AccountUpdate, actor: CurrentActor, db: Database):
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    return await AccountService(db).update(actor, account_id, changes)


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(account_id: int, actor: CurrentActor, db: Database):
    await AccountService(db).delete(actor, account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{account_id}/reconcile", response_model=ReconcileResponse)
async def reconcile_account(account_id: int, actor: CurrentActor, db: Database):
    """Recompute the cached balance from opening balance plus approved transactions."""
    outcome = await AccountService(db).reconcile(actor, account_id)
    return ReconcileResponse(
        account_id=outcome.account_id,
        previous_balance=outcome.previous_balance,
        current_balance=outcome.current_balance,
        difference=outcome.difference,
    )
