from __future__ import annotations
"""Transaction routes - CRUD plus submit / approve / reject."""
import datetime as dt
from decimal import Decimal
from typing import List, Literal, Optional

from fastapi import APIRouter, Query, Response, status

from fintrack.api.deps import CurrentActor, Database
from fintrack.api.schemas import CamelModel, Money
from fintrack.services.transactions import TransactionFilters, TransactionService


router = APIRouter(prefix="/transactions", tags=["transactions"])

TransactionTypeName = Literal["income", "expense", "transfer", "opening_balance"]
TransactionStatusName = Literal["draft", "submitted", "approved", "rejected"]

# Columns that cannot be cleared with an explicit null
REQUIRED_FIELDS = ("date", "amount", "currency", "exchange_rate", "type", "account_id")


class TransactionCreate(CamelModel):
    date: dt.date
    amount: Decimal
    currency: Optional[str] = None
    exchange_rate: Optional[Decimal] = None
    type: TransactionTypeName
    category_id: Optional[int] = None
    account_id: int
    to_account_id: Optional[int] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    attachment_url: Optional[str] = None
    status: Optional[TransactionStatusName] = None


class TransactionUpdate(CamelModel):
    date: Optional[dt.date] = None
    amount: Optional[Decimal] = None
    currency: Optional[str] = None
    exchange_rate: Optional[Decimal] = None
    type: Optional[TransactionTypeName] = None
    category_id: Optional[int] = None
    account_id: Optional[int] = None
    to_account_id: Optional[int] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    attachment_url: Optional[str] = None


class TransactionResponse(CamelModel):
    id: int
    date: dt.date
    amount: Money
    currency: str
    exchange_rate: Money
    base_amount: Money
    type: str
    category_id: Optional[int]
    account_id: int
    to_account_id: Optional[int]
    description: Optional[str]
    notes: Optional[str]
    attachment_url: Optional[str]
    status: str
    created_by: int
    created_at: Optional[dt.datetime]
    approved_by: Optional[int]
    approved_at: Optional[dt.datetime]


@router.get("", response_model=List[TransactionResponse])
async def list_transactions(
    actor: CurrentActor,
    db: Database,
    month: Optional[str] = None,
    account_id: Optional[int] = Query(None, alias="accountId"),
    category_id: Optional[int] = Query(None, alias="categoryId"),
    status_filter: Optional[TransactionStatusName] = Query(None, alias="status"),
):
    """List transactions, newest first, optionally filtered."""
    filters = TransactionFilters(
        month=month,
        account_id=account_id,
        category_id=category_id,
        status=status_filter,
    )
    return await TransactionService(db).list_transactions(filters)


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(transaction_id: int, actor: CurrentActor, db: Database):
    return await TransactionService(db).get(transaction_id)


@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def create_transaction(data: TransactionCreate, actor: CurrentActor, db: Database):
    """
    Create a transaction.
    Data entry users always create drafts; only admins may create approved rows.
    """
    return await TransactionService(db).create(actor, data.model_dump(exclude_none=True))


@router.put("/{transaction_id}", response_model=TransactionResponse)
async def update_transaction(
    transaction_id: int,
    data: TransactionUpdate,
    actor: CurrentActor,
    db: Database
):
    changes = data.model_dump(exclude_unset=True)
    for field in REQUIRED_FIELDS:
        if field in changes and changes[field] is None:
            del changes[field]
    return await TransactionService(db).update(actor, transaction_id, changes)


@router.post("/{transaction_id}/submit", response_model=TransactionResponse)
async def submit_transaction(transaction_id: int, actor: CurrentActor, db: Database):
    return await TransactionService(db).submit(actor, transaction_id)


@router.post("/{transaction_id}/approve", response_model=TransactionResponse)
async def approve_transaction(transaction_id: int, actor: CurrentActor, db: Database):
    return await TransactionService(db).approve(actor, transaction_id)


@router.post("/{transaction_id}/reject", response_model=TransactionResponse)
async def reject_transaction(transaction_id: int, actor: CurrentActor, db: Database):
    return await TransactionService(db).reject(actor, transaction_id)


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(transaction_id: int, actor: CurrentActor, db: Database):
    await TransactionService(db).delete(actor, transaction_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
