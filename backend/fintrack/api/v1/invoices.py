from __future__ import annotations
"""Invoice routes."""
import datetime as dt
from decimal import Decimal
from typing import List, Literal, Optional

from fastapi import APIRouter, status
from pydantic import Field

from fintrack.api.deps import CurrentActor, Database
from fintrack.api.schemas import CamelModel, Money
from fintrack.services.invoices import InvoiceService


router = APIRouter(prefix="/invoices", tags=["invoices"])

InvoiceStatusName = Literal["draft", "sent", "paid", "overdue"]


class InvoiceItemCreate(CamelModel):
    description: str
    quantity: Decimal = Field(gt=0)
    price: Decimal = Field(ge=0)


class InvoiceCreate(CamelModel):
    invoice_number: str
    client_id: int
    date: dt.date
    due_date: dt.date
    total_amount: Optional[Decimal] = None
    status: InvoiceStatusName = "draft"
    notes: Optional[str] = None
    items: List[InvoiceItemCreate] = Field(min_length=1)


class InvoiceStatusUpdate(CamelModel):
    status: InvoiceStatusName


class InvoiceItemResponse(CamelModel):
    id: int
    description: str
    quantity: Money
    price: Money
    amount: Money


class ClientSummary(CamelModel):
    id: int
    name: str


class InvoiceResponse(CamelModel):
    id: int
    invoice_number: str
    client_id: int
    client: Optional[ClientSummary] = None
    date: dt.date
    due_date: dt.date
    total_amount: Money
    status: str
    notes: Optional[str]
    created_at: Optional[dt.datetime]


class InvoiceDetailResponse(InvoiceResponse):
    items: List[InvoiceItemResponse] = []


@router.get("", response_model=List[InvoiceResponse])
async def list_invoices(actor: CurrentActor, db: Database):
    return await InvoiceService(db).list_invoices()


@router.get("/{invoice_id}", response_model=InvoiceDetailResponse)
async def get_invoice(invoice_id: int, actor: CurrentActor, db: Database):
    return await InvoiceService(db).get(invoice_id)


@router.post("", response_model=InvoiceDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_invoice(data: InvoiceCreate, actor: CurrentActor, db: Database):
    """Create an invoice with its items."""
    invoice_data = data.model_dump(exclude={"items"})
    items = [item.model_dump() for item in data.items]
    return await InvoiceService(db).create(actor, invoice_data, items)


@router.patch("/{invoice_id}/status", response_model=InvoiceDetailResponse)
async def update_invoice_status(
    invoice_id: int,
    data: InvoiceStatusUpdate,
    actor: CurrentActor,
    db: Database
):
    return await InvoiceService(db).update_status(actor, invoice_id, data.status)
