from __future__ import annotations
"""Invoices with line items."""
from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fintrack.core.errors import NotFound, ValidationFailed
from fintrack.core.permissions import Action, Actor
from fintrack.models.client import Client
from fintrack.models.invoice import Invoice, InvoiceItem, InvoiceStatus
from fintrack.utils.money import to_money

logger = logging.getLogger(__name__)


class InvoiceService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_invoices(self) -> List[Invoice]:
        result = await self.db.execute(
            select(Invoice)
            .options(selectinload(Invoice.client))
            .order_by(Invoice.date.desc(), Invoice.id.desc())
        )
        return list(result.scalars().all())

    async def get(self, invoice_id: int) -> Invoice:
        result = await self.db.execute(
            select(Invoice)
            .options(selectinload(Invoice.client), selectinload(Invoice.items))
            .where(Invoice.id == invoice_id)
            .execution_options(populate_existing=True)
        )
        invoice = result.scalar_one_or_none()
        if not invoice:
            raise NotFound("Invoice not found")
        return invoice

    async def create(
        self,
        actor: Actor,
        invoice_data: Dict[str, Any],
        items: List[Dict[str, Any]]
    ) -> Invoice:
        """
        Create an invoice and its items. Item amounts are quantity x price.
        The total comes from the caller; when absent it is the item sum.
        """
        actor.require(Action.INVOICE_CREATE)

        if not await self.db.get(Client, invoice_data["client_id"]):
            raise NotFound("Client not found")

        existing = await self.db.scalar(
            select(Invoice.id).where(Invoice.invoice_number == invoice_data["invoice_number"])
        )
        if existing:
            raise ValidationFailed(f"Invoice number {invoice_data['invoice_number']} already exists")

        if invoice_data["due_date"] < invoice_data["date"]:
            raise ValidationFailed("dueDate cannot be before the invoice date")

        lines = [
            InvoiceItem(
                description=item["description"],
                quantity=item["quantity"],
                price=item["price"],
                amount=to_money(Decimal(str(item["quantity"])) * Decimal(str(item["price"]))),
            )
            for item in items
        ]
        items_total = sum((line.amount for line in lines), Decimal("0"))

        total: Optional[Decimal] = invoice_data.pop("total_amount", None)
        if total is None:
            total = items_total
        elif to_money(total) != items_total:
            logger.warning(
                f"Invoice {invoice_data['invoice_number']}: total {total} differs from item sum {items_total}"
            )

        invoice = Invoice(**invoice_data, total_amount=to_money(total), items=lines)
        self.db.add(invoice)
        await self.db.commit()
        logger.info(f"Invoice {invoice.invoice_number} created by user {actor.user_id}")
        return await self.get(invoice.id)

    async def update_status(self, actor: Actor, invoice_id: int, status: InvoiceStatus) -> Invoice:
        actor.require(Action.INVOICE_UPDATE_STATUS)
        invoice = await self.get(invoice_id)
        invoice.status = InvoiceStatus(status).value
        await self.db.commit()
        return await self.get(invoice_id)
