from __future__ import annotations

import logging
from datetime import date, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from fulfillment.app.core.config import settings
from fulfillment.app.core.errors import DuplicateCompletion, InvoiceNotFound
from fulfillment.app.db.models.core_types import InvoiceStatus
from fulfillment.app.db.models.models_v1 import Invoice, PurchaseOrder
from fulfillment.services.role_gate import Actor

logger = logging.getLogger(__name__)


def invoice_number_for(order_id: int, issued_on: date) -> str:
    return f"INV-{issued_on.year}-{int(order_id):04d}"


class InvoiceIssuer:
    """Issues the single invoice owed for a completed purchase order."""

    def __init__(self, grace_period_days: int | None = None) -> None:
        self.grace_period_days = (
            grace_period_days if grace_period_days is not None else settings.INVOICE_GRACE_PERIOD_DAYS
        )

    def issue_invoice(self, db: Session, order: PurchaseOrder, *, at: datetime) -> Invoice:
        if order.invoice_id is not None:
            raise DuplicateCompletion(
                f"Order {order.id} already has invoice {order.invoice_id}",
                payload={"order_id": order.id, "invoice_id": order.invoice_id},
            )

        existing = db.execute(select(Invoice).where(Invoice.order_id == order.id)).scalar_one_or_none()
        if existing is not None:
            raise DuplicateCompletion(
                f"Invoice {existing.invoice_number} already issued for order {order.id}",
                payload={"order_id": order.id, "invoice_id": existing.id},
            )

        issued_on = at.date()
        invoice = Invoice(
            invoice_number=invoice_number_for(order.id, issued_on),
            order_id=order.id,
            supplier_id=order.supplier_id,
            amount=order.total_price,
            status=InvoiceStatus.pending,
            issue_date=issued_on,
            due_date=issued_on + timedelta(days=self.grace_period_days),
            notes=f"Invoice for Purchase Order {order.id}",
        )
        db.add(invoice)
        db.flush()  # assigns invoice.id; unique order_id fails here on a lost race

        logger.info(
            "invoice issued: %s order=%s amount=%s due=%s",
            invoice.invoice_number,
            order.id,
            invoice.amount,
            invoice.due_date,
        )
        return invoice


def get_invoice(db: Session, invoice_id: int, *, actor: Actor | None = None) -> Invoice:
    invoice = db.get(Invoice, invoice_id)
    if invoice is None:
        raise InvoiceNotFound(f"Invoice {invoice_id} not found")
    if actor is not None and not actor.is_admin and invoice.supplier_id != actor.supplier_id:
        raise InvoiceNotFound(f"Invoice {invoice_id} not found")
    return invoice


def list_invoices(
    db: Session,
    *,
    supplier_id: int | None = None,
    status: InvoiceStatus | None = None,
    actor: Actor | None = None,
) -> list[Invoice]:
    if actor is not None and not actor.is_admin:
        if supplier_id is not None and supplier_id != actor.supplier_id:
            return []
        supplier_id = actor.supplier_id

    stmt = select(Invoice).order_by(Invoice.id.desc())
    if supplier_id is not None:
        stmt = stmt.where(Invoice.supplier_id == supplier_id)
    if status is not None:
        stmt = stmt.where(Invoice.status == status)
    return list(db.execute(stmt).scalars().all())
