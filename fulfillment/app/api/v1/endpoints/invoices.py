from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fulfillment.app.api.deps import get_actor, get_db
from fulfillment.app.db.models.core_types import InvoiceStatus
from fulfillment.app.schemas.invoice import InvoiceRead
from fulfillment.services import invoicing
from fulfillment.services.role_gate import Actor

router = APIRouter(prefix="/invoices")


@router.get("", response_model=list[InvoiceRead])
def list_invoices(
    supplier_id: int | None = None,
    status: InvoiceStatus | None = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    return invoicing.list_invoices(db, supplier_id=supplier_id, status=status, actor=actor)


@router.get("/{invoice_id}", response_model=InvoiceRead)
def get_invoice(invoice_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return invoicing.get_invoice(db, invoice_id, actor=actor)
