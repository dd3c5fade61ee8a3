from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fulfillment.app.api.deps import get_actor, get_db
from fulfillment.app.db.models.core_types import POStatus
from fulfillment.app.schemas.purchase_order import (
    PurchaseOrderCreate,
    PurchaseOrderEventRead,
    PurchaseOrderRead,
    RescheduleRequest,
    TransitionRequest,
)
from fulfillment.services import procurement
from fulfillment.services.role_gate import Actor
from fulfillment.services.workflow import OrderWorkflowService

router = APIRouter(prefix="/purchase-orders")


@router.get("", response_model=list[PurchaseOrderRead])
def list_pos(
    status: POStatus | None = None,
    supplier_id: int | None = None,
    product_id: int | None = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    return procurement.list_orders(
        db,
        status=status,
        supplier_id=supplier_id,
        product_id=product_id,
        actor=actor,
    )


@router.get("/{po_id}", response_model=PurchaseOrderRead)
def get_po(po_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return procurement.get_order(db, po_id, actor=actor)


@router.post("", response_model=PurchaseOrderRead, status_code=201)
def create_po(payload: PurchaseOrderCreate, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return procurement.create_order(
        db,
        actor,
        supplier_id=payload.supplier_id,
        product_id=payload.product_id,
        quantity=payload.quantity,
        price_per_unit=payload.price_per_unit,
        expected_delivery_date=payload.expected_delivery_date,
    )


@router.post("/{po_id}/transitions", response_model=PurchaseOrderRead)
def request_transition(
    po_id: int,
    payload: TransitionRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    service = OrderWorkflowService(db)
    return service.request_transition(actor, po_id, payload.status, payload.to_metadata())


@router.patch("/{po_id}/expected-delivery", response_model=PurchaseOrderRead)
def reschedule_po(
    po_id: int,
    payload: RescheduleRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    return procurement.reschedule_delivery(db, po_id, payload.expected_delivery_date, actor=actor)


@router.get("/{po_id}/events", response_model=list[PurchaseOrderEventRead])
def list_po_events(po_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return procurement.list_events(db, po_id, actor=actor)
