"""
Procurement service.

Places purchase orders and serves read access to them. Status changes do
NOT happen here: they all go through
    fulfillment.services.workflow.OrderWorkflowService
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, InvalidOperation

from sqlalchemy import select
from sqlalchemy.orm import Session

from fulfillment.app.core.errors import (
    OrderLocked,
    OrderNotFound,
    SupplierNotApproved,
    Unauthorized,
    ValidationError,
)
from fulfillment.app.db.models.core_types import MAX_ORDER_TOTAL, MAX_PO_QUANTITY, MAX_UNIT_PRICE, POStatus
from fulfillment.app.db.models.models_v1 import PurchaseOrder, PurchaseOrderEvent
from fulfillment.app.schemas.supplier import ApprovedSupplier
from fulfillment.services.catalog import ProductCatalog, SupplierDirectory
from fulfillment.services.role_gate import Actor, RoleGate

logger = logging.getLogger(__name__)


def _as_quantity(value) -> int:
    # bool is an int subclass; 2.5 or "3" are not quantities
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"quantity must be a whole number, got {value!r}")
    if value <= 0 or value > MAX_PO_QUANTITY:
        raise ValidationError(f"quantity must be between 1 and {MAX_PO_QUANTITY}")
    return value


def _as_price(value) -> Decimal:
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid pricePerUnit {value!r}") from None
    if not price.is_finite() or price < 0:
        raise ValidationError("pricePerUnit must be a non-negative amount")
    if price > MAX_UNIT_PRICE:
        raise ValidationError(f"pricePerUnit cannot exceed {MAX_UNIT_PRICE}")
    return price


def create_order(
    db: Session,
    actor: Actor,
    *,
    supplier_id: int,
    product_id: int,
    quantity: int,
    expected_delivery_date: date,
    price_per_unit: Decimal | float | str | None = None,
    role_gate: RoleGate | None = None,
    catalog: ProductCatalog | None = None,
    directory: SupplierDirectory | None = None,
) -> PurchaseOrder:
    role_gate = role_gate or RoleGate()
    catalog = catalog or ProductCatalog(db)
    directory = directory or SupplierDirectory(db)

    decision = role_gate.can_create(actor)
    if not decision.allowed:
        raise Unauthorized(decision.reason)

    quantity = _as_quantity(quantity)
    if expected_delivery_date is None:
        raise ValidationError("expectedDeliveryDate is required")

    # FK checks (fail fast, clear message)
    supplier = directory.lookup(supplier_id)
    if supplier is None:
        raise ValidationError("Invalid supplier_id")
    if not isinstance(supplier, ApprovedSupplier):
        raise SupplierNotApproved(
            f"Supplier {supplier_id} is {supplier.status}; orders need an approved supplier",
            payload={"supplier_id": supplier_id, "supplier_status": supplier.status},
        )

    product = catalog.lookup(product_id)
    if product is None:
        raise ValidationError(f"Invalid product_id {product_id}")

    price = _as_price(product.current_price if price_per_unit is None else price_per_unit)
    total = quantity * price
    if total > MAX_ORDER_TOTAL:
        raise ValidationError(
            f"Order total {total} exceeds the invoiceable maximum {MAX_ORDER_TOTAL}",
            payload={"total_price": str(total)},
        )

    try:
        order = PurchaseOrder(
            supplier_id=supplier.id,
            product_id=product.id,
            quantity=quantity,
            price_per_unit=price,
            status=POStatus.pending,
            expected_delivery_date=expected_delivery_date,
        )
        db.add(order)
        db.flush()  # get order.id

        db.add(
            PurchaseOrderEvent(
                order_id=order.id,
                from_status=None,
                to_status=POStatus.pending,
                actor_role=actor.role,
                actor_supplier_id=actor.supplier_id,
            )
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(order)
    logger.info(
        "order %s placed: supplier=%s product=%s qty=%s total=%s",
        order.id,
        order.supplier_id,
        order.product_id,
        order.quantity,
        order.total_price,
    )
    return order


def get_order(db: Session, order_id: int, *, actor: Actor | None = None) -> PurchaseOrder:
    order = db.get(PurchaseOrder, order_id)
    # other suppliers' orders look exactly like missing ones
    if order is None or (actor is not None and not RoleGate().can_view(actor, order)):
        raise OrderNotFound(f"Purchase order {order_id} not found")
    return order


def list_orders(
    db: Session,
    *,
    status: POStatus | None = None,
    supplier_id: int | None = None,
    product_id: int | None = None,
    actor: Actor | None = None,
) -> list[PurchaseOrder]:
    if actor is not None and not actor.is_admin:
        if supplier_id is not None and supplier_id != actor.supplier_id:
            return []
        supplier_id = actor.supplier_id

    stmt = select(PurchaseOrder).order_by(PurchaseOrder.id.desc())
    if status is not None:
        stmt = stmt.where(PurchaseOrder.status == status)
    if supplier_id is not None:
        stmt = stmt.where(PurchaseOrder.supplier_id == supplier_id)
    if product_id is not None:
        stmt = stmt.where(PurchaseOrder.product_id == product_id)
    return list(db.execute(stmt).scalars().all())


def list_events(db: Session, order_id: int, *, actor: Actor | None = None) -> list[PurchaseOrderEvent]:
    get_order(db, order_id, actor=actor)
    return list(
        db.execute(
            select(PurchaseOrderEvent)
            .where(PurchaseOrderEvent.order_id == order_id)
            .order_by(PurchaseOrderEvent.id)
        )
        .scalars()
        .all()
    )


def reschedule_delivery(
    db: Session,
    order_id: int,
    expected_delivery_date: date,
    *,
    actor: Actor,
) -> PurchaseOrder:
    """expectedDeliveryDate stays editable only while the order is Pending."""
    try:
        order = db.get(PurchaseOrder, order_id, with_for_update=True, populate_existing=True)
        if order is None:
            raise OrderNotFound(f"Purchase order {order_id} not found")

        decision = RoleGate().can_reschedule(actor, order)
        if not decision.allowed:
            raise Unauthorized(decision.reason)

        if POStatus(order.status) is not POStatus.pending:
            raise OrderLocked(
                f"Order {order_id} is {POStatus(order.status).value}; delivery date is fixed",
                payload={"order_id": order_id, "status": POStatus(order.status).value},
            )

        order.expected_delivery_date = expected_delivery_date
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(order)
    logger.info("order %s rescheduled to %s", order.id, order.expected_delivery_date)
    return order
