from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from fulfillment.app.core.config import settings
from fulfillment.app.core.errors import DuplicateCompletion, InvalidTransition, InventoryItemNotFound
from fulfillment.app.db.models.core_types import POStatus, StockStatus
from fulfillment.app.db.models.models_v1 import InventoryItem, InventoryMovement, PurchaseOrder

logger = logging.getLogger(__name__)


def classify_stock(stock: int, low_stock_threshold: int) -> StockStatus:
    if stock <= 0:
        return StockStatus.out_of_stock
    if stock < low_stock_threshold:
        return StockStatus.low_stock
    return StockStatus.in_stock


def credit_idempotency_key(order_id: int) -> str:
    return f"PO-CREDIT:{int(order_id)}"


class InventoryReconciler:
    """
    Credits stock for a purchase order reaching Completed.

    Business rule:
        stock += order.quantity, exactly once per order

    Guards:
    - order.invoice_id must still be null (a completed order already credited)
    - no movement row may exist for the order's credit key
    - the inventory row is locked FOR UPDATE
    - inventory_movements.idempotency_key is unique, so a concurrent credit
      that slipped past the guards fails at commit
    """

    def __init__(self, low_stock_threshold: int | None = None) -> None:
        self.low_stock_threshold = (
            low_stock_threshold if low_stock_threshold is not None else settings.LOW_STOCK_THRESHOLD
        )

    def credit_stock(self, db: Session, order: PurchaseOrder, *, at: datetime) -> InventoryItem:
        if order.invoice_id is not None:
            raise DuplicateCompletion(
                f"Order {order.id} already has invoice {order.invoice_id}; stock was credited",
                payload={"order_id": order.id},
            )
        if POStatus(order.status) is not POStatus.delivered:
            raise InvalidTransition(f"Order {order.id} is not Delivered; stock cannot be credited")

        key = credit_idempotency_key(order.id)
        already = db.execute(
            select(InventoryMovement.id).where(InventoryMovement.idempotency_key == key)
        ).scalar_one_or_none()
        if already is not None:
            raise DuplicateCompletion(
                f"Stock for order {order.id} was already credited",
                payload={"order_id": order.id},
            )

        item = (
            db.execute(
                select(InventoryItem)
                .where(InventoryItem.product_id == order.product_id)
                .with_for_update()
            )
            .scalars()
            .first()
        )
        if item is None:
            raise InventoryItemNotFound(
                f"No inventory item for product {order.product_id}",
                payload={"order_id": order.id, "product_id": order.product_id},
            )

        item.stock += order.quantity
        item.stock_status = classify_stock(item.stock, self.low_stock_threshold)
        item.last_updated = at

        db.add(
            InventoryMovement(
                inventory_item_id=item.id,
                order_id=order.id,
                quantity=order.quantity,
                reason="PURCHASE_ORDER_COMPLETED",
                idempotency_key=key,
                happened_at=at,
            )
        )
        logger.info(
            "stock credited: order=%s product=%s qty=%s new_stock=%s",
            order.id,
            order.product_id,
            order.quantity,
            item.stock,
        )
        return item


def list_inventory(db: Session, *, product_id: int | None = None) -> list[InventoryItem]:
    stmt = select(InventoryItem).order_by(InventoryItem.product_id)
    if product_id is not None:
        stmt = stmt.where(InventoryItem.product_id == product_id)
    return list(db.execute(stmt).scalars().all())
