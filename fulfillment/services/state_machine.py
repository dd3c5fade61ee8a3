from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime

from fulfillment.app.core.errors import InvalidTransition, ValidationError
from fulfillment.app.db.models.core_types import TERMINAL_PO_STATUSES, POStatus
from fulfillment.app.db.models.models_v1 import PurchaseOrder

logger = logging.getLogger(__name__)


# Pending -> Accepted -> Dispatched -> Delivered -> Completed
# Pending -> Rejected
ALLOWED_TRANSITIONS: dict[POStatus, frozenset[POStatus]] = {
    POStatus.pending: frozenset({POStatus.accepted, POStatus.rejected}),
    POStatus.accepted: frozenset({POStatus.dispatched}),
    POStatus.dispatched: frozenset({POStatus.delivered}),
    POStatus.delivered: frozenset({POStatus.completed}),
    POStatus.completed: frozenset(),
    POStatus.rejected: frozenset(),
}


@dataclass(frozen=True)
class TransitionMetadata:
    reason: str | None = None
    actual_delivery_date: date | None = None
    delivery_notes: str | None = None

    def normalized(self) -> "TransitionMetadata":
        return TransitionMetadata(
            reason=(self.reason or "").strip() or None,
            actual_delivery_date=self.actual_delivery_date,
            delivery_notes=(self.delivery_notes or "").strip() or None,
        )


@dataclass(frozen=True)
class TransitionPlan:
    order_id: int
    from_status: POStatus
    to_status: POStatus
    metadata: TransitionMetadata

    @property
    def is_noop(self) -> bool:
        return self.from_status == self.to_status

    @property
    def completes_order(self) -> bool:
        return not self.is_noop and self.to_status is POStatus.completed

    @property
    def note(self) -> str | None:
        return self.metadata.reason or self.metadata.delivery_notes


class OrderStateMachine:
    """
    Validates and applies purchase order status changes.

    plan() only validates; apply() mutates the ORM instance and leaves
    committing to the caller so side effects share the same transaction.
    """

    def ensure_edge(self, current: POStatus, requested: POStatus) -> None:
        current = POStatus(current)
        if requested == current:
            return
        if requested not in ALLOWED_TRANSITIONS[current]:
            closed = " (order is closed)" if current in TERMINAL_PO_STATUSES else ""
            raise InvalidTransition(
                f"Cannot move order from {current.value} to {requested.value}{closed}",
                payload={"from_status": current.value, "to_status": requested.value},
            )

    def plan(
        self,
        order: PurchaseOrder,
        requested: POStatus,
        metadata: TransitionMetadata | None = None,
    ) -> TransitionPlan:
        current = POStatus(order.status)
        self.ensure_edge(current, requested)
        meta = (metadata or TransitionMetadata()).normalized()

        if requested != current:
            self._validate_metadata(order, requested, meta)

        return TransitionPlan(
            order_id=int(order.id),
            from_status=current,
            to_status=requested,
            metadata=meta,
        )

    def apply(self, order: PurchaseOrder, plan: TransitionPlan, *, at: datetime) -> PurchaseOrder:
        if plan.is_noop:
            return order
        if POStatus(order.status) != plan.from_status:
            raise InvalidTransition(
                f"Order moved to {POStatus(order.status).value} since the transition was planned"
            )

        meta = plan.metadata
        if plan.to_status is POStatus.rejected:
            order.rejection_reason = meta.reason
        elif plan.to_status is POStatus.delivered:
            order.actual_delivery_date = meta.actual_delivery_date
            order.delivery_notes = meta.delivery_notes
        elif plan.to_status is POStatus.completed and meta.delivery_notes:
            if order.delivery_notes:
                order.delivery_notes = f"{order.delivery_notes}\n{meta.delivery_notes}"
            else:
                order.delivery_notes = meta.delivery_notes

        order.status = plan.to_status
        order.updated_at = at
        logger.debug("order %s: %s -> %s", plan.order_id, plan.from_status.value, plan.to_status.value)
        return order

    @staticmethod
    def _validate_metadata(order: PurchaseOrder, requested: POStatus, meta: TransitionMetadata) -> None:
        if requested is not POStatus.rejected and meta.reason:
            raise ValidationError("reason is only accepted when rejecting an order")

        if requested not in (POStatus.delivered, POStatus.completed) and meta.delivery_notes:
            raise ValidationError("deliveryNotes are only accepted on Delivered or Completed")

        if requested is not POStatus.delivered and meta.actual_delivery_date is not None:
            raise ValidationError("actualDeliveryDate is only accepted on Delivered")

        if requested is POStatus.rejected and not meta.reason:
            raise ValidationError("A reason is required to reject an order")

        if requested is POStatus.delivered and meta.actual_delivery_date is None:
            raise ValidationError("actualDeliveryDate is required to mark an order Delivered")

        if requested is POStatus.completed and order.actual_delivery_date is None:
            raise ValidationError("Order has no recorded delivery date")
