"""
Purchase order workflow.

Single entry point for status changes. One call = one transaction:

    load (FOR UPDATE) -> edge check -> role gate -> metadata check
    -> [Completed only] stock credit + invoice
    -> status update (guarded by the version column) + audit event
    -> commit

Any failure rolls the whole unit back; the order keeps its previous status
and the caller may retry.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from fulfillment.app.core.errors import (
    AppError,
    DuplicateCompletion,
    InvalidTransition,
    OrderNotFound,
    Unauthorized,
    ValidationError,
)
from fulfillment.app.db.models.core_types import POStatus
from fulfillment.app.db.models.models_v1 import PurchaseOrder, PurchaseOrderEvent
from fulfillment.services.inventory import InventoryReconciler
from fulfillment.services.invoicing import InvoiceIssuer
from fulfillment.services.role_gate import Actor, RoleGate
from fulfillment.services.state_machine import OrderStateMachine, TransitionMetadata

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_status(value: POStatus | str) -> POStatus:
    try:
        return POStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown status {value!r}") from None


class OrderWorkflowService:
    def __init__(
        self,
        db: Session,
        *,
        role_gate: RoleGate | None = None,
        state_machine: OrderStateMachine | None = None,
        reconciler: InventoryReconciler | None = None,
        issuer: InvoiceIssuer | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.db = db
        self.role_gate = role_gate or RoleGate()
        self.state_machine = state_machine or OrderStateMachine()
        self.reconciler = reconciler or InventoryReconciler()
        self.issuer = issuer or InvoiceIssuer()
        self.clock = clock

    def request_transition(
        self,
        actor: Actor,
        order_id: int,
        requested_status: POStatus | str,
        metadata: TransitionMetadata | None = None,
    ) -> PurchaseOrder:
        requested = parse_status(requested_status)
        db = self.db

        try:
            order = self._load_for_update(order_id)
            self.state_machine.ensure_edge(order.status, requested)

            decision = self.role_gate.authorize(actor, order, requested)
            if not decision.allowed:
                raise Unauthorized(decision.reason)

            plan = self.state_machine.plan(order, requested, metadata)
            if plan.is_noop:
                # retry of an applied transition: release the lock, change nothing
                db.rollback()
                logger.info("order %s already %s; retry ignored", order_id, requested.value)
                return order

            at = self.clock()
            if plan.completes_order:
                self.reconciler.credit_stock(db, order, at=at)
                invoice = self.issuer.issue_invoice(db, order, at=at)
                order.invoice_id = invoice.id

            self.state_machine.apply(order, plan, at=at)
            db.add(
                PurchaseOrderEvent(
                    order_id=order.id,
                    from_status=plan.from_status,
                    to_status=plan.to_status,
                    actor_role=actor.role,
                    actor_supplier_id=actor.supplier_id,
                    note=plan.note,
                    created_at=at,
                )
            )
            db.commit()

        except AppError:
            db.rollback()
            raise
        except (StaleDataError, IntegrityError) as exc:
            db.rollback()
            logger.warning(
                "concurrent update lost on order %s -> %s: %s",
                order_id,
                requested.value,
                exc.__class__.__name__,
            )
            if requested is POStatus.completed:
                raise DuplicateCompletion(
                    f"Order {order_id} was completed by a concurrent request",
                    payload={"order_id": order_id},
                ) from exc
            raise InvalidTransition(
                f"Order {order_id} changed concurrently; reload and retry",
                payload={"order_id": order_id},
            ) from exc
        except Exception:
            db.rollback()
            raise

        db.refresh(order)
        logger.info(
            "order %s: %s -> %s by %s",
            order.id,
            plan.from_status.value,
            plan.to_status.value,
            actor.role.value,
        )
        return order

    def _load_for_update(self, order_id: int) -> PurchaseOrder:
        order = self.db.get(
            PurchaseOrder,
            order_id,
            with_for_update=True,
            populate_existing=True,
        )
        if order is None:
            raise OrderNotFound(f"Purchase order {order_id} not found")
        return order
