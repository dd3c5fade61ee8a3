"""
Role gate.

Single policy table deciding which actor role may move a purchase order
along which edge. Every client (supplier portal, admin panel) goes through
the same table; nothing here touches the database.
"""

from __future__ import annotations

from dataclasses import dataclass

from fulfillment.app.db.models.core_types import ActorRole, POStatus
from fulfillment.app.db.models.models_v1 import PurchaseOrder


@dataclass(frozen=True)
class Actor:
    role: ActorRole
    supplier_id: int | None = None

    @property
    def is_admin(self) -> bool:
        return self.role is ActorRole.admin


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str | None = None


ALLOWED = Decision(allowed=True)


def denied(reason: str) -> Decision:
    return Decision(allowed=False, reason=reason)


ROLE_TRANSITIONS: dict[ActorRole, frozenset[tuple[POStatus, POStatus]]] = {
    ActorRole.supplier: frozenset(
        {
            (POStatus.pending, POStatus.accepted),
            (POStatus.pending, POStatus.rejected),
            (POStatus.accepted, POStatus.dispatched),
            (POStatus.dispatched, POStatus.delivered),
        }
    ),
    ActorRole.admin: frozenset(
        {
            # physical receipt confirmed by the warehouse
            (POStatus.delivered, POStatus.completed),
            # administrative cancellation
            (POStatus.pending, POStatus.rejected),
        }
    ),
}


class RoleGate:
    def __init__(self, policy: dict[ActorRole, frozenset[tuple[POStatus, POStatus]]] | None = None) -> None:
        self.policy = policy if policy is not None else ROLE_TRANSITIONS

    def authorize(self, actor: Actor, order: PurchaseOrder, requested: POStatus) -> Decision:
        """
        Allowed when the actor's role owns the edge current -> requested.

        A retry (requested == current status) is allowed for any role that
        could have produced that status, so replays by the original caller
        stay safe while other roles are still refused.
        """
        ownership = self._check_ownership(actor, order)
        if ownership is not None:
            return ownership

        edges = self.policy.get(actor.role, frozenset())
        current = POStatus(order.status)

        if requested == current:
            if any(target == requested for _, target in edges):
                return ALLOWED
            return denied(f"{actor.role.value} may not request status {requested.value}")

        if (current, requested) in edges:
            return ALLOWED
        return denied(
            f"{actor.role.value} may not move an order from {current.value} to {requested.value}"
        )

    def can_create(self, actor: Actor) -> Decision:
        if actor.is_admin:
            return ALLOWED
        return denied("Only Admin may place purchase orders")

    def can_view(self, actor: Actor, order: PurchaseOrder) -> bool:
        return self._check_ownership(actor, order) is None

    def can_reschedule(self, actor: Actor, order: PurchaseOrder) -> Decision:
        ownership = self._check_ownership(actor, order)
        if ownership is not None:
            return ownership
        return ALLOWED

    @staticmethod
    def _check_ownership(actor: Actor, order: PurchaseOrder) -> Decision | None:
        if actor.role is not ActorRole.supplier:
            return None
        if actor.supplier_id is None:
            return denied("Supplier actor has no supplier id")
        if int(actor.supplier_id) != int(order.supplier_id):
            return denied("Supplier does not own this order")
        return None
