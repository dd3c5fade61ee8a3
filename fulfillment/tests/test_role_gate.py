import pytest

from fulfillment.app.db.models.core_types import ActorRole, POStatus
from fulfillment.app.db.models.models_v1 import PurchaseOrder
from fulfillment.services.role_gate import ROLE_TRANSITIONS, Actor, RoleGate

ADMIN = Actor(role=ActorRole.admin)
OWNER = Actor(role=ActorRole.supplier, supplier_id=1)
STRANGER = Actor(role=ActorRole.supplier, supplier_id=2)


def _order(status: POStatus, supplier_id: int = 1) -> PurchaseOrder:
    return PurchaseOrder(supplier_id=supplier_id, product_id=1, quantity=1, status=status)


@pytest.mark.parametrize(
    "current, requested",
    [
        (POStatus.pending, POStatus.accepted),
        (POStatus.pending, POStatus.rejected),
        (POStatus.accepted, POStatus.dispatched),
        (POStatus.dispatched, POStatus.delivered),
    ],
)
def test_supplier_drives_fulfilment_edges(current, requested):
    assert RoleGate().authorize(OWNER, _order(current), requested).allowed


@pytest.mark.parametrize(
    "current, requested",
    [
        (POStatus.delivered, POStatus.completed),
        (POStatus.pending, POStatus.rejected),
    ],
)
def test_admin_edges(current, requested):
    assert RoleGate().authorize(ADMIN, _order(current), requested).allowed


def test_supplier_cannot_complete():
    decision = RoleGate().authorize(OWNER, _order(POStatus.delivered), POStatus.completed)
    assert not decision.allowed
    assert "Delivered" in decision.reason


def test_admin_cannot_accept():
    decision = RoleGate().authorize(ADMIN, _order(POStatus.pending), POStatus.accepted)
    assert not decision.allowed


def test_supplier_cannot_touch_other_suppliers_order():
    decision = RoleGate().authorize(STRANGER, _order(POStatus.pending), POStatus.accepted)
    assert not decision.allowed
    assert decision.reason == "Supplier does not own this order"


def test_supplier_without_id_is_denied():
    actor = Actor(role=ActorRole.supplier)
    assert not RoleGate().authorize(actor, _order(POStatus.pending), POStatus.accepted).allowed


def test_retry_allowed_only_for_a_role_that_reaches_the_status():
    gate = RoleGate()
    assert gate.authorize(ADMIN, _order(POStatus.completed), POStatus.completed).allowed
    assert gate.authorize(OWNER, _order(POStatus.accepted), POStatus.accepted).allowed
    assert not gate.authorize(OWNER, _order(POStatus.completed), POStatus.completed).allowed
    assert not gate.authorize(ADMIN, _order(POStatus.dispatched), POStatus.dispatched).allowed


def test_only_admin_creates_orders():
    gate = RoleGate()
    assert gate.can_create(ADMIN).allowed
    assert not gate.can_create(OWNER).allowed


def test_visibility_and_reschedule_follow_ownership():
    gate = RoleGate()
    order = _order(POStatus.pending)
    assert gate.can_view(ADMIN, order)
    assert gate.can_view(OWNER, order)
    assert not gate.can_view(STRANGER, order)
    assert gate.can_reschedule(OWNER, order).allowed
    assert not gate.can_reschedule(STRANGER, order).allowed


def test_completed_is_reachable_by_admin_only():
    owners = [role for role, edges in ROLE_TRANSITIONS.items() if any(t is POStatus.completed for _, t in edges)]
    assert owners == [ActorRole.admin]


def test_custom_policy_table():
    gate = RoleGate(policy={ActorRole.admin: frozenset({(POStatus.pending, POStatus.accepted)})})
    assert gate.authorize(ADMIN, _order(POStatus.pending), POStatus.accepted).allowed
    assert not gate.authorize(OWNER, _order(POStatus.pending), POStatus.accepted).allowed
