from __future__ import annotations

from typing import Generator

from fastapi import Header

from fulfillment.app.core.errors import Unauthenticated
from fulfillment.app.db.models.core_types import ActorRole
from fulfillment.app.db.session import SessionLocal
from fulfillment.services.role_gate import Actor


def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_actor(
    x_actor_role: str | None = Header(default=None, alias="X-Actor-Role"),
    x_actor_supplier_id: int | None = Header(default=None, alias="X-Actor-Supplier-Id"),
) -> Actor:
    """
    Caller identity, as forwarded by the authentication layer in front of us.
    Token issuance and verification happen upstream.
    """
    if not x_actor_role:
        raise Unauthenticated("Missing X-Actor-Role header")
    try:
        role = ActorRole(x_actor_role.strip())
    except ValueError:
        raise Unauthenticated(f"Unknown actor role {x_actor_role!r}") from None

    if role is ActorRole.supplier:
        if x_actor_supplier_id is None:
            raise Unauthenticated("Supplier actors must send X-Actor-Supplier-Id")
        return Actor(role=role, supplier_id=int(x_actor_supplier_id))
    return Actor(role=role)
