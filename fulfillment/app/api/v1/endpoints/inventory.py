from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fulfillment.app.api.deps import get_actor, get_db
from fulfillment.app.schemas.inventory import InventoryItemRead
from fulfillment.services.inventory import list_inventory
from fulfillment.services.role_gate import Actor

router = APIRouter(prefix="/inventory")


@router.get("", response_model=list[InventoryItemRead])
def get_inventory(
    product_id: int | None = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    """
    Inventory (READ ONLY)
    - stock only moves when a purchase order is Completed
    """
    return list_inventory(db, product_id=product_id)
