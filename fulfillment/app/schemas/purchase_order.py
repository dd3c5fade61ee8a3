from __future__ import annotations

from datetime import date, datetime
from typing import Annotated

from pydantic import Field

from fulfillment.app.db.models.core_types import MAX_PO_QUANTITY, MAX_UNIT_PRICE, ActorRole, POStatus
from fulfillment.app.schemas.common import APIModel, Money
from fulfillment.services.state_machine import TransitionMetadata


class PurchaseOrderCreate(APIModel):
    supplier_id: int
    product_id: int
    quantity: int = Field(gt=0, le=MAX_PO_QUANTITY, strict=True)
    price_per_unit: Annotated[Money, Field(ge=0, le=MAX_UNIT_PRICE)] | None = None
    expected_delivery_date: date


class TransitionRequest(APIModel):
    status: POStatus
    reason: str | None = Field(default=None, max_length=2000)
    actual_delivery_date: date | None = None
    delivery_notes: str | None = Field(default=None, max_length=2000)

    def to_metadata(self) -> TransitionMetadata:
        return TransitionMetadata(
            reason=self.reason,
            actual_delivery_date=self.actual_delivery_date,
            delivery_notes=self.delivery_notes,
        )


class RescheduleRequest(APIModel):
    expected_delivery_date: date


class PurchaseOrderRead(APIModel):
    id: int
    supplier_id: int
    product_id: int
    quantity: int
    price_per_unit: Money
    total_price: Money  # READ ONLY - always quantity * price_per_unit
    status: POStatus
    order_date: datetime
    expected_delivery_date: date
    actual_delivery_date: date | None = None
    delivery_notes: str | None = None
    rejection_reason: str | None = None
    invoice_id: int | None = None


class PurchaseOrderEventRead(APIModel):
    id: int
    order_id: int
    from_status: POStatus | None = None
    to_status: POStatus
    actor_role: ActorRole
    actor_supplier_id: int | None = None
    note: str | None = None
    created_at: datetime
