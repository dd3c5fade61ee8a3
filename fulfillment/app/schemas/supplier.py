from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class _SupplierBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    company_name: str
    contact_name: str | None = None
    email: str | None = None
    applied_at: datetime | None = None


class PendingSupplier(_SupplierBase):
    """Application received, not reviewed yet."""

    status: Literal["pending"] = "pending"


class ApprovedSupplier(_SupplierBase):
    status: Literal["approved"] = "approved"
    approved_at: datetime | None = None


class RejectedSupplier(_SupplierBase):
    status: Literal["rejected"] = "rejected"
    rejected_at: datetime | None = None


SupplierRecord = Annotated[
    Union[PendingSupplier, ApprovedSupplier, RejectedSupplier],
    Field(discriminator="status"),
]

supplier_record_adapter: TypeAdapter[SupplierRecord] = TypeAdapter(SupplierRecord)
