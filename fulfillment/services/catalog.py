"""
Read-only views over collaborator data (product catalog, supplier directory).

The workflow never writes here; stock is the only product-side field it
touches, through InventoryReconciler.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.orm import Session

from fulfillment.app.db.models.models_v1 import Product, Supplier
from fulfillment.app.schemas.supplier import SupplierRecord, supplier_record_adapter


@dataclass(frozen=True)
class ProductInfo:
    id: int
    name: str
    current_price: Decimal


class ProductCatalog:
    def __init__(self, db: Session) -> None:
        self.db = db

    def lookup(self, product_id: int) -> ProductInfo | None:
        p = self.db.get(Product, product_id)
        if p is None or not p.active:
            return None
        return ProductInfo(id=int(p.id), name=p.name, current_price=Decimal(p.current_price))


class SupplierDirectory:
    def __init__(self, db: Session) -> None:
        self.db = db

    def lookup(self, supplier_id: int) -> SupplierRecord | None:
        s = self.db.get(Supplier, supplier_id)
        if s is None:
            return None
        return supplier_record_adapter.validate_python(
            {
                "id": s.id,
                "status": s.status.value,
                "company_name": s.company_name,
                "contact_name": s.contact_name,
                "email": s.email,
                "applied_at": s.applied_at,
                "approved_at": s.approved_at,
                "rejected_at": s.rejected_at,
            }
        )
