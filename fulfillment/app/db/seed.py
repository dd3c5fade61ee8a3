from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select

from fulfillment.app.core.config import settings
from fulfillment.app.core.log import setup_logging
from fulfillment.app.db.session import SessionLocal
from fulfillment.app.db.models.models_v1 import Supplier, Product, InventoryItem
from fulfillment.app.db.models.core_types import SupplierStatus, StockStatus

logger = logging.getLogger(__name__)


def run_seed():
    db = SessionLocal()
    try:
        now = datetime.now(timezone.utc)

        # 1) Approved supplier + one application still under review
        supplier = db.scalar(select(Supplier).where(Supplier.company_name == "Kalana Timber Works"))
        if not supplier:
            supplier = Supplier(
                company_name="Kalana Timber Works",
                contact_name="Procurement Desk",
                email="orders@timberworks.example",
                status=SupplierStatus.approved,
                approved_at=now,
            )
            db.add(supplier)

        applicant = db.scalar(select(Supplier).where(Supplier.company_name == "Coastal Upholstery"))
        if not applicant:
            db.add(
                Supplier(
                    company_name="Coastal Upholstery",
                    contact_name="Sales",
                    email="hello@coastal.example",
                    status=SupplierStatus.pending,
                )
            )
        db.commit()

        # 2) Products with their inventory rows
        for sku, name, price in (
            ("CHR-OAK-01", "Oak Dining Chair", Decimal("500.00")),
            ("TBL-TEAK-06", "Teak Dining Table", Decimal("2400.00")),
        ):
            product = db.scalar(select(Product).where(Product.sku == sku))
            if not product:
                product = Product(sku=sku, name=name, current_price=price, active=True)
                db.add(product)
                db.flush()
            item = db.scalar(select(InventoryItem).where(InventoryItem.product_id == product.id))
            if not item:
                db.add(
                    InventoryItem(
                        product_id=product.id,
                        stock=0,
                        stock_status=StockStatus.out_of_stock,
                        last_updated=now,
                    )
                )
        db.commit()

        logger.info("seed ok: suppliers, products and inventory in place")
    finally:
        db.close()


if __name__ == "__main__":
    setup_logging(settings.LOG_LEVEL)
    run_seed()
