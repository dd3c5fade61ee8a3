from __future__ import annotations

from datetime import datetime, date, timezone
from decimal import Decimal

from sqlalchemy import (
    String,
    Integer,
    BigInteger,
    DateTime,
    Date,
    Boolean,
    ForeignKey,
    Numeric,
    Text,
    Enum,
    Index,
    CheckConstraint,
    inspect,
)
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from fulfillment.app.core.errors import ValidationError
from fulfillment.app.db.base import Base, BigIntPK
from fulfillment.app.db.models.core_types import (
    ActorRole,
    POStatus,
    SupplierStatus,
    InvoiceStatus,
    StockStatus,
    enum_values,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


po_status_enum = Enum(POStatus, name="po_status", values_callable=enum_values)


# ---------- MASTER DATA (owned by catalog / supplier directory) ----------
class Supplier(Base):
    __tablename__ = "suppliers"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    company_name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    contact_name: Mapped[str | None] = mapped_column(String(200))
    email: Mapped[str | None] = mapped_column(String(255))
    status: Mapped[SupplierStatus] = mapped_column(
        Enum(SupplierStatus, name="supplier_status", values_callable=enum_values),
        default=SupplierStatus.pending,
        nullable=False,
    )
    applied_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    rejected_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class Product(Base):
    __tablename__ = "products"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    sku: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    current_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (CheckConstraint("current_price >= 0", name="ck_product_price_nonneg"),)


# ---------- INVENTORY ----------
class InventoryItem(Base):
    __tablename__ = "inventory_items"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="RESTRICT"),
        unique=True,
        nullable=False,
    )
    stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    stock_status: Mapped[StockStatus] = mapped_column(
        Enum(StockStatus, name="stock_status", values_callable=enum_values),
        default=StockStatus.out_of_stock,
        nullable=False,
    )
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)

    product: Mapped[Product] = relationship()

    __table_args__ = (CheckConstraint("stock >= 0", name="ck_inventory_stock_nonneg"),)


class InventoryMovement(Base):
    """Stock credit ledger. One row per completed order, enforced by idempotency_key."""

    __tablename__ = "inventory_movements"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    inventory_item_id: Mapped[int] = mapped_column(
        ForeignKey("inventory_items.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    order_id: Mapped[int] = mapped_column(ForeignKey("purchase_orders.id", ondelete="RESTRICT"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str | None] = mapped_column(String(255))
    idempotency_key: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    happened_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (CheckConstraint("quantity > 0", name="ck_inventory_movement_qty_pos"),)


# ---------- PROCUREMENT ----------
class PurchaseOrder(Base):
    __tablename__ = "purchase_orders"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    supplier_id: Mapped[int] = mapped_column(ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False, index=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price_per_unit: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[POStatus] = mapped_column(
        po_status_enum,
        default=POStatus.pending,
        nullable=False,
    )

    order_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    expected_delivery_date: Mapped[date] = mapped_column(Date, nullable=False)
    actual_delivery_date: Mapped[date | None] = mapped_column(Date)
    delivery_notes: Mapped[str | None] = mapped_column(Text)
    rejection_reason: Mapped[str | None] = mapped_column(Text)

    # Plain column: invoices.order_id carries the foreign key
    invoice_id: Mapped[int | None] = mapped_column(BigInteger, unique=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    supplier: Mapped[Supplier] = relationship()
    product: Mapped[Product] = relationship()
    invoice: Mapped["Invoice | None"] = relationship(back_populates="order", uselist=False)
    events: Mapped[list["PurchaseOrderEvent"]] = relationship(
        back_populates="order",
        order_by="PurchaseOrderEvent.id",
    )

    __mapper_args__ = {"version_id_col": version}
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_po_qty_pos"),
        CheckConstraint("price_per_unit >= 0", name="ck_po_price_nonneg"),
        CheckConstraint(
            "(status = 'Completed' AND invoice_id IS NOT NULL)"
            " OR (status <> 'Completed' AND invoice_id IS NULL)",
            name="ck_po_invoice_iff_completed",
        ),
        Index("ix_purchase_orders_status", "status"),
    )

    @hybrid_property
    def total_price(self) -> Decimal:
        return self.quantity * self.price_per_unit

    @validates("supplier_id", "product_id", "quantity", "price_per_unit", "order_date")
    def _freeze_after_create(self, key, value):
        if not inspect(self).has_identity:
            return value
        if getattr(self, key) != value:
            raise ValidationError(f"{key} cannot change once the order exists")
        return value


class PurchaseOrderEvent(Base):
    __tablename__ = "purchase_order_events"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("purchase_orders.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    from_status: Mapped[POStatus | None] = mapped_column(po_status_enum)
    to_status: Mapped[POStatus] = mapped_column(po_status_enum, nullable=False)
    actor_role: Mapped[ActorRole] = mapped_column(
        Enum(ActorRole, name="actor_role", values_callable=enum_values),
        nullable=False,
    )
    actor_supplier_id: Mapped[int | None] = mapped_column(BigInteger)
    note: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)

    order: Mapped[PurchaseOrder] = relationship(back_populates="events")


# ---------- INVOICING ----------
class Invoice(Base):
    __tablename__ = "invoices"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    invoice_number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("purchase_orders.id", ondelete="RESTRICT"),
        unique=True,
        nullable=False,
    )
    supplier_id: Mapped[int] = mapped_column(ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    status: Mapped[InvoiceStatus] = mapped_column(
        Enum(InvoiceStatus, name="invoice_status", values_callable=enum_values),
        default=InvoiceStatus.pending,
        nullable=False,
    )
    issue_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_date: Mapped[date | None] = mapped_column(Date)
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)

    order: Mapped[PurchaseOrder] = relationship(back_populates="invoice")

    __table_args__ = (CheckConstraint("amount >= 0", name="ck_invoice_amount_nonneg"),)
