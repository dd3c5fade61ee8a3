"""purchase order workflow schema

Revision ID: 3f2a9c1d7b10
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3f2a9c1d7b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PK = sa.BigInteger()

# Types are created once, explicitly; tables only reference them
PO_STATUS = postgresql.ENUM(
    "Pending", "Accepted", "Dispatched", "Delivered", "Completed", "Rejected",
    name="po_status",
    create_type=False,
)
SUPPLIER_STATUS = postgresql.ENUM("pending", "approved", "rejected", name="supplier_status", create_type=False)
STOCK_STATUS = postgresql.ENUM("In Stock", "Low Stock", "Out of Stock", name="stock_status", create_type=False)
INVOICE_STATUS = postgresql.ENUM("Pending", "Paid", name="invoice_status", create_type=False)
ACTOR_ROLE = postgresql.ENUM("Supplier", "Admin", name="actor_role", create_type=False)


def upgrade() -> None:
    bind = op.get_bind()
    for enum_type in (PO_STATUS, SUPPLIER_STATUS, STOCK_STATUS, INVOICE_STATUS, ACTOR_ROLE):
        enum_type.create(bind, checkfirst=True)

    op.create_table(
        "suppliers",
        sa.Column("id", PK, primary_key=True),
        sa.Column("company_name", sa.String(255), nullable=False, unique=True),
        sa.Column("contact_name", sa.String(200)),
        sa.Column("email", sa.String(255)),
        sa.Column("status", SUPPLIER_STATUS, nullable=False),
        sa.Column("applied_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("approved_at", sa.DateTime(timezone=True)),
        sa.Column("rejected_at", sa.DateTime(timezone=True)),
    )

    op.create_table(
        "products",
        sa.Column("id", PK, primary_key=True),
        sa.Column("sku", sa.String(64), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("current_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.CheckConstraint("current_price >= 0", name="ck_product_price_nonneg"),
    )

    op.create_table(
        "inventory_items",
        sa.Column("id", PK, primary_key=True),
        sa.Column(
            "product_id",
            sa.BigInteger(),
            sa.ForeignKey("products.id", ondelete="RESTRICT"),
            nullable=False,
            unique=True,
        ),
        sa.Column("stock", sa.Integer(), nullable=False),
        sa.Column("stock_status", STOCK_STATUS, nullable=False),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("stock >= 0", name="ck_inventory_stock_nonneg"),
    )

    op.create_table(
        "purchase_orders",
        sa.Column("id", PK, primary_key=True),
        sa.Column("supplier_id", sa.BigInteger(), sa.ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("product_id", sa.BigInteger(), sa.ForeignKey("products.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price_per_unit", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", PO_STATUS, nullable=False),
        sa.Column("order_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expected_delivery_date", sa.Date(), nullable=False),
        sa.Column("actual_delivery_date", sa.Date()),
        sa.Column("delivery_notes", sa.Text()),
        sa.Column("rejection_reason", sa.Text()),
        sa.Column("invoice_id", sa.BigInteger(), unique=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("quantity > 0", name="ck_po_qty_pos"),
        sa.CheckConstraint("price_per_unit >= 0", name="ck_po_price_nonneg"),
        sa.CheckConstraint(
            "(status = 'Completed' AND invoice_id IS NOT NULL)"
            " OR (status <> 'Completed' AND invoice_id IS NULL)",
            name="ck_po_invoice_iff_completed",
        ),
    )
    op.create_index("ix_purchase_orders_status", "purchase_orders", ["status"])
    op.create_index("ix_purchase_orders_supplier_id", "purchase_orders", ["supplier_id"])
    op.create_index("ix_purchase_orders_product_id", "purchase_orders", ["product_id"])

    op.create_table(
        "purchase_order_events",
        sa.Column("id", PK, primary_key=True),
        sa.Column(
            "order_id",
            sa.BigInteger(),
            sa.ForeignKey("purchase_orders.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("from_status", PO_STATUS),
        sa.Column("to_status", PO_STATUS, nullable=False),
        sa.Column("actor_role", ACTOR_ROLE, nullable=False),
        sa.Column("actor_supplier_id", sa.BigInteger()),
        sa.Column("note", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_purchase_order_events_order_id", "purchase_order_events", ["order_id"])

    op.create_table(
        "inventory_movements",
        sa.Column("id", PK, primary_key=True),
        sa.Column(
            "inventory_item_id",
            sa.BigInteger(),
            sa.ForeignKey("inventory_items.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "order_id",
            sa.BigInteger(),
            sa.ForeignKey("purchase_orders.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(255)),
        sa.Column("idempotency_key", sa.String(64), nullable=False, unique=True),
        sa.Column("happened_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("quantity > 0", name="ck_inventory_movement_qty_pos"),
    )
    op.create_index("ix_inventory_movements_inventory_item_id", "inventory_movements", ["inventory_item_id"])

    op.create_table(
        "invoices",
        sa.Column("id", PK, primary_key=True),
        sa.Column("invoice_number", sa.String(32), nullable=False, unique=True),
        sa.Column(
            "order_id",
            sa.BigInteger(),
            sa.ForeignKey("purchase_orders.id", ondelete="RESTRICT"),
            nullable=False,
            unique=True,
        ),
        sa.Column("supplier_id", sa.BigInteger(), sa.ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("status", INVOICE_STATUS, nullable=False),
        sa.Column("issue_date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("payment_date", sa.Date()),
        sa.Column("notes", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("amount >= 0", name="ck_invoice_amount_nonneg"),
    )
    op.create_index("ix_invoices_supplier_id", "invoices", ["supplier_id"])


def downgrade() -> None:
    op.drop_index("ix_invoices_supplier_id", table_name="invoices")
    op.drop_table("invoices")
    op.drop_index("ix_inventory_movements_inventory_item_id", table_name="inventory_movements")
    op.drop_table("inventory_movements")
    op.drop_index("ix_purchase_order_events_order_id", table_name="purchase_order_events")
    op.drop_table("purchase_order_events")
    op.drop_index("ix_purchase_orders_product_id", table_name="purchase_orders")
    op.drop_index("ix_purchase_orders_supplier_id", table_name="purchase_orders")
    op.drop_index("ix_purchase_orders_status", table_name="purchase_orders")
    op.drop_table("purchase_orders")
    op.drop_table("inventory_items")
    op.drop_table("products")
    op.drop_table("suppliers")

    bind = op.get_bind()
    for enum_type in (ACTOR_ROLE, INVOICE_STATUS, STOCK_STATUS, SUPPLIER_STATUS, PO_STATUS):
        enum_type.drop(bind, checkfirst=True)
