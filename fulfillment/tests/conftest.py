import os

# Tests never touch the Postgres from DATABASE_URL
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")

from datetime import date, datetime, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from fulfillment.app.api.deps import get_db  # noqa: E402
from fulfillment.app.db.base import Base  # noqa: E402
from fulfillment.app.db.models.core_types import ActorRole, StockStatus, SupplierStatus  # noqa: E402
from fulfillment.app.db.models.models_v1 import InventoryItem, Product, Supplier  # noqa: E402
from fulfillment.app.main import app  # noqa: E402
from fulfillment.services import procurement  # noqa: E402
from fulfillment.services.role_gate import Actor  # noqa: E402

@pytest.fixture(scope="function")
def engine():
    """
    In-memory SQLite, fresh schema per test.

    StaticPool keeps the single connection alive so the schema survives
    across sessions (test session + API request sessions).
    """
    eng = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    try:
        yield eng
    finally:
        eng.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def file_engine(tmp_path):
    """File-backed SQLite: several real connections, for concurrency tests."""
    eng = create_engine(f"sqlite+pysqlite:///{tmp_path / 'fulfillment.db'}")
    Base.metadata.create_all(bind=eng)
    try:
        yield eng
    finally:
        eng.dispose()


@pytest.fixture(scope="function")
def client(session_factory):
    def _override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _override_get_db
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


# ---------- master data ----------
def seed_master_data(db: Session) -> dict:
    now = datetime.now(timezone.utc)
    approved = Supplier(
        company_name="Kalana Timber Works",
        status=SupplierStatus.approved,
        approved_at=now,
    )
    other = Supplier(
        company_name="Galle Rattan Co",
        status=SupplierStatus.approved,
        approved_at=now,
    )
    applicant = Supplier(company_name="Coastal Upholstery", status=SupplierStatus.pending)
    product = Product(sku="CHR-OAK-01", name="Oak Dining Chair", current_price=Decimal("450.00"))
    db.add_all([approved, other, applicant, product])
    db.flush()

    item = InventoryItem(product_id=product.id, stock=0, stock_status=StockStatus.out_of_stock)
    db.add(item)
    db.commit()

    return {
        "supplier_id": approved.id,
        "other_supplier_id": other.id,
        "applicant_id": applicant.id,
        "product_id": product.id,
        "inventory_item_id": item.id,
    }


@pytest.fixture
def seed_master():
    return seed_master_data


@pytest.fixture(scope="function")
def master(db_session) -> dict:
    return seed_master_data(db_session)


@pytest.fixture
def admin() -> Actor:
    return Actor(role=ActorRole.admin)


@pytest.fixture
def supplier(master) -> Actor:
    """The supplier every default order is placed with."""
    return Actor(role=ActorRole.supplier, supplier_id=master["supplier_id"])


@pytest.fixture
def other_supplier(master) -> Actor:
    return Actor(role=ActorRole.supplier, supplier_id=master["other_supplier_id"])


@pytest.fixture
def make_order(db_session, master, admin):
    def _make(*, quantity: int = 10, price: str | None = "500", session: Session | None = None):
        return procurement.create_order(
            session or db_session,
            admin,
            supplier_id=master["supplier_id"],
            product_id=master["product_id"],
            quantity=quantity,
            price_per_unit=Decimal(price) if price is not None else None,
            expected_delivery_date=date(2024, 6, 10),
        )

    return _make


@pytest.fixture(scope="function")
def order(make_order):
    return make_order()
