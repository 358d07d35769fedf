"""
Test Configuration and Fixtures
Shared testing infrastructure for BizTrack
"""

import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_TO_FILE", "false")

import pytest
from datetime import timedelta
from decimal import Decimal
from typing import Callable, Dict, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from biztrack.main import app
from biztrack.api import deps
from biztrack.core.database import Base, configure_sqlite_engine
from biztrack.core.config import TEST_DATABASE_URL
from biztrack.core.security import Actor, create_access_token
from biztrack.models import StockItem, Supplier, Sale, SaleLine
from biztrack.models.mixins import utcnow

# Create test engine
engine = configure_sqlite_engine(create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
))

# Create test session
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test"""
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database dependency override"""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[deps.get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def actor() -> Actor:
    return Actor(user_id="user-1", name="Test User", role="manager")


@pytest.fixture
def auth_headers(actor: Actor) -> Dict[str, str]:
    """Bearer token as issued by the auth service"""
    token = create_access_token({"sub": actor.user_id, "name": actor.name, "role": actor.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def supplier_a(db_session: Session) -> Supplier:
    supplier = Supplier(name="Acme Wholesale", email="orders@acme.test", phone="555-0100", contact_person="Ann")
    db_session.add(supplier)
    db_session.commit()
    return supplier


@pytest.fixture
def supplier_b(db_session: Session) -> Supplier:
    supplier = Supplier(name="Globex Supply", email="sales@globex.test", phone="555-0200", contact_person="Bob")
    db_session.add(supplier)
    db_session.commit()
    return supplier


@pytest.fixture
def make_item(db_session: Session) -> Callable[..., StockItem]:
    """Factory for stock items"""
    counter = {"n": 0}

    def _make(**overrides) -> StockItem:
        counter["n"] += 1
        values = {
            "sku": f"SKU-{counter['n']:03d}",
            "name": f"Item {counter['n']}",
            "category": "Hardware",
            "price": Decimal("20.00"),
            "cost": Decimal("12.50"),
            "quantity": 50,
            "reorder_level": 15,
            "reorder_quantity": 10,
            "lead_time_days": 7,
        }
        values.update(overrides)
        item = StockItem(**values)
        db_session.add(item)
        db_session.commit()
        return item

    return _make


@pytest.fixture
def stock_item(make_item, supplier_a) -> StockItem:
    return make_item(
        sku="WID-001", name="Widget", quantity=3, reorder_level=5,
        preferred_supplier_id=supplier_a.id, supplier=supplier_a.name,
    )


@pytest.fixture
def record_sales(db_session: Session) -> Callable[..., Sale]:
    """Insert sale history directly, bypassing stock movement"""
    counter = {"n": 0}

    def _record(item: StockItem, quantity: int, days_ago: int = 1) -> Sale:
        counter["n"] += 1
        created = utcnow() - timedelta(days=days_ago)
        sale = Sale(
            invoice_number=f"HIST-{counter['n']:06d}",
            customer_name="History",
            subtotal=item.price * quantity,
            total=item.price * quantity,
            created_at=created,
            updated_at=created,
        )
        sale.lines.append(SaleLine(
            stock_item_id=item.id, name=item.name, quantity=quantity,
            price=item.price, total=item.price * quantity,
        ))
        db_session.add(sale)
        db_session.commit()
        return sale

    return _record
