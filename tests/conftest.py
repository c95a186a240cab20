"""
Shared fixtures for OrderDesk tests.

Settings are read at import time, so the environment is prepared before
anything from `orderdesk` is imported.
"""
import os
import uuid
from datetime import datetime, timedelta, timezone

os.environ["JWT_SECRET"] = "test-secret"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["NOTIFY_EMAILS"] = ""
os.environ["BUSINESS_TIMEZONE"] = "America/Santiago"

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from orderdesk.database import get_session
from orderdesk.main import app
from orderdesk.models.customer import Customer
from orderdesk.models.product import Product
from orderdesk.models.user import User
from orderdesk.routers import dashboard as dashboard_router
from orderdesk.routers import orders as orders_router

API = "/api/v1"

# 15:00 UTC is midday in Santiago, far from the business-day edges
START = datetime(2026, 3, 10, 15, 0, tzinfo=timezone.utc)


class FixedClock:
    """Callable clock the tests move by hand."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def clock(monkeypatch):
    clock = FixedClock(START)
    monkeypatch.setattr(orders_router.service, "clock", clock)
    monkeypatch.setattr(dashboard_router.service, "clock", clock)
    return clock


@pytest.fixture
def client(engine, clock):
    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


def token_for(user_id: uuid.UUID, email: str) -> str:
    return jwt.encode(
        {"sub": str(user_id), "email": email},
        os.environ["JWT_SECRET"],
        algorithm="HS256",
    )


@pytest.fixture
def make_user(session):
    """
    Insert a user with `role` and return (user, auth headers).
    """

    def _make(role: str = "vendedor", email: str | None = None):
        user_id = uuid.uuid4()
        email = email or f"{role}-{user_id.hex[:6]}@example.com"
        user = User(id=user_id, email=email, name=email.split("@")[0], role=role)
        session.add(user)
        session.commit()
        session.refresh(user)
        headers = {"Authorization": f"Bearer {token_for(user_id, email)}"}
        return user, headers

    return _make


@pytest.fixture
def admin(make_user):
    return make_user("admin")


@pytest.fixture
def facturador(make_user):
    return make_user("facturador")


@pytest.fixture
def vendedor(make_user):
    return make_user("vendedor")


@pytest.fixture
def customer(session):
    customer = Customer(name="Almacén Don Pepe", tax_id="76.123.456-7")
    session.add(customer)
    session.commit()
    session.refresh(customer)
    return customer


@pytest.fixture
def make_product(session):
    def _make(name: str, sku: str, unit_price: float = 1000.0, **kwargs):
        product = Product(name=name, sku=sku, unit_price=unit_price, **kwargs)
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make


@pytest.fixture
def products(make_product):
    return [
        make_product("Aceite 1L", "ACE-1L", unit_price=2500.0, brand="Belmont"),
        make_product("Arroz 1kg", "ARR-1K", unit_price=1200.0),
        make_product("Azúcar 1kg", "AZU-1K", unit_price=1100.0),
    ]


def order_payload(customer, lines, delivery_due=None, **extra):
    """
    Build a POST /orders body from (product, quantity) pairs.
    """
    payload = {
        "customer_id": str(customer.id),
        "items": [
            {"product_id": str(product.id), "quantity": qty} for product, qty in lines
        ],
        "delivery_due": (delivery_due or START.date() + timedelta(days=2)).isoformat(),
    }
    payload.update(extra)
    return payload
