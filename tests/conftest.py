"""Shared fixtures: an in-memory database per test, staff accounts and factories."""

from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("GATEWAY_API_KEY", "test-gateway-key")

from datetime import datetime
from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from dealership.auth import Principal
from dealership.db.models import Base, Bike, Sale, User, UserRole
from dealership.db.session import get_db, settings
from dealership.main import app
from dealership.services import inventory, lifecycle, users


def bike_fields(**overrides: Any) -> dict[str, Any]:
    fields = {
        "bike_name": "RE Classic 350",
        "year": 2022,
        "registration_number": "TN01AB1234",
        "owner_phone": "9876543210",
        "owner_aadhar": "123456789012",
        "owner_address": "12 Anna Salai, Chennai",
        "purchase_price": 120000,
        "selling_price": 150000,
    }
    fields.update(overrides)
    return fields


def sale_fields(**overrides: Any) -> dict[str, Any]:
    fields = {
        "sale_price": 145000,
        "customer_name": "Priya Raman",
        "customer_email": "priya@example.com",
        "customer_phone": "9123456780",
        "customer_aadhar": "987654321098",
        "customer_address": "4 Lake View Road, Coimbatore",
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def engine() -> Engine:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory: sessionmaker) -> Session:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def import_dir(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr(settings, "IMPORT_ERROR_DIR", str(tmp_path / "error_reports"))


@pytest.fixture
def admin(db: Session) -> User:
    return users.create_user(db, "admin@bike.com", "admin-pass", UserRole.ADMIN, "System Admin")


@pytest.fixture
def worker(db: Session) -> User:
    return users.create_user(db, "john@bike.com", "worker-pass", UserRole.WORKER, "John Mechanic")


@pytest.fixture
def admin_principal(admin: User) -> Principal:
    return Principal(user_id=admin.id, role=UserRole.ADMIN)


@pytest.fixture
def worker_principal(worker: User) -> Principal:
    return Principal(user_id=worker.id, role=UserRole.WORKER)


@pytest.fixture
def make_bike(db: Session, worker_principal: Principal) -> Callable[..., Bike]:
    counter = iter(range(1, 10_000))

    def factory(**overrides: Any) -> Bike:
        overrides.setdefault("registration_number", f"TN01AB{next(counter):04d}")
        return inventory.create_bike(db, bike_fields(**overrides), worker_principal)

    return factory


@pytest.fixture
def sell_bike(db: Session, worker_principal: Principal) -> Callable[..., Sale]:
    def factory(bike: Bike, sold_at: datetime | None = None, **overrides: Any) -> Sale:
        return lifecycle.sell(db, bike.id, sale_fields(**overrides), worker_principal, sold_at=sold_at)

    return factory


@pytest.fixture
def client(session_factory: sessionmaker) -> TestClient:
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def gateway_headers() -> dict[str, str]:
    return {"X-Gateway-Key": settings.GATEWAY_API_KEY}


@pytest.fixture
def admin_headers(admin: User, gateway_headers: dict[str, str]) -> dict[str, str]:
    return {**gateway_headers, "X-User-Id": str(admin.id)}


@pytest.fixture
def worker_headers(worker: User, gateway_headers: dict[str, str]) -> dict[str, str]:
    return {**gateway_headers, "X-User-Id": str(worker.id)}
