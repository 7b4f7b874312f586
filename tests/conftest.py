import os
from datetime import date
from decimal import Decimal

# must be set before shared.core.config is imported
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient

from shared.core.database import Base, LeaseSessionLocal, lease_engine
from shared.helpers.date_helper import utc_today
from lease_service.app.main import app
from lease_service.app.models.contracts.contracts import Contract

TODAY = date(2024, 1, 3)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=lease_engine)
    Base.metadata.create_all(bind=lease_engine)
    session = LeaseSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db, today):
    app.dependency_overrides[utc_today] = lambda: today
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_contract(db):
    """Insert a contract row directly, bypassing the API."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        values = {
            "contract_number": counter["n"],
            "device_name": "Galaxy S24 256GB",
            "contract_date": date(2024, 1, 1),
            "execution_date": date(2024, 1, 1),
            "expiry_date": date(2024, 1, 5),
            "duration_days": 4,
            "total_amount": Decimal("4000"),
            "daily_deduction": Decimal("1000"),
            "units_required": 1,
            "daily_deductions": [],
            "status": "active",
            "settlement_status": "not_ready",
            "shipping_status": "preparing",
            "is_lessee_contract_signed": False,
        }
        values.update(overrides)
        obj = Contract(**values)
        db.add(obj)
        db.commit()
        db.refresh(obj)
        return obj

    return _make


def unwrap(response):
    """Return the data part of the JSON envelope."""
    body = response.json()
    assert set(body) >= {"data", "status", "status_code", "message"}
    return body["data"]
