"""
Pytest configuration and fixtures for revenue ledger tests.
"""

import os
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Generator

import pytest

# The API reads its database URL at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-secret")

from fastapi.testclient import TestClient  # noqa: E402

from revenue.api import auth  # noqa: E402
from revenue.api.auth import create_access_token  # noqa: E402
from revenue.api.database import engine  # noqa: E402
from revenue.api.main import app  # noqa: E402
from revenue.api.seed import DatabaseSeeder  # noqa: E402

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

ADMIN = {"id": 1, "name": "Admin User", "email": "admin@example.com", "username": "admin", "role": "super_admin"}
MANAGER = {"id": 2, "name": "Manager User", "email": "manager@example.com", "username": "manager", "role": "manager"}
DATA_ENTRY = {"id": 3, "name": "Data Entry User", "email": "data@example.com", "username": "data", "role": "data_entry"}


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def config_dir() -> Path:
    """Return the config directory path."""
    return PROJECT_ROOT / "config"


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch):
    """Use the minimum bcrypt cost in tests."""
    monkeypatch.setattr(auth, "BCRYPT_ROUNDS", 4)


@pytest.fixture
def database(config_dir: Path):
    """Fresh in-memory database loaded with config/seed_data.yaml."""
    DatabaseSeeder(engine, config_dir).setup(reset=True, seed=True)
    yield engine


@pytest.fixture
def client(database) -> Generator[TestClient, None, None]:
    """API test client over the seeded database."""
    with TestClient(app) as test_client:
        yield test_client


def bearer(user: dict) -> dict:
    """Authorization header for a user row."""
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def admin_headers() -> dict:
    return bearer(ADMIN)


@pytest.fixture
def manager_headers() -> dict:
    return bearer(MANAGER)


@pytest.fixture
def data_entry_headers() -> dict:
    return bearer(DATA_ENTRY)


@pytest.fixture
def sample_transactions() -> list[dict]:
    """Transaction rows as returned by the database."""
    return [
        {
            "id": 1,
            "transaction_type": "receipt",
            "amount": Decimal("5000.00"),
            "institution_id": 1,
            "type_id": 1,
            "date": date(2024, 4, 1),
            "created_by": 3,
        },
        {
            "id": 2,
            "transaction_type": "receipt",
            "amount": Decimal("3000.00"),
            "institution_id": 2,
            "type_id": 2,
            "date": date(2024, 4, 1),
            "created_by": 3,
        },
        {
            "id": 3,
            "transaction_type": "payment",
            "amount": Decimal("1000.00"),
            "institution_id": 1,
            "type_id": 1,
            "date": date(2024, 4, 2),
            "created_by": 2,
        },
        {
            "id": 4,
            "transaction_type": "receipt",
            "amount": Decimal("7500.00"),
            "institution_id": 3,
            "type_id": 3,
            "date": date(2024, 4, 3),
            "created_by": 2,
        },
        {
            "id": 5,
            "transaction_type": "payment",
            "amount": Decimal("2500.00"),
            "institution_id": 4,
            "type_id": 4,
            "date": date(2024, 4, 3),
            "created_by": 3,
        },
    ]
