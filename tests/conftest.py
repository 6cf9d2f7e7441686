"""
Shared pytest fixtures for FuelEU Ledger tests.

Environment variables must be set before any api.* import: api.config reads
them once at import time and api.database builds its engine from them.
"""

import os

import pytest
from fastapi.testclient import TestClient

# ---------------------------------------------------------------------------
# Section 1: Environment setup (before ANY api.* imports)
# ---------------------------------------------------------------------------
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("DB_ECHO", "false")

from api.database import Base, SessionLocal, get_db, engine as test_engine  # noqa: E402
import api.models  # noqa: E402,F401 - register ORM models on Base
from api.repositories import SqlAlchemyUnitOfWork  # noqa: E402
from src.compliance import BankingEngine, ComplianceLedger, PoolingEngine  # noqa: E402
from src.compliance.locks import ShipLockRegistry  # noqa: E402
from src.compliance.models import ShipCompliance  # noqa: E402

# ---------------------------------------------------------------------------
# Section 2: Core database + client fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def db():
    """Fresh schema per test.

    The unit of work commits for real, so isolation comes from recreating
    the tables rather than rolling back an outer transaction.
    """
    Base.metadata.create_all(bind=test_engine)
    session = SessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(db):
    """Create a FastAPI TestClient with database dependency override."""
    from api.main import app

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Section 3: Ledger fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def uow(db):
    return SqlAlchemyUnitOfWork(db)


@pytest.fixture
def locks():
    return ShipLockRegistry()


@pytest.fixture
def ledger(uow, locks):
    return ComplianceLedger(uow, locks=locks)


@pytest.fixture
def banking(uow, locks):
    return BankingEngine(uow, locks=locks)


@pytest.fixture
def pooling(uow, locks):
    return PoolingEngine(uow, locks=locks)


@pytest.fixture
def seeded(db):
    """Load the five 2024 reference routes and their compliance records."""
    from api.seed import seed_database

    return {cb.ship_id: cb for cb in seed_database(db)}


@pytest.fixture
def add_compliance(uow):
    """Insert a compliance record with an arbitrary CB."""

    def _add(ship_id: str, year: int, cb: float) -> ShipCompliance:
        with uow.transaction():
            return uow.compliance.create(ShipCompliance(
                ship_id=ship_id,
                year=year,
                cb_gco2eq=cb,
                energy_mj=1_000_000.0,
                actual_intensity=89.0,
                target_intensity=89.3368,
            ))

    return _add


@pytest.fixture
def cb_of(uow):
    """Read back a ship's stored CB."""

    def _cb(ship_id: str, year: int) -> float:
        return uow.compliance.find_by_ship_and_year(ship_id, year).cb_gco2eq

    return _cb
