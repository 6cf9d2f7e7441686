"""
Reference route data for the 2024 reporting year.

ROUTE-001 is the baseline. Seeding clears every ledger table first, then
computes each ship's Compliance Balance through the ledger so the stored
records match what the API would derive.
"""

import logging
from typing import List

from sqlalchemy.orm import Session

from api import models
from api.config import settings
from api.repositories import SqlAlchemyUnitOfWork
from src.compliance import ComplianceLedger
from src.compliance.models import ComplianceBalance, RouteRecord

logger = logging.getLogger(__name__)

SEED_YEAR = 2024
BASELINE_ROUTE_ID = "ROUTE-001"

SEED_ROUTES = [
    RouteRecord(route_id="ROUTE-001", vessel_type="Container Ship", fuel_type="HFO", year=2024,
                ghg_intensity=95.5, fuel_consumption=1200, distance=25000, total_emissions=3800),
    RouteRecord(route_id="ROUTE-002", vessel_type="Bulk Carrier", fuel_type="VLSFO", year=2024,
                ghg_intensity=88.2, fuel_consumption=950, distance=18000, total_emissions=2850),
    RouteRecord(route_id="ROUTE-003", vessel_type="Tanker", fuel_type="MDO", year=2024,
                ghg_intensity=92.8, fuel_consumption=1100, distance=22000, total_emissions=3500),
    RouteRecord(route_id="ROUTE-004", vessel_type="Container Ship", fuel_type="LNG", year=2024,
                ghg_intensity=82.5, fuel_consumption=800, distance=20000, total_emissions=2200),
    RouteRecord(route_id="ROUTE-005", vessel_type="Ro-Ro", fuel_type="MGO", year=2024,
                ghg_intensity=90.1, fuel_consumption=650, distance=15000, total_emissions=1950),
]


def clear_ledger(db: Session) -> None:
    """Delete all rows, children before parents."""
    for model in (models.PoolMember, models.Pool, models.BankEntry,
                  models.ShipCompliance, models.Route):
        db.query(model).delete(synchronize_session=False)


def seed_database(db: Session) -> List[ComplianceBalance]:
    """Replace the ledger contents with the reference routes."""
    uow = SqlAlchemyUnitOfWork(db)

    with uow.transaction():
        clear_ledger(db)
        for route in SEED_ROUTES:
            uow.routes.create(route)
        uow.routes.set_baseline(BASELINE_ROUTE_ID)

    ledger = ComplianceLedger(
        uow,
        target_policy=settings.target_policy(),
        conversion_mj_per_t=settings.energy_conversion_mj_per_t,
    )
    balances = ledger.get_fleet_compliance(SEED_YEAR)

    logger.info(f"Seeded {len(SEED_ROUTES)} routes and compliance records for {SEED_YEAR}")
    return balances
