"""
SQLAlchemy storage adapter for the compliance ledger.

Implements the repository interfaces from ``src.compliance.ports`` on top of
one SQLAlchemy session, and ``SqlAlchemyUnitOfWork`` to group them in a
single database transaction. ORM rows never leave this module; callers get
the dataclasses from ``src.compliance.models``.
"""

import logging
import uuid as uuid_mod
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from api import models
from src.compliance.errors import DuplicateRecordError, NotFoundError
from src.compliance.models import (
    BankEntry,
    Pool,
    PoolMember,
    RouteRecord,
    ShipCompliance,
)
from src.compliance.ports import (
    BankingRepository,
    ComplianceRepository,
    PoolingRepository,
    RouteRepository,
    UnitOfWork,
)

logger = logging.getLogger(__name__)


def _parse_uuid(value: str) -> Optional[uuid_mod.UUID]:
    try:
        return uuid_mod.UUID(str(value))
    except ValueError:
        return None


# =============================================================================
# Row -> domain mapping
# =============================================================================

def _route(row: models.Route) -> RouteRecord:
    return RouteRecord(
        id=str(row.id),
        route_id=row.route_id,
        vessel_type=row.vessel_type,
        fuel_type=row.fuel_type,
        year=row.year,
        ghg_intensity=row.ghg_intensity,
        fuel_consumption=row.fuel_consumption,
        distance=row.distance,
        total_emissions=row.total_emissions,
        is_baseline=row.is_baseline,
        created_at=row.created_at,
    )


def _compliance(row: models.ShipCompliance) -> ShipCompliance:
    return ShipCompliance(
        id=str(row.id),
        ship_id=row.ship_id,
        year=row.year,
        cb_gco2eq=row.cb_gco2eq,
        energy_mj=row.energy_mj,
        actual_intensity=row.actual_intensity,
        target_intensity=row.target_intensity,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _bank_entry(row: models.BankEntry) -> BankEntry:
    return BankEntry(
        id=row.id,
        ship_id=row.ship_id,
        year=row.year,
        amount_gco2eq=row.amount_gco2eq,
        applied=row.applied,
        applied_year=row.applied_year,
        created_at=row.created_at,
    )


def _pool(row: models.Pool) -> Pool:
    return Pool(
        id=str(row.id),
        year=row.year,
        total_cb=row.total_cb,
        created_at=row.created_at,
        members=[
            PoolMember(
                id=str(m.id),
                pool_id=str(row.id),
                ship_id=m.ship_id,
                cb_before=m.cb_before,
                cb_after=m.cb_after,
            )
            for m in row.members
        ],
    )


# =============================================================================
# Repositories
# =============================================================================

class SqlAlchemyRouteRepository(RouteRepository):

    def __init__(self, db: Session):
        self.db = db

    def find_by_route_id(self, route_id: str) -> Optional[RouteRecord]:
        row = self.db.query(models.Route).filter(models.Route.route_id == route_id).first()
        return _route(row) if row else None

    def find_all(
        self,
        vessel_type: Optional[str] = None,
        fuel_type: Optional[str] = None,
        year: Optional[int] = None,
    ) -> List[RouteRecord]:
        query = self.db.query(models.Route)

        if vessel_type:
            query = query.filter(models.Route.vessel_type == vessel_type)
        if fuel_type:
            query = query.filter(models.Route.fuel_type == fuel_type)
        if year is not None:
            query = query.filter(models.Route.year == year)

        return [_route(r) for r in query.order_by(models.Route.route_id).all()]

    def find_by_year(self, year: int) -> List[RouteRecord]:
        return self.find_all(year=year)

    def create(self, route: RouteRecord) -> RouteRecord:
        row = models.Route(
            route_id=route.route_id,
            vessel_type=route.vessel_type,
            fuel_type=route.fuel_type,
            year=route.year,
            ghg_intensity=route.ghg_intensity,
            fuel_consumption=route.fuel_consumption,
            distance=route.distance,
            total_emissions=route.total_emissions,
            is_baseline=False,
        )
        self.db.add(row)
        self.db.flush()
        return _route(row)

    def set_baseline(self, route_id: str) -> None:
        row = self.db.query(models.Route).filter(models.Route.route_id == route_id).first()
        if row is None:
            raise NotFoundError(f"Route {route_id} not found")

        self.db.query(models.Route).filter(
            models.Route.is_baseline == True,  # noqa: E712
            models.Route.route_id != route_id,
        ).update({models.Route.is_baseline: False}, synchronize_session="fetch")
        row.is_baseline = True
        self.db.flush()


class SqlAlchemyComplianceRepository(ComplianceRepository):

    def __init__(self, db: Session):
        self.db = db

    def find_by_ship_and_year(
        self, ship_id: str, year: int, for_update: bool = False
    ) -> Optional[ShipCompliance]:
        query = self.db.query(models.ShipCompliance).filter(
            models.ShipCompliance.ship_id == ship_id,
            models.ShipCompliance.year == year,
        )
        if for_update:
            query = query.with_for_update()
        row = query.first()
        return _compliance(row) if row else None

    def create(self, record: ShipCompliance) -> ShipCompliance:
        row = models.ShipCompliance(
            ship_id=record.ship_id,
            year=record.year,
            cb_gco2eq=record.cb_gco2eq,
            energy_mj=record.energy_mj,
            actual_intensity=record.actual_intensity,
            target_intensity=record.target_intensity,
        )
        self.db.add(row)
        try:
            self.db.flush()
        except IntegrityError as e:
            raise DuplicateRecordError(
                f"Compliance record for ship {record.ship_id} in year {record.year} "
                f"already exists"
            ) from e
        return _compliance(row)

    def update(self, record_id: str, cb_gco2eq: float) -> ShipCompliance:
        row = self.db.get(models.ShipCompliance, _parse_uuid(record_id))
        if row is None:
            raise NotFoundError(f"Compliance record {record_id} not found")
        row.cb_gco2eq = cb_gco2eq
        self.db.flush()
        return _compliance(row)


class SqlAlchemyBankingRepository(BankingRepository):

    def __init__(self, db: Session):
        self.db = db

    def find_by_ship(self, ship_id: str, year: Optional[int] = None) -> List[BankEntry]:
        query = self.db.query(models.BankEntry).filter(models.BankEntry.ship_id == ship_id)
        if year is not None:
            query = query.filter(or_(
                models.BankEntry.year == year,
                models.BankEntry.applied_year == year,
            ))
        rows = query.order_by(
            models.BankEntry.created_at.desc(), models.BankEntry.id.desc()
        ).all()
        return [_bank_entry(r) for r in rows]

    def find_unapplied(self, ship_id: str, for_update: bool = False) -> List[BankEntry]:
        query = self.db.query(models.BankEntry).filter(
            models.BankEntry.ship_id == ship_id,
            models.BankEntry.applied == False,  # noqa: E712
        )
        if for_update:
            query = query.with_for_update()
        rows = query.order_by(
            models.BankEntry.created_at.asc(), models.BankEntry.id.asc()
        ).all()
        return [_bank_entry(r) for r in rows]

    def sum_unapplied(self, ship_id: str) -> float:
        total = (
            self.db.query(func.coalesce(func.sum(models.BankEntry.amount_gco2eq), 0.0))
            .filter(
                models.BankEntry.ship_id == ship_id,
                models.BankEntry.applied == False,  # noqa: E712
            )
            .scalar()
        )
        return float(total or 0.0)

    def create(self, entry: BankEntry) -> BankEntry:
        row = models.BankEntry(
            ship_id=entry.ship_id,
            year=entry.year,
            amount_gco2eq=entry.amount_gco2eq,
            applied=entry.applied,
            applied_year=entry.applied_year,
        )
        self.db.add(row)
        self.db.flush()
        return _bank_entry(row)

    def update(self, entry: BankEntry) -> BankEntry:
        row = self.db.get(models.BankEntry, entry.id)
        if row is None:
            raise NotFoundError(f"Bank entry {entry.id} not found")
        row.amount_gco2eq = entry.amount_gco2eq
        row.applied = entry.applied
        row.applied_year = entry.applied_year
        self.db.flush()
        return _bank_entry(row)


class SqlAlchemyPoolingRepository(PoolingRepository):

    def __init__(self, db: Session):
        self.db = db

    def create_with_members(
        self, year: int, total_cb: float, members: List[PoolMember]
    ) -> Pool:
        row = models.Pool(year=year, total_cb=total_cb)
        for m in members:
            row.members.append(models.PoolMember(
                ship_id=m.ship_id,
                cb_before=m.cb_before,
                cb_after=m.cb_after,
            ))
        self.db.add(row)
        self.db.flush()
        return _pool(row)

    def find_by_id(self, pool_id: str) -> Optional[Pool]:
        pid = _parse_uuid(pool_id)
        if pid is None:
            return None
        row = self.db.get(models.Pool, pid)
        return _pool(row) if row else None

    def find_by_year(self, year: int) -> List[Pool]:
        rows = (
            self.db.query(models.Pool)
            .filter(models.Pool.year == year)
            .order_by(models.Pool.created_at.asc())
            .all()
        )
        return [_pool(r) for r in rows]


# =============================================================================
# Unit of work
# =============================================================================

class SqlAlchemyUnitOfWork(UnitOfWork):
    """All ledger repositories sharing one session and one transaction."""

    def __init__(self, db: Session):
        self.db = db
        self.routes = SqlAlchemyRouteRepository(db)
        self.compliance = SqlAlchemyComplianceRepository(db)
        self.banking = SqlAlchemyBankingRepository(db)
        self.pooling = SqlAlchemyPoolingRepository(db)
        self._depth = 0

    @contextmanager
    def transaction(self) -> Iterator["SqlAlchemyUnitOfWork"]:
        # Nested calls join the outermost transaction
        if self._depth:
            self._depth += 1
            try:
                yield self
            finally:
                self._depth -= 1
            return

        self._depth = 1
        try:
            yield self
            self.db.commit()
        except Exception:
            logger.debug("Rolling back ledger transaction")
            self.db.rollback()
            raise
        finally:
            self._depth = 0
