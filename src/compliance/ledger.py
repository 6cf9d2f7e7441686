"""
Compliance ledger: one Compliance Balance record per (ship, year).

Records are derived from route data the first time they are requested and
stored; after that the stored record is the source of truth and only the
banking and pooling engines change its balance.
"""

import logging
from typing import List, Optional

from src.compliance.calculations import (
    ENERGY_CONVERSION_MJ_PER_T,
    TargetIntensityPolicy,
    compliance_balance,
    energy,
)
from src.compliance.errors import DuplicateRecordError, NotFoundError
from src.compliance.locks import ShipLockRegistry, get_ship_locks
from src.compliance.models import (
    AdjustedCompliance,
    ComplianceBalance,
    ShipCompliance,
)
from src.compliance.ports import UnitOfWork

logger = logging.getLogger(__name__)


class ComplianceLedger:
    """Creates and reads Compliance Balance records."""

    def __init__(
        self,
        uow: UnitOfWork,
        target_policy: Optional[TargetIntensityPolicy] = None,
        conversion_mj_per_t: float = ENERGY_CONVERSION_MJ_PER_T,
        locks: Optional[ShipLockRegistry] = None,
    ):
        self._uow = uow
        self._target_policy = target_policy or TargetIntensityPolicy()
        self._conversion = conversion_mj_per_t
        self._locks = locks or get_ship_locks()

    def compute_compliance_balance(self, ship_id: str, year: int) -> ComplianceBalance:
        """
        Derive CB from the ship's route and store it.

        Raises:
            NotFoundError: no route for the ship, or the route is for
                another year.
        """
        route = self._uow.routes.find_by_route_id(ship_id)
        if route is None:
            raise NotFoundError(f"Route not found for ship {ship_id}")
        if route.year != year:
            raise NotFoundError(
                f"Route year {route.year} does not match requested year {year} "
                f"for ship {ship_id}"
            )

        energy_mj = energy(route.fuel_consumption, self._conversion)
        target = self._target_policy.target_for(year)
        cb = compliance_balance(target, route.ghg_intensity, energy_mj)

        with self._uow.transaction() as uow:
            record = uow.compliance.create(ShipCompliance(
                ship_id=ship_id,
                year=year,
                cb_gco2eq=cb,
                energy_mj=energy_mj,
                actual_intensity=route.ghg_intensity,
                target_intensity=target,
            ))

        logger.info(
            "Computed CB for %s/%d: %.2f gCO2eq (target=%.4f, actual=%.4f)",
            ship_id, year, cb, target, route.ghg_intensity,
        )
        return ComplianceBalance.from_record(record)

    def get_compliance_balance(self, ship_id: str, year: int) -> ComplianceBalance:
        """Return the stored record, computing and storing it on first access."""
        record = self._uow.compliance.find_by_ship_and_year(ship_id, year)
        if record is not None:
            return ComplianceBalance.from_record(record)

        with self._locks.hold([ship_id]):
            # Another request may have created it while we waited
            record = self._uow.compliance.find_by_ship_and_year(ship_id, year)
            if record is not None:
                return ComplianceBalance.from_record(record)
            try:
                return self.compute_compliance_balance(ship_id, year)
            except DuplicateRecordError:
                # Lost an insert race with another process; its record stands
                record = self._uow.compliance.find_by_ship_and_year(ship_id, year)
                if record is None:
                    raise
                logger.info("CB for %s/%d was stored concurrently, using it", ship_id, year)
                return ComplianceBalance.from_record(record)

    def get_adjusted_compliance(self, ship_id: str, year: int) -> AdjustedCompliance:
        """Stored CB plus every banked amount applied to ``year``."""
        original = self.get_compliance_balance(ship_id, year)

        entries = self._uow.banking.find_by_ship(ship_id, year)
        applied_banking = sum(
            e.amount_gco2eq for e in entries
            if e.applied and e.applied_year == year
        )

        return AdjustedCompliance(
            ship_id=ship_id,
            year=year,
            adjusted_cb=original.cb + applied_banking,
            original_cb=original.cb,
            applied_banking=applied_banking,
        )

    def get_fleet_compliance(self, year: int) -> List[ComplianceBalance]:
        """CB for every ship with a route in ``year``."""
        return [
            self.get_compliance_balance(route.route_id, year)
            for route in self._uow.routes.find_by_year(year)
        ]

    def get_fleet_adjusted_compliance(self, year: int) -> List[AdjustedCompliance]:
        return [
            self.get_adjusted_compliance(route.route_id, year)
            for route in self._uow.routes.find_by_year(year)
        ]
