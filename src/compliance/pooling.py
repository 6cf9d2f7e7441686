"""
Pooling engine (redistribute CB across ships for one year).

A pool is valid when:
1. It has at least 2 distinct ships, each with a compliance record.
2. The sum of their CB is >= 0.
3. No deficit ship exits worse than it entered.
4. No surplus ship exits with a negative CB.

The allocation itself is a pluggable policy; rules 3 and 4 are checked
against whatever it proposes. The default splits the pool total equally.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from src.compliance.errors import NotFoundError, ValidationError
from src.compliance.locks import ShipLockRegistry, get_ship_locks
from src.compliance.models import (
    Pool,
    PoolMember,
    PoolMemberAllocation,
    PoolValidationResult,
    ShipCompliance,
)
from src.compliance.ports import UnitOfWork

logger = logging.getLogger(__name__)

MIN_POOL_MEMBERS = 2

# (total_cb, members) -> cb_after per member, same order
AllocationPolicy = Callable[[float, Sequence[PoolMemberAllocation]], List[float]]


def equal_distribution(total_cb: float, members: Sequence[PoolMemberAllocation]) -> List[float]:
    """Every member exits with the same share of the pool total."""
    if not members:
        return []
    share = total_cb / len(members)
    return [share for _ in members]


class PoolingEngine:
    """Validates and creates compliance pools."""

    def __init__(
        self,
        uow: UnitOfWork,
        allocation_policy: AllocationPolicy = equal_distribution,
        locks: Optional[ShipLockRegistry] = None,
    ):
        self._uow = uow
        self._allocate = allocation_policy
        self._locks = locks or get_ship_locks()

    def validate_pool(self, year: int, ship_ids: Sequence[str]) -> PoolValidationResult:
        """Check the pool rules and propose an allocation. Writes nothing."""
        result, _ = self._evaluate(self._uow, year, ship_ids)
        return result

    def create_pool(self, year: int, ship_ids: Sequence[str]) -> Pool:
        """
        Validate, then persist the pool and every member's new CB together.

        Raises:
            ValidationError: the pool breaks a rule; ``reasons`` lists all.
        """
        with self._locks.hold(ship_ids), self._uow.transaction() as uow:
            result, records = self._evaluate(uow, year, ship_ids, for_update=True)
            if not result.is_valid:
                logger.warning(
                    "Pool rejected for year %d (%s): %s",
                    year, ", ".join(ship_ids), "; ".join(result.errors),
                )
                raise ValidationError(
                    f"Pool validation failed: {', '.join(result.errors)}",
                    reasons=result.errors,
                )

            pool = uow.pooling.create_with_members(
                year=year,
                total_cb=result.total_cb,
                members=[
                    PoolMember(ship_id=m.ship_id, cb_before=m.cb_before, cb_after=m.cb_after)
                    for m in result.members
                ],
            )
            for member in result.members:
                uow.compliance.update(records[member.ship_id].id, member.cb_after)

        logger.info(
            "Created pool %s for year %d: %d members, total CB %.2f",
            pool.id, year, len(pool.members), pool.total_cb,
        )
        return pool

    def get_pool(self, pool_id: str) -> Pool:
        pool = self._uow.pooling.find_by_id(pool_id)
        if pool is None:
            raise NotFoundError(f"Pool {pool_id} not found")
        return pool

    def list_pools(self, year: int) -> List[Pool]:
        return self._uow.pooling.find_by_year(year)

    # ---- private helpers ----------------------------------------------------

    def _evaluate(
        self,
        uow: UnitOfWork,
        year: int,
        ship_ids: Sequence[str],
        for_update: bool = False,
    ) -> Tuple[PoolValidationResult, Dict[str, ShipCompliance]]:
        errors: List[str] = []
        unique_ids = list(dict.fromkeys(ship_ids))

        if len(unique_ids) < MIN_POOL_MEMBERS:
            errors.append(
                f"Insufficient members: pool must have at least "
                f"{MIN_POOL_MEMBERS} vessels"
            )
            return PoolValidationResult(is_valid=False, total_cb=0.0, errors=errors), {}

        records: Dict[str, ShipCompliance] = {}
        members: List[PoolMemberAllocation] = []
        for ship_id in unique_ids:
            record = uow.compliance.find_by_ship_and_year(ship_id, year, for_update=for_update)
            if record is None:
                errors.append(f"Compliance data not found for ship {ship_id} in year {year}")
                continue
            records[ship_id] = record
            members.append(PoolMemberAllocation(ship_id=ship_id, cb_before=record.cb_gco2eq))

        total_cb = sum(m.cb_before for m in members)

        if total_cb < 0:
            errors.append(f"Pool total CB is negative ({total_cb:.2f}). Cannot create pool.")
            return PoolValidationResult(
                is_valid=False, total_cb=total_cb, members=members, errors=errors,
            ), records

        # Surplus ships first
        members.sort(key=lambda m: m.cb_before, reverse=True)

        for member, cb_after in zip(members, self._allocate(total_cb, members)):
            member.cb_after = cb_after
            member.allocation = cb_after - member.cb_before

        for member in members:
            if member.cb_before < 0 and member.cb_after < member.cb_before:
                errors.append(f"Ship {member.ship_id} would exit worse than entry")
        for member in members:
            if member.cb_before > 0 and member.cb_after < 0:
                errors.append(f"Ship {member.ship_id} would exit with negative CB")

        return PoolValidationResult(
            is_valid=not errors and total_cb >= 0,
            total_cb=total_cb,
            members=members,
            errors=errors,
        ), records
