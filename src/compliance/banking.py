"""
Banking engine (carry surplus CB forward to a later deficit year).

Banking moves part of a year's surplus out of its compliance record into a
bank entry. Applying moves banked amounts into a deficit year's record,
consuming entries oldest first:

    unapplied -> applied                                  (whole entry used)
    unapplied -> split -> applied part + new unapplied    (partly used)

The sum of a ship's unapplied entries is its available balance, and the
sum of all its entry amounts never changes across a split.
"""

import logging
import math
from typing import List, Optional

from src.compliance.errors import ConsistencyError, NotFoundError, ValidationError
from src.compliance.locks import ShipLockRegistry, get_ship_locks
from src.compliance.models import BankEntry, BankingResult
from src.compliance.ports import UnitOfWork

logger = logging.getLogger(__name__)

# Float residue below this (gCO2eq) counts as fully consumed
BALANCE_TOLERANCE = 1e-6


def _require_positive(amount: float, message: str) -> None:
    if not math.isfinite(amount) or amount <= 0:
        raise ValidationError(message)


class BankingEngine:
    """Banks surplus CB and applies it to deficit years."""

    def __init__(self, uow: UnitOfWork, locks: Optional[ShipLockRegistry] = None):
        self._uow = uow
        self._locks = locks or get_ship_locks()

    def bank_surplus(self, ship_id: str, year: int, amount: float) -> BankingResult:
        """
        Move ``amount`` of the (ship, year) surplus into a new bank entry.

        All checks run before any write, so a rejected call changes nothing.

        Raises:
            ValidationError: amount not positive, no surplus, or amount
                larger than the current surplus.
            NotFoundError: no compliance record for (ship, year).
        """
        _require_positive(amount, "Cannot bank non-positive amount")

        with self._locks.hold([ship_id]), self._uow.transaction() as uow:
            record = uow.compliance.find_by_ship_and_year(ship_id, year, for_update=True)
            if record is None:
                raise NotFoundError(
                    f"Compliance balance not found for ship {ship_id} in year {year}"
                )

            cb_before = record.cb_gco2eq
            if cb_before <= 0:
                logger.warning(
                    "Bank rejected for %s/%d: CB %.2f is not a surplus",
                    ship_id, year, cb_before,
                )
                raise ValidationError("Cannot bank from negative or zero compliance balance")
            if amount > cb_before:
                logger.warning(
                    "Bank rejected for %s/%d: amount %.2f exceeds surplus %.2f",
                    ship_id, year, amount, cb_before,
                )
                raise ValidationError(f"Amount {amount} exceeds available surplus {cb_before}")

            uow.banking.create(BankEntry(
                ship_id=ship_id,
                year=year,
                amount_gco2eq=amount,
            ))
            cb_after = cb_before - amount
            uow.compliance.update(record.id, cb_after)

        logger.info(
            "Banked %.2f gCO2eq for %s/%d (CB %.2f -> %.2f)",
            amount, ship_id, year, cb_before, cb_after,
        )
        return BankingResult(cb_before=cb_before, applied=amount, cb_after=cb_after, year=year)

    def apply_banked(self, ship_id: str, deficit_year: int, amount: float) -> BankingResult:
        """
        Apply ``amount`` of banked surplus to the ship's ``deficit_year``.

        Raises:
            ValidationError: amount not positive or above the available
                balance.
            NotFoundError: no compliance record for (ship, deficit_year).
            ConsistencyError: entries ran out despite the balance check.
        """
        _require_positive(amount, "Amount must be positive")

        with self._locks.hold([ship_id]), self._uow.transaction() as uow:
            available = uow.banking.sum_unapplied(ship_id)
            if amount > available:
                logger.warning(
                    "Apply rejected for %s: requested %.2f, available %.2f",
                    ship_id, amount, available,
                )
                raise ValidationError(
                    f"Insufficient banked balance. Requested: {amount}, "
                    f"Available: {available}"
                )

            record = uow.compliance.find_by_ship_and_year(
                ship_id, deficit_year, for_update=True
            )
            if record is None:
                raise NotFoundError(
                    f"Compliance balance not found for ship {ship_id} "
                    f"in year {deficit_year}"
                )

            cb_before = record.cb_gco2eq
            self._consume_fifo(uow, ship_id, amount, deficit_year)
            cb_after = cb_before + amount
            uow.compliance.update(record.id, cb_after)

        logger.info(
            "Applied %.2f gCO2eq banked surplus to %s/%d (CB %.2f -> %.2f)",
            amount, ship_id, deficit_year, cb_before, cb_after,
        )
        return BankingResult(
            cb_before=cb_before, applied=amount, cb_after=cb_after, year=deficit_year,
        )

    def get_available_balance(self, ship_id: str) -> float:
        """Sum of the ship's unapplied bank entries."""
        return self._uow.banking.sum_unapplied(ship_id)

    def get_banking_records(self, ship_id: str, year: Optional[int] = None) -> List[BankEntry]:
        return self._uow.banking.find_by_ship(ship_id, year)

    # ---- private helpers ----------------------------------------------------

    @staticmethod
    def _consume_fifo(
        uow: UnitOfWork, ship_id: str, amount: float, deficit_year: int
    ) -> List[BankEntry]:
        """Mark entries applied oldest first, splitting the last one if needed."""
        remaining = amount
        consumed = []

        for entry in uow.banking.find_unapplied(ship_id, for_update=True):
            # The first entry is always touched, however small the amount
            if consumed and remaining <= BALANCE_TOLERANCE:
                break

            if entry.amount_gco2eq <= remaining:
                entry.applied = True
                entry.applied_year = deficit_year
                uow.banking.update(entry)
                remaining -= entry.amount_gco2eq
            else:
                leftover = entry.amount_gco2eq - remaining
                entry.amount_gco2eq = remaining
                entry.applied = True
                entry.applied_year = deficit_year
                uow.banking.update(entry)
                uow.banking.create(BankEntry(
                    ship_id=entry.ship_id,
                    year=entry.year,
                    amount_gco2eq=leftover,
                ))
                logger.debug(
                    "Split bank entry %s: %.2f applied, %.2f carried forward",
                    entry.id, remaining, leftover,
                )
                remaining = 0.0

            consumed.append(entry)

        if remaining > BALANCE_TOLERANCE:
            logger.error(
                "Bank entries exhausted for %s with %.2f of %.2f still to apply "
                "(deficit year %d)",
                ship_id, remaining, amount, deficit_year,
            )
            raise ConsistencyError(
                f"Banked entries for ship {ship_id} exhausted with {remaining} "
                f"of {amount} unapplied"
            )

        return consumed
