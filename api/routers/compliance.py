"""
Compliance Balance API router.

Without ship_id the endpoints answer for every ship with a route in the
requested year.
"""

from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_ledger
from api.schemas import (
    AdjustedComplianceResponse,
    ComplianceBalanceResponse,
    FleetAdjustedComplianceResponse,
    FleetComplianceResponse,
)
from src.compliance import ComplianceLedger

router = APIRouter(prefix="/api/compliance", tags=["Compliance"])


@router.get("/cb")
def get_compliance_balance(
    year: int = Query(..., ge=2000, le=2100),
    ship_id: Optional[str] = Query(None, min_length=1),
    ledger: ComplianceLedger = Depends(get_ledger),
):
    """Stored CB for one ship, computed from route data on first access."""
    if ship_id:
        return ComplianceBalanceResponse(**asdict(ledger.get_compliance_balance(ship_id, year)))

    return FleetComplianceResponse(
        year=year,
        ships=[ComplianceBalanceResponse(**asdict(cb)) for cb in ledger.get_fleet_compliance(year)],
    )


@router.get("/adjusted-cb")
def get_adjusted_compliance(
    year: int = Query(..., ge=2000, le=2100),
    ship_id: Optional[str] = Query(None, min_length=1),
    ledger: ComplianceLedger = Depends(get_ledger),
):
    """Stored CB plus banked surplus applied to the year."""
    if ship_id:
        return AdjustedComplianceResponse(**asdict(ledger.get_adjusted_compliance(ship_id, year)))

    return FleetAdjustedComplianceResponse(
        year=year,
        ships=[
            AdjustedComplianceResponse(**asdict(a))
            for a in ledger.get_fleet_adjusted_compliance(year)
        ],
    )
