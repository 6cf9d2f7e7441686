"""
Domain records and results for the compliance ledger.

Storage adapters map their rows to these dataclasses; the engines never see
ORM objects.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


# =============================================================================
# Stored records
# =============================================================================

@dataclass
class RouteRecord:
    """Physical route data for one ship and year. Immutable once stored."""
    route_id: str  # doubles as the ship id in the ledger
    year: int
    ghg_intensity: float  # gCO2eq/MJ
    fuel_consumption: float  # t
    vessel_type: str = ""
    fuel_type: str = ""
    distance: float = 0.0  # km
    total_emissions: float = 0.0  # t CO2eq
    is_baseline: bool = False
    id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class ShipCompliance:
    """Compliance record, unique per (ship_id, year)."""
    ship_id: str
    year: int
    cb_gco2eq: float
    energy_mj: float
    actual_intensity: float
    target_intensity: float
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class BankEntry:
    """A slice of banked surplus awaiting (or after) application."""
    ship_id: str
    year: int  # origin year
    amount_gco2eq: float
    applied: bool = False
    applied_year: Optional[int] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass
class PoolMember:
    ship_id: str
    cb_before: float
    cb_after: float
    id: Optional[str] = None
    pool_id: Optional[str] = None


@dataclass
class Pool:
    """Immutable record of one pooling event."""
    year: int
    total_cb: float
    members: List[PoolMember] = field(default_factory=list)
    id: Optional[str] = None
    created_at: Optional[datetime] = None


# =============================================================================
# Operation results
# =============================================================================

@dataclass
class ComplianceBalance:
    ship_id: str
    year: int
    cb: float
    energy: float
    actual: float
    target: float

    @classmethod
    def from_record(cls, record: ShipCompliance) -> "ComplianceBalance":
        return cls(
            ship_id=record.ship_id,
            year=record.year,
            cb=record.cb_gco2eq,
            energy=record.energy_mj,
            actual=record.actual_intensity,
            target=record.target_intensity,
        )


@dataclass
class AdjustedCompliance:
    """Read-only projection: stored CB plus banking applied to the year."""
    ship_id: str
    year: int
    adjusted_cb: float
    original_cb: float
    applied_banking: float


@dataclass
class BankingResult:
    cb_before: float
    applied: float
    cb_after: float
    year: int


@dataclass
class PoolMemberAllocation:
    """Proposed pool outcome for one ship; cb_after is None when unallocated."""
    ship_id: str
    cb_before: float
    cb_after: Optional[float] = None
    allocation: Optional[float] = None


@dataclass
class PoolValidationResult:
    is_valid: bool
    total_cb: float
    members: List[PoolMemberAllocation] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
