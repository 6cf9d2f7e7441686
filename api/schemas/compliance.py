"""Compliance Balance API schemas."""

from typing import List

from pydantic import BaseModel, Field


class ComplianceBalanceResponse(BaseModel):
    """Stored Compliance Balance for one ship and year."""
    ship_id: str
    year: int
    cb: float = Field(..., description="Compliance Balance (gCO2eq); positive is surplus")
    energy: float = Field(..., description="Energy in scope (MJ)")
    actual: float = Field(..., description="Actual GHG intensity (gCO2eq/MJ)")
    target: float = Field(..., description="Target GHG intensity (gCO2eq/MJ)")


class FleetComplianceResponse(BaseModel):
    year: int
    ships: List[ComplianceBalanceResponse]


class AdjustedComplianceResponse(BaseModel):
    """Stored CB plus banked surplus applied to the year."""
    ship_id: str
    year: int
    adjusted_cb: float
    original_cb: float
    applied_banking: float


class FleetAdjustedComplianceResponse(BaseModel):
    year: int
    ships: List[AdjustedComplianceResponse]
