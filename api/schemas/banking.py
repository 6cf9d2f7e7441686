"""Banking (Article 20) API schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class BankSurplusRequest(BaseModel):
    """Move part of a ship's surplus into the bank."""
    ship_id: str = Field(..., min_length=1, max_length=100)
    year: int = Field(..., ge=2000, le=2100)
    amount: float = Field(..., gt=0, allow_inf_nan=False, description="gCO2eq to bank")


class ApplyBankedRequest(BaseModel):
    """Apply banked surplus against a deficit year."""
    ship_id: str = Field(..., min_length=1, max_length=100)
    year: int = Field(..., ge=2000, le=2100, description="Deficit year")
    amount: float = Field(..., gt=0, allow_inf_nan=False, description="gCO2eq to apply")


class BankingResultResponse(BaseModel):
    cb_before: float
    applied: float
    cb_after: float
    year: int


class BankEntryResponse(BaseModel):
    id: int
    ship_id: str
    year: int
    amount_gco2eq: float
    applied: bool
    applied_year: Optional[int] = None
    created_at: Optional[datetime] = None


class BankingRecordsResponse(BaseModel):
    ship_id: str
    records: List[BankEntryResponse]


class BankingBalanceResponse(BaseModel):
    ship_id: str
    available_balance: float
