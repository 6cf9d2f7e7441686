"""Pooling (Article 21) API schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class PoolRequest(BaseModel):
    """Ships to pool for one year."""
    year: int = Field(..., ge=2000, le=2100)
    vessels: List[str] = Field(..., description="Ship ids; duplicates are ignored")


class PoolMemberAllocationResponse(BaseModel):
    ship_id: str
    cb_before: float
    cb_after: Optional[float] = None
    allocation: Optional[float] = None


class PoolValidationResponse(BaseModel):
    is_valid: bool
    total_cb: float
    members: List[PoolMemberAllocationResponse]
    errors: List[str]


class PoolMemberResponse(BaseModel):
    ship_id: str
    cb_before: float
    cb_after: float


class PoolResponse(BaseModel):
    id: str
    year: int
    total_cb: float
    created_at: Optional[datetime] = None
    members: List[PoolMemberResponse]


class PoolListResponse(BaseModel):
    year: int
    pools: List[PoolResponse]
