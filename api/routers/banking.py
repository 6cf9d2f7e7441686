"""
Banking API router.

Write endpoints are rate limited. Domain errors are mapped to HTTP status
codes by the handlers registered in api.main.
"""

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from api.dependencies import get_banking_engine
from api.rate_limit import limiter, get_rate_limit_string
from api.schemas import (
    ApplyBankedRequest,
    BankEntryResponse,
    BankingBalanceResponse,
    BankingRecordsResponse,
    BankingResultResponse,
    BankSurplusRequest,
    ErrorResponse,
)
from src.compliance import BankingEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/banking", tags=["Banking"])

_ERRORS = {400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}


# =============================================================================
# Reads
# =============================================================================

@router.get("/records", response_model=BankingRecordsResponse)
def get_banking_records(
    ship_id: str = Query(..., min_length=1),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    engine: BankingEngine = Depends(get_banking_engine),
):
    """Bank entries for a ship, newest first."""
    entries = engine.get_banking_records(ship_id, year)
    return BankingRecordsResponse(
        ship_id=ship_id,
        records=[BankEntryResponse(**asdict(e)) for e in entries],
    )


@router.get("/balance", response_model=BankingBalanceResponse)
def get_available_balance(
    ship_id: str = Query(..., min_length=1),
    engine: BankingEngine = Depends(get_banking_engine),
):
    """Sum of the ship's unapplied bank entries."""
    return BankingBalanceResponse(
        ship_id=ship_id,
        available_balance=engine.get_available_balance(ship_id),
    )


# =============================================================================
# Mutations
# =============================================================================

@router.post("/bank", response_model=BankingResultResponse, responses=_ERRORS)
@limiter.limit(get_rate_limit_string())
def bank_surplus(
    request: Request,
    body: BankSurplusRequest,
    engine: BankingEngine = Depends(get_banking_engine),
):
    """Move part of a year's surplus into the bank."""
    result = engine.bank_surplus(body.ship_id, body.year, body.amount)
    return BankingResultResponse(**asdict(result))


@router.post("/apply", response_model=BankingResultResponse, responses=_ERRORS)
@limiter.limit(get_rate_limit_string())
def apply_banked(
    request: Request,
    body: ApplyBankedRequest,
    engine: BankingEngine = Depends(get_banking_engine),
):
    """Apply banked surplus, oldest first, against a deficit year."""
    result = engine.apply_banked(body.ship_id, body.year, body.amount)
    return BankingResultResponse(**asdict(result))
