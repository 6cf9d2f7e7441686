"""
Pooling API router.

Validation is read-only; creation re-validates under the ship locks and
writes the pool and every member's new balance in one transaction.
"""

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query, Request

from api.dependencies import get_pooling_engine
from api.rate_limit import limiter, get_rate_limit_string
from api.schemas import (
    ErrorResponse,
    PoolListResponse,
    PoolMemberAllocationResponse,
    PoolMemberResponse,
    PoolRequest,
    PoolResponse,
    PoolValidationResponse,
)
from src.compliance import PoolingEngine
from src.compliance.models import Pool

router = APIRouter(prefix="/api/pools", tags=["Pooling"])


def _pool_response(pool: Pool) -> PoolResponse:
    return PoolResponse(
        id=pool.id,
        year=pool.year,
        total_cb=pool.total_cb,
        created_at=pool.created_at,
        members=[
            PoolMemberResponse(ship_id=m.ship_id, cb_before=m.cb_before, cb_after=m.cb_after)
            for m in pool.members
        ],
    )


@router.post("/validate", response_model=PoolValidationResponse)
def validate_pool(body: PoolRequest, engine: PoolingEngine = Depends(get_pooling_engine)):
    """Check the pool rules and return the proposed allocation."""
    result = engine.validate_pool(body.year, body.vessels)
    return PoolValidationResponse(
        is_valid=result.is_valid,
        total_cb=result.total_cb,
        members=[PoolMemberAllocationResponse(**asdict(m)) for m in result.members],
        errors=result.errors,
    )


@router.post(
    "", response_model=PoolResponse, status_code=201,
    responses={400: {"model": ErrorResponse}},
)
@limiter.limit(get_rate_limit_string())
def create_pool(
    request: Request,
    body: PoolRequest,
    engine: PoolingEngine = Depends(get_pooling_engine),
):
    """Create a pool and redistribute its members' balances."""
    return _pool_response(engine.create_pool(body.year, body.vessels))


@router.get("", response_model=PoolListResponse)
def list_pools(
    year: int = Query(..., ge=2000, le=2100),
    engine: PoolingEngine = Depends(get_pooling_engine),
):
    return PoolListResponse(year=year, pools=[_pool_response(p) for p in engine.list_pools(year)])


@router.get("/{pool_id}", response_model=PoolResponse, responses={404: {"model": ErrorResponse}})
def get_pool(pool_id: str, engine: PoolingEngine = Depends(get_pooling_engine)):
    return _pool_response(engine.get_pool(pool_id))
