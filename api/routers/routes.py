"""
Route data API router.

Routes are the physical input of the ledger: one per ship and year, keyed by
route_id (which doubles as the ship id).
"""

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from api.dependencies import get_unit_of_work
from api.rate_limit import limiter, get_rate_limit_string
from api.repositories import SqlAlchemyUnitOfWork
from api.schemas import RouteCreateRequest, RouteListResponse, RouteResponse
from src.compliance.models import RouteRecord

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/routes", tags=["Routes"])


@router.get("", response_model=RouteListResponse)
def list_routes(
    vessel_type: Optional[str] = Query(None),
    fuel_type: Optional[str] = Query(None),
    year: Optional[int] = Query(None),
    uow: SqlAlchemyUnitOfWork = Depends(get_unit_of_work),
):
    """List routes, optionally filtered by vessel type, fuel type and year."""
    routes = uow.routes.find_all(vessel_type=vessel_type, fuel_type=fuel_type, year=year)
    return RouteListResponse(
        routes=[RouteResponse(**asdict(r)) for r in routes],
        count=len(routes),
    )


@router.post("", response_model=RouteResponse, status_code=201)
@limiter.limit(get_rate_limit_string())
def create_route(
    request: Request,
    body: RouteCreateRequest,
    uow: SqlAlchemyUnitOfWork = Depends(get_unit_of_work),
):
    """Register route data for a ship and year."""
    if uow.routes.find_by_route_id(body.route_id) is not None:
        raise HTTPException(status_code=409, detail=f"Route {body.route_id} already exists")

    with uow.transaction():
        route = uow.routes.create(RouteRecord(**body.model_dump()))

    logger.info(f"Created route {route.route_id} for year {route.year}")
    return RouteResponse(**asdict(route))
