"""Route data API schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class RouteCreateRequest(BaseModel):
    """Physical route data for one ship and reporting year."""
    route_id: str = Field(..., min_length=1, max_length=100)
    vessel_type: str = Field("", max_length=100)
    fuel_type: str = Field("", max_length=50)
    year: int = Field(..., ge=2000, le=2100)
    ghg_intensity: float = Field(..., ge=0, allow_inf_nan=False, description="gCO2eq/MJ")
    fuel_consumption: float = Field(..., ge=0, allow_inf_nan=False, description="Fuel consumed (t)")
    distance: float = Field(0.0, ge=0, allow_inf_nan=False, description="km")
    total_emissions: float = Field(0.0, ge=0, allow_inf_nan=False, description="t CO2eq")


class RouteResponse(BaseModel):
    id: str
    route_id: str
    vessel_type: str
    fuel_type: str
    year: int
    ghg_intensity: float
    fuel_consumption: float
    distance: float
    total_emissions: float
    is_baseline: bool
    created_at: Optional[datetime] = None


class RouteListResponse(BaseModel):
    routes: List[RouteResponse]
    count: int
