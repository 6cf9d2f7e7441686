"""
FuelEU Ledger API Pydantic schemas.

Re-exports all schema classes for short imports:
    from api.schemas import BankSurplusRequest, PoolRequest, ...
"""

# Common
from .common import ErrorResponse  # noqa: F401

# Routes
from .routes import RouteCreateRequest, RouteResponse, RouteListResponse  # noqa: F401

# Compliance
from .compliance import (  # noqa: F401
    ComplianceBalanceResponse,
    FleetComplianceResponse,
    AdjustedComplianceResponse,
    FleetAdjustedComplianceResponse,
)

# Banking
from .banking import (  # noqa: F401
    BankSurplusRequest,
    ApplyBankedRequest,
    BankingResultResponse,
    BankEntryResponse,
    BankingRecordsResponse,
    BankingBalanceResponse,
)

# Pooling
from .pooling import (  # noqa: F401
    PoolRequest,
    PoolMemberAllocationResponse,
    PoolValidationResponse,
    PoolMemberResponse,
    PoolResponse,
    PoolListResponse,
)
