"""
FuelEU Ledger API - FastAPI application.

Serves the FuelEU Maritime compliance ledger:
- Compliance Balance per ship and year, derived from route data
- Banking of surplus (Article 20) with FIFO application to deficit years
- Pooling (Article 21) with validation and equal redistribution
- Route data management
"""

import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from api.config import settings
from api.database import init_db
from api.health import API_VERSION
from api.middleware import setup_middleware, structured_logger, get_request_id
from api.rate_limit import limiter
from api.routers import banking, compliance, pooling, routes, system
from src.compliance.errors import ConsistencyError, NotFoundError, ValidationError

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)
logger = logging.getLogger(__name__)


# =============================================================================
# Exception handlers
# =============================================================================

async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=400,
        content={"detail": exc.message, "reasons": exc.reasons},
    )


async def not_found_error_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def consistency_error_handler(request: Request, exc: ConsistencyError):
    request_id = get_request_id()
    structured_logger.error(
        "Ledger consistency failure",
        error=str(exc),
        path=request.url.path,
        method=request.method,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "detail": "Ledger state is inconsistent. Please contact support with the request ID.",
            "request_id": request_id,
        },
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={
            "error": "Rate limit exceeded",
            "detail": str(exc.detail),
            "retry_after": getattr(exc, 'retry_after', 60),
        },
        headers={"Retry-After": str(getattr(exc, 'retry_after', 60))},
    )


# =============================================================================
# Application Factory
# =============================================================================

def create_app() -> FastAPI:
    """
    Application factory for the FuelEU Ledger API.

    Returns:
        FastAPI: Configured application instance
    """
    application = FastAPI(
        title="FuelEU Ledger API",
        description="""
## FuelEU Maritime Compliance Ledger

Tracks each ship's Compliance Balance per reporting year and the two
flexibility mechanisms that move it.

### Features
- Compliance Balance from GHG intensity and fuel consumption
- Banking of surplus and FIFO application to deficit years
- Pool validation and creation with equal redistribution

### Rate Limiting
Write endpoints are rate limited per API key or client IP.
        """,
        version=API_VERSION,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    setup_middleware(
        application,
        debug=settings.debug or settings.is_development,
        enable_hsts=settings.is_production,
    )

    # CORS middleware - use configured origins only (NO WILDCARDS)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    application.state.limiter = limiter

    application.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    application.add_exception_handler(ValidationError, validation_error_handler)
    application.add_exception_handler(NotFoundError, not_found_error_handler)
    application.add_exception_handler(ConsistencyError, consistency_error_handler)
    application.add_exception_handler(RequestValidationError, request_validation_handler)

    application.include_router(system.router)
    application.include_router(routes.router)
    application.include_router(compliance.router)
    application.include_router(banking.router)
    application.include_router(pooling.router)

    @application.on_event("startup")
    async def startup_event():
        init_db()
        logger.info(
            f"FuelEU Ledger API started (environment={settings.environment}, "
            f"target={settings.target_policy().default} gCO2eq/MJ)"
        )

    return application


app = create_app()


# ============================================================================
# Run Server
# ============================================================================

if __name__ == "__main__":
    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_level=settings.log_level,
    )
