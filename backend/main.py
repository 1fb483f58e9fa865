"""
PSW Direct - Main Application Entry Point

Pricing, shift lifecycle and payroll settlement API for the home-care
booking portal.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from backend.config import get_settings
from backend.db.session import engine
from backend.middleware.audit_log import AuditLogMiddleware
from backend.routers.v1 import admin, bookings, payroll, quotes, shifts

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize Sentry for error monitoring
if settings.sentry_dsn:
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        release=f"pswdirect@{settings.app_version}",
        traces_sample_rate=0.1 if settings.environment == "production" else 1.0,
        integrations=[
            FastApiIntegration(),
            SqlalchemyIntegration(),
        ],
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown events."""
    # Database connection pool is lazy-initialized by SQLAlchemy
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description=(
        "Pricing, shift lifecycle and payroll settlement for PSW Direct home care: "
        "quotes with surge and minimum-fee rules, a race-safe job board, and "
        "payroll entries with category rates and overtime."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/api/docs" if settings.debug else None,
    redoc_url="/api/redoc" if settings.debug else None,
    openapi_url="/api/openapi.json" if settings.debug else None,
)

# Audit logging middleware (outermost, captures all requests)
app.add_middleware(AuditLogMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Persistence failures are surfaced as retryable; nothing is retried server-side."""
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Storage temporarily unavailable, please retry"},
        headers={"Retry-After": "5"},
    )


# Health check endpoints
@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "pswdirect-api"}


@app.get("/health/ready", tags=["Health"])
async def readiness_check() -> JSONResponse:
    """Readiness check with database connectivity."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning(f"Readiness check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "service": "pswdirect-api"},
        )
    return JSONResponse(
        content={
            "status": "ready",
            "service": "pswdirect-api",
            "version": settings.app_version,
            "environment": settings.environment,
        }
    )


# API v1 routes
app.include_router(
    quotes.router,
    prefix=f"{settings.api_v1_prefix}/quotes",
    tags=["Quotes"],
)
app.include_router(
    bookings.router,
    prefix=f"{settings.api_v1_prefix}/bookings",
    tags=["Bookings"],
)
app.include_router(
    shifts.router,
    prefix=f"{settings.api_v1_prefix}/shifts",
    tags=["Shifts"],
)
app.include_router(
    payroll.router,
    prefix=f"{settings.api_v1_prefix}/payroll",
    tags=["Payroll"],
)
app.include_router(
    admin.router,
    prefix=f"{settings.api_v1_prefix}/admin",
    tags=["Admin"],
)
