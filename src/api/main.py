"""FastAPI application for the BizAdvisor API.

Provides the main application instance with routers, middleware,
and exception handlers configured.
"""

import logging
import os
import sys
import time as _time
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

from fastapi import FastAPI, Request

# Configure logging to stdout for uvicorn to capture
logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(levelname)s:%(name)s:%(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
# Ensure our application loggers are captured
logging.getLogger("src").setLevel(os.environ.get("LOG_LEVEL", "INFO").upper())
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.routes import (
    accounts,
    analytics,
    business,
    chat,
    conversations,
    files,
    identities,
)
from src.db.connection import SessionLocal, close_db, init_db
from src.errors import AppError, DomainError
from src.services.analytics_service import AnalyticsService
from src.utils.locale import detect_locale

logger = logging.getLogger(__name__)

_startup_time: float = 0.0


def _parse_allowed_origins() -> list[str]:
    """Parse comma-separated CORS allowlist from ALLOWED_ORIGINS env var."""
    raw = os.environ.get("ALLOWED_ORIGINS", "").strip()
    if not raw:
        return []
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and seed default trends; dispose the engine on shutdown."""
    global _startup_time

    _startup_time = _time.time()
    init_db()
    with SessionLocal() as db:
        AnalyticsService(db).seed_defaults()
    logger.info("BizAdvisor API started")

    yield

    close_db()
    logger.info("BizAdvisor API stopped")


app = FastAPI(
    title="BizAdvisor API",
    description="Business advisor chat with persisted conversations and context",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS allowlist is env-driven. If unset, CORS is disabled (same-origin only).
allowed_origins = _parse_allowed_origins()
if allowed_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _error_response(error: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=error.http_status,
        content={
            "error_code": error.code,
            "error": error.key,
            "message": error.message,
            "remediation": error.remediation,
        },
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render an already-localized AppError.

    Args:
        request: The incoming request.
        exc: The AppError exception.

    Returns:
        JSONResponse with the registry status and error details.
    """
    return _error_response(exc)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Translate a domain exception using the request's locale.

    Args:
        request: The incoming request.
        exc: The DomainError exception.

    Returns:
        JSONResponse with the registry status and error details.
    """
    error = AppError.from_domain(exc, detect_locale(request))
    if error.http_status >= 500:
        logger.error("%s on %s %s: %s", error.code, request.method, request.url.path, exc)
    return _error_response(error)


# Include routers
app.include_router(chat.router, prefix="/api/v1")
app.include_router(conversations.router, prefix="/api/v1")
app.include_router(identities.router, prefix="/api/v1")
app.include_router(accounts.router, prefix="/api/v1")
app.include_router(files.router, prefix="/api/v1")
app.include_router(analytics.router, prefix="/api/v1")
app.include_router(business.router, prefix="/api/v1")


@app.get("/health")
def health_check() -> dict:
    """Health check endpoint.

    Returns:
        Dictionary with status, version and uptime.
    """
    uptime = int(_time.time() - _startup_time) if _startup_time else 0

    # Version from package metadata (matches pyproject.toml)
    try:
        version = _pkg_version("bizadvisor")
    except PackageNotFoundError:
        version = "unknown"

    return {"status": "ok", "version": version, "uptime_seconds": uptime}
