"""FastAPI application entry point for Shelfmap."""

import logging

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from shelfmap.api.account import router as account_router
from shelfmap.api.boxes import router as boxes_router
from shelfmap.api.errors import setup_exception_handlers
from shelfmap.api.locations import router as locations_router
from shelfmap.api.members import router as members_router
from shelfmap.api.profiles import router as profiles_router
from shelfmap.api.qr_codes import router as qr_codes_router
from shelfmap.api.workspaces import router as workspaces_router
from shelfmap.config.settings import Environment, get_settings
from shelfmap.db.session import async_session_factory

APP_VERSION = "0.1.0"

settings = get_settings()

_LOG_NAME_TO_LEVEL: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# --- Structured logging ---
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.dev.ConsoleRenderer() if settings.ENVIRONMENT == Environment.DEV
        else structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        _LOG_NAME_TO_LEVEL[settings.LOG_LEVEL.value],
    ),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

# --- FastAPI app ---
app = FastAPI(
    title="Shelfmap API",
    description="Multi-tenant storage organizer: workspaces, location trees, boxes and QR codes.",
    version=APP_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.ENVIRONMENT == Environment.DEV else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

# --- Routers (all under /v1) ---
app.include_router(account_router)
app.include_router(boxes_router)
app.include_router(locations_router)
app.include_router(members_router)
app.include_router(profiles_router)
app.include_router(qr_codes_router)
app.include_router(workspaces_router)


# --- Infrastructure Endpoints ---


@app.get("/health")
async def health_check() -> dict:
    """Liveness check. Returns 200 always; status is 'degraded' if the DB is down."""
    checks: dict[str, bool] = {"api": True}

    try:
        async with async_session_factory() as session:
            await session.execute(text("SELECT 1"))
        checks["database"] = True
    except Exception:
        checks["database"] = False

    return {
        "status": "ok" if all(checks.values()) else "degraded",
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT.value,
        "checks": checks,
    }


@app.get("/api/version")
async def get_version() -> dict[str, str]:
    """Return application name, version, and environment."""
    return {
        "name": "Shelfmap",
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT.value,
    }
