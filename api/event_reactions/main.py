"""
FastAPI application for the Event Reactions API.
This module sets up the API server with routes, middleware, and error handling.
"""

import ipaddress
import logging
import sys
from contextlib import asynccontextmanager

from event_reactions.core.config import Settings, get_settings
from event_reactions.core.error_handlers import (
    base_exception_handler,
    request_validation_exception_handler,
    unhandled_exception_handler,
)
from event_reactions.core.exceptions import BaseAppException
from event_reactions.db.database import ReactionDatabase
from event_reactions.db.repository import ReactionStore
from event_reactions.middleware import CacheControlMiddleware
from event_reactions.routes import health, reactions
from event_reactions.services.reaction_service import ReactionService
from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from prometheus_fastapi_instrumentator import Instrumentator
from prometheus_fastapi_instrumentator import metrics as instrumentator_metrics

# Configure logging
logging.basicConfig(
    level=get_settings().LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger("event_reactions.main")


def _resolve_settings(app: FastAPI) -> Settings:
    """Honor a test override of get_settings, as route dependencies would."""
    provider = app.dependency_overrides.get(get_settings, get_settings)
    return provider()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Application startup...")

    settings = _resolve_settings(app)
    app.state.settings = settings

    # Create data directories (avoid import-time I/O)
    settings.ensure_data_dirs()

    logger.info("Opening reaction store...")
    database = ReactionDatabase(
        settings.REACTIONS_DB_PATH, busy_timeout_ms=settings.DB_BUSY_TIMEOUT_MS
    )
    database.initialize()

    store = ReactionStore(database)
    app.state.reaction_database = database
    app.state.reaction_service = ReactionService(
        store, scoping_enabled=settings.SCOPING_ENABLED
    )
    logger.info(
        f"Reaction service ready (scoping {'enabled' if settings.SCOPING_ENABLED else 'disabled'})"
    )

    try:
        # Yield control to the application
        yield
    finally:
        # Shutdown
        logger.info("Application shutdown...")
        app.state.reaction_service = None
        database.close()


# Create FastAPI application
app = FastAPI(
    title=get_settings().PROJECT_NAME,
    docs_url=f"{get_settings().API_PREFIX}/docs",
    openapi_url=f"{get_settings().API_PREFIX}/openapi.json",
    lifespan=lifespan,
)

# Configure CORS
# Toggle credentials off when wildcard is used (Starlette forbids wildcard + credentials)
_origins = get_settings().CORS_ORIGINS
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=False if _origins == ["*"] else True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Polled counts must never be served from a cache
app.add_middleware(CacheControlMiddleware, path_prefix=get_settings().API_PREFIX)
logger.info("Cache control middleware registered")

# Set up Prometheus metrics
# DON'T call .expose() - the /metrics endpoint below applies the production allowlist
instrumentator = Instrumentator(
    should_group_status_codes=False,
    should_ignore_untemplated=True,
    should_respect_env_var=False,  # Always enable metrics
    should_instrument_requests_inprogress=True,
    excluded_handlers=["/health", "/health/ready", "/health/live", "/healthcheck", "/metrics"],
    inprogress_name="http_requests_inprogress",
    inprogress_labels=True,
)
instrumentator.add(instrumentator_metrics.default())
instrumentator.instrument(app)
logger.info("Prometheus metrics instrumentation initialized")


def _is_private_client(client_host: str) -> bool:
    if client_host == "localhost":
        return True
    # Strip IPv6 brackets, split only on last colon to preserve IPv6 addresses
    parsed_host = client_host.strip("[]")
    if parsed_host.count(":") == 1:
        parsed_host = parsed_host.rsplit(":", 1)[0]
    try:
        ip = ipaddress.ip_address(parsed_host)
    except ValueError:
        # Unparsable address - deny (fail closed)
        return False
    return ip.is_private or ip.is_loopback or ip.is_link_local


@app.get("/metrics", include_in_schema=False)
async def metrics(request: Request):
    """
    Prometheus metrics endpoint.

    In production only private, loopback and link-local clients are served.
    """
    if _resolve_settings(request.app).is_production:
        client_host = (request.client.host if request.client else "") or ""
        if not _is_private_client(client_host):
            raise HTTPException(status_code=404)

    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(
    reactions.router, prefix=get_settings().API_PREFIX, tags=["Reactions"]
)


@app.get("/healthcheck")
async def healthcheck():
    return {"status": "healthy"}


# Register exception handlers
# Register specific application exceptions first
app.add_exception_handler(BaseAppException, base_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)  # type: ignore[arg-type]
# Then register generic exception handler as fallback
app.add_exception_handler(Exception, unhandled_exception_handler)


def run() -> None:
    """Run the API with uvicorn using the configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "event_reactions.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
