"""eVote API — FastAPI application factory."""


import asyncio
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from evote.core.config import settings
from evote.core.exceptions import register_exception_handlers
from evote.core.notifications import change_feed
from evote.db.base import async_session_factory, dispose_engine
from evote.middleware.audit import AuditMiddleware
from evote.schemas.common import HealthResponse
from evote.services.monitor import TimelineMonitor
from evote.services.tally import run_periodic_reconciliation

# v1 routers
from evote.routers.v1.admin import router as admin_v1_router
from evote.routers.v1.aspirants import router as aspirants_v1_router
from evote.routers.v1.audit import router as audit_v1_router
from evote.routers.v1.catalog import router as catalog_v1_router
from evote.routers.v1.results import router as results_v1_router
from evote.routers.v1.timeline import router as timeline_v1_router
from evote.routers.v1.voters import router as voters_v1_router
from evote.routers.v1.votes import router as votes_v1_router

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    """Set up structured logging for the application."""
    level = logging.DEBUG if settings.app_env == "development" else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    monitor = TimelineMonitor(
        async_session_factory, change_feed, refresh_seconds=settings.stage_refresh_seconds,
    )
    app.state.timeline_monitor = monitor
    monitor.start()

    reconciler = None
    if settings.tally_reconcile_seconds > 0:
        reconciler = asyncio.create_task(
            run_periodic_reconciliation(async_session_factory, settings.tally_reconcile_seconds),
            name="tally-reconciler",
        )
    try:
        yield
    finally:
        if reconciler is not None:
            reconciler.cancel()
        await monitor.stop()
        await change_feed.close()
        await dispose_engine()


def create_app() -> FastAPI:
    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.app_env == "development" else None,
        redoc_url="/redoc" if settings.app_env == "development" else None,
    )

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # --- Audit middleware ---
    if settings.request_audit_enabled:
        app.add_middleware(AuditMiddleware)

    # --- Global exception handlers ---
    register_exception_handlers(app)

    # --- v1 API routes (/api/v1/*) ---
    app.include_router(timeline_v1_router, prefix="/api/v1")
    app.include_router(catalog_v1_router, prefix="/api/v1")
    app.include_router(voters_v1_router, prefix="/api/v1")
    app.include_router(aspirants_v1_router, prefix="/api/v1")
    app.include_router(votes_v1_router, prefix="/api/v1")
    app.include_router(results_v1_router, prefix="/api/v1")
    app.include_router(audit_v1_router, prefix="/api/v1")
    app.include_router(admin_v1_router, prefix="/api/v1")

    # --- Health check ---
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health(request: Request):
        monitor = getattr(request.app.state, "timeline_monitor", None)
        last = monitor.last_status if monitor else None
        return HealthResponse(
            app=settings.app_name,
            env=settings.app_env,
            voting_active=last.is_voting_active if last else None,
            results_published=last.is_results_published if last else None,
        )

    return app


app = create_app()
