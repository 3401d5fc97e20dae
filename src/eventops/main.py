"""FastAPI application factory and lifespan management."""

import asyncio
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eventops.config import settings
from eventops.logging_config import configure_logging

# Configure logging at import time
_json_logs = os.environ.get("EVENTOPS_LOCAL_MODE", "0") != "1"
configure_logging(log_level=settings.log_level, json_output=_json_logs)

logger = logging.getLogger(__name__)


def attach_runtime(app: FastAPI, session_factory) -> None:
    """Wire the audit sink and job engine onto app state for a session factory."""
    from eventops.events.audit import AuditSink
    from eventops.workers.engine import JobEngine

    app.state.db_session_factory = session_factory
    app.state.audit = AuditSink(session_factory)
    app.state.job_engine = JobEngine(session_factory, audit=app.state.audit)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown resources."""
    from eventops.db.engine import create_db_engine, create_session_factory

    db_url = settings.effective_database_url
    engine = create_db_engine(db_url)

    # Auto-create tables for SQLite (local dev, no migrations)
    if "sqlite" in db_url:
        from eventops.db.base import Base
        import eventops.db.models  # noqa: F401 (registers ORM models)

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("SQLite tables created (local mode)")

    app.state.db_engine = engine
    attach_runtime(app, create_session_factory(engine))

    scheduler_task = None
    if settings.scheduler_enabled:
        from eventops.workers.scheduler import run_scheduler
        scheduler_task = asyncio.create_task(run_scheduler(app))

    logger.info("eventops API started (db=%s)", "sqlite" if "sqlite" in db_url else "postgresql")
    yield

    # Shutdown
    if scheduler_task is not None:
        scheduler_task.cancel()
        try:
            await scheduler_task
        except asyncio.CancelledError:
            pass
    await app.state.audit.drain()
    await engine.dispose()
    logger.info("eventops API shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="eventops API",
        version="0.1.0",
        description="Asynchronous work-processing core for event operations.",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from eventops.api.middleware.trace_id import TraceIdMiddleware
    app.add_middleware(TraceIdMiddleware)

    # Register error handlers
    from eventops.errors.handlers import register_exception_handlers
    register_exception_handlers(app)

    # Import and mount routers
    from eventops.api.router import api_router
    app.include_router(api_router)

    return app


app = create_app()
