"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages shutdown of the job runner and the database
engine. Middleware, CORS, error handlers and routers are all registered
here; each concern lives in its own module.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from datagov import __version__
from datagov.api import api_router
from datagov.config import settings
from datagov.db.engine import async_session_factory, engine
from datagov.logging_config import configure_logging
from datagov.middleware.errors import register_error_handlers
from datagov.middleware.request_id import RequestIdMiddleware
from datagov.middleware.security import SecurityHeadersMiddleware
from datagov.services.job_runner import JobRunner

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs at
    shutdown. Runs still pending at shutdown are cancelled and end up
    failed rather than stuck in "running".
    """
    logger.info(
        "datagov.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    yield

    logger.info("datagov.shutdown")
    await app.state.job_runner.shutdown()
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    configure_logging(level=settings.log_level, json_format=settings.log_json)

    app = FastAPI(
        title="Data Governance Platform",
        description="Multi-tenant API for datasets, jobs, members and API keys",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.job_runner = JobRunner(async_session_factory, delay=settings.job_run_delay_seconds)

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: Security → RequestId → CORS → handler
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    register_error_handlers(app)
    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: datagov.main:app)
app = create_app()
