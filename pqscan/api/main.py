"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pqscan import __version__
from pqscan.api.errors import register_error_handlers
from pqscan.api.routes import scan
from pqscan.core.config import Settings, get_settings
from pqscan.core.logging import setup_logging

logger = logging.getLogger(__name__)

health_router = APIRouter()


@health_router.get("/")
def root() -> dict:
    return {"status": "running", "service": "pqscan"}


@health_router.get("/health")
def health_check() -> dict:
    """Quick liveness probe."""
    return {"status": "healthy", "service": "pqscan", "version": __version__}


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        setup_logging(env=settings.app_env, log_level="DEBUG" if settings.debug else settings.log_level)
        logger.info("Starting %s in %s mode (reports: %s)", settings.app_name, settings.app_env, settings.report_dir)
        yield
        logger.info("Shutting down %s", settings.app_name)

    app = FastAPI(
        title="pqscan API",
        description="Quantum-risk static analysis for Solidity contracts.",
        version=__version__,
        lifespan=lifespan,
        docs_url=None if settings.app_env == "production" else "/docs",
        redoc_url=None,
    )
    app.state.settings = settings

    # Dashboard is served from a different origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["Content-Type", "Accept"],
    )

    register_error_handlers(app)

    app.include_router(health_router, tags=["health"])
    app.include_router(scan.router, tags=["scan"])

    return app
