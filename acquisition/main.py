"""FastAPI application entry point with lifespan management.

Startup: configure logging, start the periodic proxy health-check loop.
Shutdown: cancel the health-check loop, close the HTTP client.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from acquisition import __version__
from acquisition.bootstrap import Components, build_components
from acquisition.config.settings import AcquisitionSettings
from acquisition.logging_config import configure_logging
from acquisition.middleware.error_handler import register_error_handlers
from acquisition.routers.content import create_content_router
from acquisition.routers.diagnostics import create_diagnostics_router
from acquisition.routers.health import create_health_router
from acquisition.storage.kv_store import KeyValueStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown logic."""
    components: Components = app.state.components
    settings = components.settings

    configure_logging(settings.log_level)
    logger.info("Starting acquisition service on port %d", settings.port)

    health_check_task = asyncio.create_task(
        components.health_checker.health_check_loop(
            components.proxies,
            settings.health_check_interval_seconds,
            components.observer,
        )
    )

    logger.info("Acquisition service started successfully")

    yield

    # --- Shutdown ---
    logger.info("Shutting down acquisition service…")

    health_check_task.cancel()
    try:
        await health_check_task
    except asyncio.CancelledError:
        pass

    await components.aclose()
    logger.info("Acquisition service shut down")


def create_app(
    settings: AcquisitionSettings | None = None,
    store: KeyValueStore | None = None,
    client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Components are built eagerly so that routers can be mounted before the
    first request; the lifespan only starts and stops background work.
    """
    settings = settings or AcquisitionSettings()
    components = build_components(settings, store=store, client=client)

    app = FastAPI(
        title="Newsletter Content Acquisition Service",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.components = components

    register_error_handlers(app)

    app.include_router(create_health_router(components=components))
    app.include_router(create_content_router(coordinator=components.coordinator))
    app.include_router(create_diagnostics_router(components=components))

    return app


app = create_app()
