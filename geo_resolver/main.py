"""geo-resolver — FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from geo_resolver.adapters.snapshot.loader import load_snapshot_file
from geo_resolver.config import settings
from geo_resolver.infrastructure.api.dependencies import (
    get_resolution_service,
    shutdown_resolution_service,
)
from geo_resolver.infrastructure.api.routes_admin import router as admin_router
from geo_resolver.infrastructure.api.routes_geocode import router as geocode_router
from geo_resolver.infrastructure.api.routes_health import router as health_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    if settings.snapshot_path:
        try:
            get_resolution_service().load_snapshot(load_snapshot_file(settings.snapshot_path))
        except (OSError, ValueError) as e:
            logger.warning("Geocode snapshot not loaded from %s: %s", settings.snapshot_path, e)
    yield
    await shutdown_resolution_service()


def create_app() -> FastAPI:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(levelname)s | %(name)s | %(message)s",
    )

    app = FastAPI(
        title="geo-resolver",
        description="Address geocoding with overrides, snapshot, adaptive cache and throttled provider calls",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(health_router, prefix="/api")
    app.include_router(geocode_router, prefix="/api")
    app.include_router(admin_router, prefix="/api")

    return app


app = create_app()
