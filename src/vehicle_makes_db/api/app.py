"""FastAPI application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from vehicle_makes_db import __version__
from vehicle_makes_db.config import get_settings
from vehicle_makes_db.db import create_tables, dispose_engine
from vehicle_makes_db.exceptions import VehicleMakesError
from vehicle_makes_db.logging import get_logger
from vehicle_makes_db.scheduler import SyncScheduler

from .graphql import create_graphql_router
from .routes import router

logger = get_logger(__name__)


def create_app(
    enable_scheduler: bool = True,
    scheduler: SyncScheduler | None = None,
) -> FastAPI:
    """Create the read API application.

    Args:
        enable_scheduler: Start the periodic sync with the server
        scheduler: Pre-built scheduler (defaults to one built from settings)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await create_tables()
        sync_scheduler = (scheduler or SyncScheduler()) if enable_scheduler else None
        app.state.scheduler = sync_scheduler
        if sync_scheduler is not None:
            sync_scheduler.start()
        logger.info("Vehicle Makes DB v{} started", __version__)
        try:
            yield
        finally:
            if sync_scheduler is not None:
                await sync_scheduler.shutdown()
            await dispose_engine()
            logger.info("Vehicle Makes DB stopped")

    application = FastAPI(
        title="Vehicle Makes DB",
        version=__version__,
        description="Vehicle makes and types synchronized from NHTSA vPIC",
        lifespan=lifespan,
    )
    application.state.scheduler = None

    application.include_router(router)
    application.include_router(create_graphql_router(), prefix="/graphql")

    @application.exception_handler(VehicleMakesError)
    async def vehicle_makes_error_handler(request: Request, exc: VehicleMakesError) -> JSONResponse:
        logger.error("{} {} failed: {}", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=500,
            content={"error": type(exc).__name__, "message": str(exc)},
        )

    @application.get("/health", tags=["Health"])
    async def health_check(request: Request) -> dict[str, object]:
        """Liveness payload with scheduler state."""
        sync_scheduler: SyncScheduler | None = request.app.state.scheduler
        return {
            "status": "healthy",
            "version": __version__,
            "environment": get_settings().environment,
            "scheduler": sync_scheduler is not None and sync_scheduler.running,
            "syncInProgress": sync_scheduler is not None and sync_scheduler.sync_in_progress,
        }

    return application
