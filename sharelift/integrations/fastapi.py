"""
FastAPI integration for sharelift.

Provides:
- Router factory for the migration trigger endpoint
- Application factory with a lifespan that owns the coordinator

The trigger is synchronous: the response is sent once every file of the
artifact has reached a terminal state.

    POST /api/migrate?artifactId=abc123
        200 "OK"                  all files completed or skipped
        400 <reason>              missing or unusable artifact id
        500 <cause>               any unrecovered failure
"""

import logging
from collections.abc import Callable
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.responses import PlainTextResponse

from sharelift.core.config import MigrationConfig
from sharelift.core.exceptions import InvalidArtifactIdError
from sharelift.integrations._base import CORRELATION_ID_HEADER, correlation_scope
from sharelift.monitoring.logging import setup_migration_logging
from sharelift.monitoring.prometheus import PrometheusMetrics
from sharelift.transfer.coordinator import MigrationCoordinator, create_coordinator

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_PATH",
    "create_app",
    "create_migration_router",
]

DEFAULT_PATH = "/api/migrate"


def create_migration_router(
    coordinator_provider: Callable[[], MigrationCoordinator],
    path: str = DEFAULT_PATH,
) -> APIRouter:
    """
    Create a FastAPI router exposing the migration trigger.

    Args:
        coordinator_provider: Returns the coordinator to run migrations with
            (called per request, so it may be set up after the router)
        path: Route of the POST endpoint

    Returns:
        APIRouter instance

    Example:
        from fastapi import FastAPI
        from sharelift.integrations.fastapi import create_migration_router

        app = FastAPI()
        app.include_router(create_migration_router(lambda: coordinator))
    """
    router = APIRouter(tags=["migration"])

    @router.post(path, response_class=PlainTextResponse)
    async def migrate_handler(
        request: Request,
        artifact_id: str | None = Query(default=None, alias="artifactId"),
        video_id: str | None = Query(default=None, alias="videoId"),
    ):
        """Migrate every file of one artifact, returning once all are done."""
        artifact_id = artifact_id or video_id

        with correlation_scope(request.headers.get(CORRELATION_ID_HEADER)) as correlation_id:
            headers = {CORRELATION_ID_HEADER: correlation_id}

            if not artifact_id:
                return PlainTextResponse(
                    "Missing required query parameter: artifactId",
                    status_code=400,
                    headers=headers,
                )

            try:
                await coordinator_provider().migrate(artifact_id)
            except InvalidArtifactIdError as e:
                return PlainTextResponse(str(e), status_code=400, headers=headers)
            except Exception as e:
                logger.error(f"Migration request failed for {artifact_id}: {e}")
                return PlainTextResponse(str(e), status_code=500, headers=headers)

        return PlainTextResponse("OK", status_code=200, headers=headers)

    return router


def create_app(
    config: MigrationConfig | None = None,
    path: str = DEFAULT_PATH,
    metrics: PrometheusMetrics | None = None,
) -> FastAPI:
    """
    Create the sharelift HTTP application.

    The coordinator is built once at startup (reading ``SHARELIFT_*``
    settings when no config is given); startup fails with
    ConfigurationError if either store is unavailable. Stores are closed
    at shutdown. When ``metrics`` is given, every migration and transfer
    served by the app is recorded on it.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app_config = config or MigrationConfig.from_env()
        migration_logger = setup_migration_logging(app_config.log_level, app_config.log_json)

        async with create_coordinator(
            app_config, logger=migration_logger, metrics=metrics
        ) as coordinator:
            app.state.coordinator = coordinator
            migration_logger.info("sharelift started")
            yield
        migration_logger.info("sharelift shutdown complete")

    app = FastAPI(title="sharelift", lifespan=lifespan)
    app.include_router(create_migration_router(lambda: app.state.coordinator, path))

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app
