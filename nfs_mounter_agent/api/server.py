"""FastAPI application — health routes, Prometheus endpoint, scheduler lifespan."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST

from nfs_mounter_agent import PROGRAM_NAME, __version__
from nfs_mounter_agent.api.health_routes import HealthEndpoints, create_health_router
from nfs_mounter_agent.config import Settings
from nfs_mounter_agent.health.scheduler import MountScheduler
from nfs_mounter_agent.health.store import HealthStore
from nfs_mounter_agent.metrics.reporter import MetricsReporter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run the mount scheduler for as long as the server is up."""
    scheduler: MountScheduler = app.state.scheduler
    try:
        await scheduler.start()
    except Exception:
        logger.exception("Mount scheduler failed to start")

    yield

    await scheduler.stop()


def create_app(
    settings: Settings,
    store: HealthStore | None = None,
    reporter: MetricsReporter | None = None,
    scheduler: MountScheduler | None = None,
) -> FastAPI:
    """Wire the store, metrics and scheduler for *settings* into a FastAPI app."""
    store = store or HealthStore(settings.mount_points)
    reporter = reporter or MetricsReporter(
        namespace=settings.telemetry_namespace,
        program=PROGRAM_NAME,
        version=__version__,
        write_test_enabled=settings.enable_write_test,
    )
    scheduler = scheduler or MountScheduler(
        settings.mount_points,
        store,
        reporter,
        interval=settings.check_interval,
        write_test_enabled=settings.enable_write_test,
        mount_table=settings.mount_table,
    )

    app = FastAPI(
        title="NFS Mounter Agent",
        version=__version__,
        lifespan=lifespan,
        # paths match exactly; /health/ is a 404, not a redirect to /health
        redirect_slashes=False,
    )
    app.state.settings = settings
    app.state.health_store = store
    app.state.metrics = reporter
    app.state.scheduler = scheduler

    endpoints = HealthEndpoints(store, settings.health_path, settings.mount_points_subpath)
    app.include_router(create_health_router(endpoints))

    @app.get(settings.telemetry_path, include_in_schema=False)
    def metrics() -> Response:
        return Response(reporter.exposition(), media_type=CONTENT_TYPE_LATEST)

    return app
