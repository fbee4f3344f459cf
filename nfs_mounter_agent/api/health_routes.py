"""Health endpoints — aggregate and per-mount status for load balancers / orchestrators.

Endpoints (default paths):
  GET /health                         — 200 "ok" if every mount is healthy, else 503
  GET /health/mount-points/<suffix>   — same contract for one mount point;
                                        /health/mount-points/var/data → /var/data
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from nfs_mounter_agent.health.store import HealthStore

logger = logging.getLogger(__name__)

BODY_OK = "ok\n"
BODY_UNHEALTHY = "unhealthy\n"


def status_response(healthy: bool) -> PlainTextResponse:
    if healthy:
        return PlainTextResponse(BODY_OK, status_code=200)
    return PlainTextResponse(BODY_UNHEALTHY, status_code=503)


class HealthEndpoints:
    """Translates HealthStore reads into HTTP responses. No caching across requests."""

    def __init__(
        self,
        store: HealthStore,
        health_path: str = "/health",
        mount_points_subpath: str = "mount-points",
    ) -> None:
        self.store = store
        self.health_path = "/" + health_path.strip("/")
        self.prefix = f"{self.health_path.rstrip('/')}/{mount_points_subpath.strip('/')}"

    def aggregate(self) -> PlainTextResponse:
        return status_response(self.store.aggregate_healthy())

    def mount_point(self, request_path: str) -> PlainTextResponse:
        """Resolve ``<prefix>/<suffix>`` to mount point ``/<suffix>`` and report it."""
        if not request_path.startswith(self.prefix):
            return PlainTextResponse("not found\n", status_code=404)

        rest = request_path[len(self.prefix):]
        if rest and not rest.startswith("/"):
            # sibling path such as /health/mount-pointsX
            return PlainTextResponse("not found\n", status_code=404)

        suffix = rest.lstrip("/")
        if not suffix:
            return PlainTextResponse("mount point path required\n", status_code=400)

        mount_point = "/" + suffix
        healthy, found = self.store.get(mount_point)
        if not found:
            logger.debug("Health query for unconfigured mount point %s", mount_point)
            return PlainTextResponse("mount point not configured\n", status_code=404)
        return status_response(healthy)


def create_health_router(endpoints: HealthEndpoints) -> APIRouter:
    """Build the router for the configured health paths."""
    router = APIRouter()

    def aggregate_health() -> PlainTextResponse:
        return endpoints.aggregate()

    def mount_point_health(request: Request) -> PlainTextResponse:
        # scope["path"] is already percent-decoded; request.url would re-split it on ? and #
        return endpoints.mount_point(request.scope["path"])

    router.add_api_route(
        endpoints.health_path, aggregate_health,
        methods=["GET"], response_class=PlainTextResponse,
    )
    router.add_api_route(
        endpoints.prefix, mount_point_health,
        methods=["GET"], response_class=PlainTextResponse,
    )
    router.add_api_route(
        endpoints.prefix + "/{mount_path:path}", mount_point_health,
        methods=["GET"], response_class=PlainTextResponse,
    )
    return router
