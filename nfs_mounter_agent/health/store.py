"""In-memory health state shared between the scheduler and the HTTP handlers."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

logger = logging.getLogger(__name__)


class HealthStore:
    """Thread-safe map of mount point → last known health.

    The key set is fixed at construction; every configured mount point starts
    out unhealthy until its first check. Lookups of unconfigured paths report
    ``found=False``, which callers treat as "unknown" rather than unhealthy.
    """

    def __init__(self, mount_points: Iterable[str]) -> None:
        self._lock = threading.Lock()
        self._healthy: dict[str, bool] = {mp: False for mp in mount_points}

    @property
    def mount_points(self) -> list[str]:
        return list(self._healthy)

    def set(self, mount_point: str, healthy: bool) -> None:
        with self._lock:
            if mount_point not in self._healthy:
                logger.debug("Ignoring health update for unconfigured mount point %s", mount_point)
                return
            self._healthy[mount_point] = healthy

    def get(self, mount_point: str) -> tuple[bool, bool]:
        """Return ``(healthy, found)`` for one mount point."""
        with self._lock:
            if mount_point not in self._healthy:
                return False, False
            return self._healthy[mount_point], True

    def aggregate_healthy(self) -> bool:
        """True iff every configured mount point is currently healthy."""
        with self._lock:
            values = list(self._healthy.values())
        return all(values)

    def snapshot(self) -> dict[str, bool]:
        with self._lock:
            return dict(self._healthy)
