"""Mount check scheduler — one pass right away, then one pass per interval.

Each check runs on a single worker thread so filesystem calls (which can hang
on a dead NFS server) never block the event loop serving HTTP. Passes never
overlap: a pass that overruns the interval delays the next one instead of
queueing extra passes. Stopping is cooperative through an asyncio.Event that
is checked before every check and awaited between passes.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from .engine import MOUNT_TABLE_PATH, CheckResult, evaluate_mount_point
from .store import HealthStore

if TYPE_CHECKING:
    from nfs_mounter_agent.metrics.reporter import MetricsReporter

logger = logging.getLogger(__name__)


class MountScheduler:
    """Periodically evaluates every configured mount point."""

    def __init__(
        self,
        mount_points: Sequence[str],
        store: HealthStore,
        reporter: MetricsReporter | None = None,
        interval: float = 30.0,
        write_test_enabled: bool = False,
        mount_table: str = MOUNT_TABLE_PATH,
    ) -> None:
        self.mount_points = list(mount_points)
        self.store = store
        self.reporter = reporter
        self.interval = interval
        self.write_test_enabled = write_test_enabled
        self.mount_table = mount_table
        self._task: asyncio.Task[None] | None = None
        self._stop: asyncio.Event | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    # ── Checks ───────────────────────────────────────────────────────────────

    def check_mount_point(self, mount_point: str) -> CheckResult:
        """Evaluate one mount point and publish the result."""
        result = evaluate_mount_point(mount_point, self.write_test_enabled, self.mount_table)
        was_healthy, _ = self.store.get(mount_point)

        self.store.set(mount_point, result.healthy)
        if self.reporter:
            self.reporter.record_check(result)

        if result.error is not None:
            logger.warning("mountpoint %s unhealthy: %s", mount_point, result.error)
        elif not was_healthy:
            logger.info("mountpoint %s healthy", mount_point)
        return result

    def check_all(self) -> list[CheckResult]:
        """Run one synchronous pass over all mount points in configured order."""
        return [self.check_mount_point(mp) for mp in self.mount_points]

    # ── Loop ─────────────────────────────────────────────────────────────────

    async def run(self, stop: asyncio.Event) -> None:
        """Run passes until *stop* is set."""
        logger.info(
            "Starting mount scheduler, interval=%ss, write_test=%s, mountpoints=%s",
            self.interval, self.write_test_enabled, self.mount_points,
        )
        loop = asyncio.get_running_loop()

        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="mount-check") as executor:
            while not stop.is_set():
                started = loop.time()
                try:
                    await self._run_pass(executor, stop)
                except Exception:
                    logger.exception("Mount check pass failed")

                if stop.is_set():
                    break
                delay = self.interval - (loop.time() - started)
                if delay <= 0:
                    logger.debug("Check pass overran interval by %.3fs", -delay)
                    continue
                try:
                    await asyncio.wait_for(stop.wait(), timeout=delay)
                except asyncio.TimeoutError:
                    pass

        logger.info("Mount scheduler received stop signal, stopping")

    async def _run_pass(self, executor: ThreadPoolExecutor, stop: asyncio.Event) -> None:
        loop = asyncio.get_running_loop()
        for mp in self.mount_points:
            if stop.is_set():
                return
            await loop.run_in_executor(executor, self.check_mount_point, mp)

    async def start(self) -> None:
        """Start the background loop (no-op if already running)."""
        if self.running:
            return
        self._stop = asyncio.Event()
        self._task = asyncio.create_task(self.run(self._stop), name="mount-scheduler")

    async def stop(self) -> None:
        """Signal the loop and wait for it to finish its in-flight check."""
        if self._task is None or self._stop is None:
            return
        self._stop.set()
        await self._task
        self._task = None
        logger.info("Mount scheduler stopped")
