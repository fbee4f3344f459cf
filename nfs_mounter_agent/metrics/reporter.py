"""Prometheus metrics for mount checks, kept on an explicitly passed registry."""

from __future__ import annotations

import logging

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    disable_created_metrics,
    generate_latest,
)

from nfs_mounter_agent.health.engine import CheckResult

logger = logging.getLogger(__name__)


class MetricsReporter:
    """Records check outcomes into ``<namespace>_*`` series.

    The write-test histogram is only registered when the write test is
    enabled, so scrapers can tell "disabled" apart from "no samples yet".
    """

    def __init__(
        self,
        namespace: str,
        program: str,
        version: str,
        write_test_enabled: bool = False,
        registry: CollectorRegistry | None = None,
    ) -> None:
        # no *_created series; this switch is process-wide in prometheus_client
        disable_created_metrics()
        self.registry = registry if registry is not None else CollectorRegistry()
        self.namespace = namespace

        self.build_info = Gauge(
            "build_info",
            f"Build information for {program}",
            ["program", "version"],
            namespace=namespace,
            registry=self.registry,
        )
        self.mount_healthy = Gauge(
            "mount_healthy",
            "1 if NFS mount is healthy, 0 otherwise",
            ["mountpoint"],
            namespace=namespace,
            registry=self.registry,
        )
        self.checks_total = Counter(
            "checks_total",
            "Number of NFS health checks",
            ["mountpoint", "result"],
            namespace=namespace,
            registry=self.registry,
        )
        self.write_test_duration: Histogram | None = None
        if write_test_enabled:
            self.write_test_duration = Histogram(
                "write_test_duration_seconds",
                "Duration of NFS mount write test",
                ["mountpoint"],
                namespace=namespace,
                registry=self.registry,
            )

        self.build_info.labels(program=program, version=version).set(1)

    def record_check(self, result: CheckResult) -> None:
        mp = result.mount_point
        self.checks_total.labels(mountpoint=mp, result=result.outcome).inc()
        self.mount_healthy.labels(mountpoint=mp).set(1 if result.healthy else 0)

        if result.write_test_seconds is not None:
            if self.write_test_duration is None:
                logger.debug("Write-test duration for %s dropped: histogram disabled", mp)
            else:
                self.write_test_duration.labels(mountpoint=mp).observe(result.write_test_seconds)

    def exposition(self) -> bytes:
        """Render the registry in the Prometheus text format."""
        return generate_latest(self.registry)
