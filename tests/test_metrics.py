"""Tests for the Prometheus metrics reporter."""

from __future__ import annotations

import pytest
from prometheus_client import CollectorRegistry

from nfs_mounter_agent.health.engine import CheckResult, FailureKind, MountCheckError
from nfs_mounter_agent.metrics.reporter import MetricsReporter


def _failed(mp: str, write_test_seconds: float | None = None) -> CheckResult:
    return CheckResult(
        mount_point=mp,
        healthy=False,
        error=MountCheckError(FailureKind.NOT_FOUND, "gone"),
        write_test_seconds=write_test_seconds,
    )


class TestBuildInfo:
    def test_set_once_on_construction(self, registry: CollectorRegistry) -> None:
        MetricsReporter("nfsma", "test-program", "1.0.0", registry=registry)
        value = registry.get_sample_value(
            "nfsma_build_info", {"program": "test-program", "version": "1.0.0"},
        )
        assert value == 1.0

    def test_namespace_is_applied(self, registry: CollectorRegistry) -> None:
        reporter = MetricsReporter("custom", "p", "v", registry=registry)
        reporter.record_check(CheckResult(mount_point="/mnt/a", healthy=True))
        assert registry.get_sample_value("custom_checks_total", {"mountpoint": "/mnt/a", "result": "ok"}) == 1.0
        assert registry.get_sample_value("nfsma_checks_total", {"mountpoint": "/mnt/a", "result": "ok"}) is None

    def test_separate_registries_do_not_clash(self) -> None:
        MetricsReporter("nfsma", "p", "v")
        MetricsReporter("nfsma", "p", "v")


class TestRecordCheck:
    def test_ok_and_error_counters(self, reporter: MetricsReporter, registry: CollectorRegistry) -> None:
        reporter.record_check(CheckResult(mount_point="/mnt/a", healthy=True))
        reporter.record_check(CheckResult(mount_point="/mnt/a", healthy=True))
        reporter.record_check(_failed("/mnt/b"))

        assert registry.get_sample_value("nfsma_checks_total", {"mountpoint": "/mnt/a", "result": "ok"}) == 2.0
        assert registry.get_sample_value("nfsma_checks_total", {"mountpoint": "/mnt/b", "result": "error"}) == 1.0
        assert registry.get_sample_value("nfsma_checks_total", {"mountpoint": "/mnt/a", "result": "error"}) is None

    def test_healthy_gauge_tracks_latest(self, reporter: MetricsReporter, registry: CollectorRegistry) -> None:
        reporter.record_check(CheckResult(mount_point="/mnt/a", healthy=True))
        assert registry.get_sample_value("nfsma_mount_healthy", {"mountpoint": "/mnt/a"}) == 1.0

        reporter.record_check(_failed("/mnt/a"))
        assert registry.get_sample_value("nfsma_mount_healthy", {"mountpoint": "/mnt/a"}) == 0.0

    def test_no_created_series(self, reporter: MetricsReporter, registry: CollectorRegistry) -> None:
        reporter.record_check(CheckResult(mount_point="/mnt/a", healthy=True, write_test_seconds=0.01))

        assert registry.get_sample_value("nfsma_checks_created", {"mountpoint": "/mnt/a", "result": "ok"}) is None
        assert b"_created" not in reporter.exposition()


class TestWriteTestHistogram:
    def test_absent_when_disabled(self, registry: CollectorRegistry) -> None:
        reporter = MetricsReporter("nfsma", "p", "v", write_test_enabled=False, registry=registry)
        reporter.record_check(CheckResult(mount_point="/mnt/a", healthy=True, write_test_seconds=0.1))

        assert reporter.write_test_duration is None
        assert b"write_test_duration_seconds" not in reporter.exposition()

    def test_declared_when_enabled(self, reporter: MetricsReporter) -> None:
        text = reporter.exposition().decode()
        assert "# TYPE nfsma_write_test_duration_seconds histogram" in text

    def test_observes_success_and_failure(self, reporter: MetricsReporter, registry: CollectorRegistry) -> None:
        reporter.record_check(CheckResult(mount_point="/mnt/a", healthy=True, write_test_seconds=0.02))
        reporter.record_check(_failed("/mnt/a", write_test_seconds=0.5))

        labels = {"mountpoint": "/mnt/a"}
        assert registry.get_sample_value("nfsma_write_test_duration_seconds_count", labels) == 2.0
        assert registry.get_sample_value("nfsma_write_test_duration_seconds_sum", labels) == pytest.approx(0.52)

    def test_no_observation_without_duration(self, reporter: MetricsReporter, registry: CollectorRegistry) -> None:
        reporter.record_check(_failed("/mnt/b"))
        assert registry.get_sample_value(
            "nfsma_write_test_duration_seconds_count", {"mountpoint": "/mnt/b"},
        ) is None
