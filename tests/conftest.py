"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from prometheus_client import CollectorRegistry

from nfs_mounter_agent.health.store import HealthStore
from nfs_mounter_agent.metrics.reporter import MetricsReporter


@pytest.fixture
def write_mount_table(tmp_path: Path) -> Callable[..., str]:
    """Write a /proc/mounts-style file and return its path.

    Each entry is ``(mount_point, fs_type)``; raw extra lines can be passed too.
    """

    def _write(*entries: tuple[str, str], extra: str = "") -> str:
        lines = [
            "sysfs /sys sysfs rw,nosuid,nodev,noexec,relatime 0 0",
            "proc /proc proc rw,nosuid,nodev,noexec,relatime 0 0",
            "/dev/sda1 / ext4 rw,relatime 0 0",
        ]
        for mount_point, fs_type in entries:
            lines.append(f"10.0.0.5:/export{mount_point} {mount_point} {fs_type} rw,relatime 0 0")
        table = tmp_path / "mounts"
        table.write_text("\n".join(lines) + "\n" + extra)
        return str(table)

    return _write


@pytest.fixture
def nfs_dir(tmp_path: Path) -> str:
    """An existing, writable directory to stand in for an NFS mount point."""
    d = tmp_path / "nfs"
    d.mkdir()
    return str(d)


@pytest.fixture
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def reporter(registry: CollectorRegistry) -> MetricsReporter:
    return MetricsReporter("nfsma", "test-program", "1.0.0", write_test_enabled=True, registry=registry)


@pytest.fixture
def store() -> HealthStore:
    return HealthStore(["/mnt/a", "/mnt/b"])
