"""Mount check engine — decides whether one mount point is healthy right now.

A check is a single pass, short-circuiting on the first failure:
  1. the path exists and is a directory
  2. the live mount table lists it with an NFS filesystem type
  3. (optional) a probe file can be created and removed inside it

Nothing here holds shared state; the scheduler feeds results into the
HealthStore and the metrics reporter.
"""

from __future__ import annotations

import os
import stat
import time
from dataclasses import dataclass
from enum import Enum

MOUNT_TABLE_PATH = "/proc/mounts"
WRITE_TEST_PREFIX = ".nfs_mounter_test_"


# ── Failures ─────────────────────────────────────────────────────────────────


class FailureKind(str, Enum):
    NOT_FOUND = "not_found"
    NOT_A_DIRECTORY = "not_a_directory"
    NOT_NFS_MOUNT = "not_nfs_mount"
    TABLE_UNREADABLE = "table_unreadable"
    WRITE_TEST_FAILED = "write_test_failed"


class MountCheckError(Exception):
    """A mount point failed one of the check steps."""

    def __init__(self, kind: FailureKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind


class WriteTestError(MountCheckError):
    """Create or delete of the probe file failed. Carries the elapsed time."""

    def __init__(self, message: str, duration: float) -> None:
        super().__init__(FailureKind.WRITE_TEST_FAILED, message)
        self.duration = duration


# ── Models ───────────────────────────────────────────────────────────────────


@dataclass
class CheckResult:
    """Outcome of one evaluation of one mount point."""

    mount_point: str
    healthy: bool
    error: MountCheckError | None = None
    write_test_seconds: float | None = None  # set whenever the write test ran

    @property
    def outcome(self) -> str:
        return "ok" if self.healthy else "error"


# ── Check steps ──────────────────────────────────────────────────────────────


def check_directory(mount_point: str) -> None:
    try:
        st = os.stat(mount_point)
    except OSError as e:
        raise MountCheckError(FailureKind.NOT_FOUND, f"stat({mount_point}) failed: {e}") from e
    if not stat.S_ISDIR(st.st_mode):
        raise MountCheckError(FailureKind.NOT_A_DIRECTORY, f"{mount_point} is not a directory")


def is_nfs_type(fs_type: str) -> bool:
    return fs_type == "nfs" or fs_type.startswith("nfs4")


def check_nfs_mount(mount_point: str, mount_table: str = MOUNT_TABLE_PATH) -> None:
    """Look for an NFS entry for *mount_point* in the mount table.

    Paths are compared byte-for-byte; octal escapes such as ``\\040`` used by
    the kernel for spaces are not decoded.
    """
    try:
        with open(mount_table, errors="surrogateescape") as f:
            for line in f:
                fields = line.split()
                if len(fields) < 3:
                    continue
                if fields[1] == mount_point and is_nfs_type(fields[2]):
                    return
    except OSError as e:
        raise MountCheckError(
            FailureKind.TABLE_UNREADABLE, f"reading {mount_table} failed: {e}",
        ) from e

    raise MountCheckError(
        FailureKind.NOT_NFS_MOUNT, f"{mount_point} is not an NFS mount (not found in {mount_table})",
    )


def write_probe_name() -> str:
    return f"{WRITE_TEST_PREFIX}{os.getpid()}_{time.time_ns()}"


def run_write_test(mount_point: str) -> float:
    """Create then delete a probe file. Returns the elapsed seconds.

    Raises WriteTestError (with the elapsed time) if either step fails.
    """
    path = os.path.join(mount_point, write_probe_name())
    t0 = time.perf_counter()
    try:
        with open(path, "w") as f:
            f.write("ok\n")
        os.remove(path)
    except OSError as e:
        raise WriteTestError(
            f"write test failed on {mount_point}: {e}", time.perf_counter() - t0,
        ) from e
    return time.perf_counter() - t0


# ── Entry points ─────────────────────────────────────────────────────────────


def verify_mount_point(
    mount_point: str,
    write_test_enabled: bool = False,
    mount_table: str = MOUNT_TABLE_PATH,
) -> float | None:
    """Run every check step; raise MountCheckError on the first failure.

    Returns the write-test duration in seconds, or None if it was not run.
    """
    check_directory(mount_point)
    check_nfs_mount(mount_point, mount_table)
    if write_test_enabled:
        return run_write_test(mount_point)
    return None


def evaluate_mount_point(
    mount_point: str,
    write_test_enabled: bool = False,
    mount_table: str = MOUNT_TABLE_PATH,
) -> CheckResult:
    """Evaluate one mount point and fold any failure into the result."""
    try:
        duration = verify_mount_point(mount_point, write_test_enabled, mount_table)
    except WriteTestError as e:
        return CheckResult(
            mount_point=mount_point, healthy=False, error=e, write_test_seconds=e.duration,
        )
    except MountCheckError as e:
        return CheckResult(mount_point=mount_point, healthy=False, error=e)

    return CheckResult(mount_point=mount_point, healthy=True, write_test_seconds=duration)
