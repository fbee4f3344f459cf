"""Health subsystem — mount check engine, in-memory store, scheduler."""

from .engine import CheckResult, FailureKind, MountCheckError, evaluate_mount_point
from .scheduler import MountScheduler
from .store import HealthStore
