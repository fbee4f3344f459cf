"""Agent configuration — loaded from environment / .env file, overridden by CLI flags."""

from __future__ import annotations

import math
import re
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings

MOUNT_POINTS_SUBPATH = "mount-points"

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


class ConfigError(Exception):
    """Raised when the configuration cannot be used to start the agent."""


def parse_duration(value: str | float | int) -> float:
    """Parse ``30s`` / ``1m`` / ``500ms`` / ``1h30m`` (or bare seconds) into seconds."""
    if isinstance(value, (int, float)):
        return _finite(float(value), value)

    text = value.strip()
    try:
        seconds = float(text)
    except ValueError:
        seconds = None
    if seconds is not None:
        return _finite(seconds, value)

    pos = 0
    total = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()

    if pos == 0 or pos != len(text):
        raise ValueError(f"invalid duration {value!r} (use e.g. 30s, 1m, 500ms)")
    return _finite(total, value)


def _finite(seconds: float, value: Any) -> float:
    if not math.isfinite(seconds):
        raise ValueError(f"invalid duration {value!r}: not finite")
    return seconds


def parse_listen_address(address: str) -> tuple[str, int]:
    """Split ``host:port`` (``[::1]:9090`` and ``:9090`` also accepted)."""
    host, sep, port_str = address.rpartition(":")
    if not sep or not port_str.isdigit():
        raise ConfigError(f"malformed listen address {address!r}, expected host:port")

    port = int(port_str)
    if not 0 < port < 65536:
        raise ConfigError(f"listen port out of range in {address!r}")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host or "0.0.0.0", port


class Settings(BaseSettings):
    """Agent settings. Env vars use the ``NFSMA_`` prefix (e.g. ``NFSMA_CHECK_INTERVAL``)."""

    model_config = {
        "env_prefix": "NFSMA_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    # HTTP
    listen_address: str = "0.0.0.0:9090"
    telemetry_path: str = "/metrics"
    telemetry_namespace: str = "nfsma"
    health_path: str = "/health"
    mount_points_subpath: str = MOUNT_POINTS_SUBPATH

    # Checks
    mount_points: list[str] = []
    check_interval: float = 30.0  # seconds
    enable_write_test: bool = False
    mount_table: str = "/proc/mounts"

    # Logging
    log_level: str = "INFO"

    @field_validator("mount_points")
    @classmethod
    def _absolute_mount_points(cls, value: list[str]) -> list[str]:
        for mp in value:
            if not mp.startswith("/"):
                raise ValueError(f"mount point must be an absolute path: {mp!r}")
        return value

    @field_validator("check_interval", mode="before")
    @classmethod
    def _parse_interval(cls, value: Any) -> float:
        if isinstance(value, str):
            return parse_duration(value)
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()


def validate_settings(settings: Settings) -> None:
    """Check everything the agent needs before the core is built.

    Raises ConfigError with a human-readable message on the first problem.
    """
    if not settings.mount_points:
        raise ConfigError("no mount points configured (use --mount-point /path/to/mount)")

    if not (math.isfinite(settings.check_interval) and settings.check_interval > 0):
        raise ConfigError(f"check interval must be positive, got {settings.check_interval}")

    parse_listen_address(settings.listen_address)

    for name in ("telemetry_path", "health_path"):
        path = getattr(settings, name)
        if not path.startswith("/"):
            raise ConfigError(f"{name} must start with '/', got {path!r}")

    if settings.health_path.rstrip("/") == settings.telemetry_path.rstrip("/"):
        raise ConfigError("health path and telemetry path must differ")

    if not settings.mount_points_subpath.strip("/"):
        raise ConfigError("mount points subpath must not be empty")
