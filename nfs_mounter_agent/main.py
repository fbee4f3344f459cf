"""Entry point for the NFS mounter agent — `nfs-mounter-agent` console script."""

from __future__ import annotations

import argparse
import logging
import sys

import uvicorn
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel

from nfs_mounter_agent import PROGRAM_NAME, __version__
from nfs_mounter_agent.api.server import create_app
from nfs_mounter_agent.config import (
    ConfigError,
    Settings,
    parse_listen_address,
    validate_settings,
)

logger = logging.getLogger(__name__)

console = Console(stderr=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nfs-mounter-agent",
        description="Watch NFS mount points and expose their health over HTTP + Prometheus",
    )
    parser.add_argument("--version", action="version", version=f"{PROGRAM_NAME} {__version__}")
    parser.add_argument("--listen-address", help="Listen address for HTTP server (default 0.0.0.0:9090)")
    parser.add_argument("--telemetry-path", help="Metrics path (default /metrics)")
    parser.add_argument("--telemetry-namespace", help="Metrics namespace (default nfsma)")
    parser.add_argument(
        "--health-path",
        help="Health check path; per mount point under <path>/mount-points/ (default /health)",
    )
    parser.add_argument("--check-interval", help="Interval between mount checks, e.g. 30s, 1m (default 30s)")
    parser.add_argument(
        "--enable-write-test", action="store_true", default=None,
        help="Create and delete a probe file as part of each check",
    )
    parser.add_argument(
        "--mount-point", dest="mount_points", action="append", metavar="PATH",
        help="Mount point to monitor (repeatable, absolute paths only)",
    )
    parser.add_argument("--mount-table", help="Mount table to read (default /proc/mounts)")
    parser.add_argument("--log-level", help="Logging level (default INFO)")
    return parser


def load_settings(argv: list[str] | None = None) -> Settings:
    """Merge env / .env settings with CLI flags and validate the result."""
    args = build_parser().parse_args(argv)
    overrides = {k: v for k, v in vars(args).items() if v is not None}

    try:
        settings = Settings(**overrides)
    except ValidationError as e:
        problems = "; ".join(err["msg"] for err in e.errors())
        raise ConfigError(problems) from e

    validate_settings(settings)
    return settings


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )


def run_server(settings: Settings) -> None:
    """Start the HTTP server; the scheduler runs inside its lifespan."""
    host, port = parse_listen_address(settings.listen_address)
    base = settings.health_path.rstrip("/")

    console.print(
        Panel.fit(
            f"[bold]{PROGRAM_NAME}[/bold] v{__version__}\n"
            f"Listen:  {host}:{port}\n"
            f"Metrics: {settings.telemetry_path} (namespace {settings.telemetry_namespace})\n"
            f"Health:  {settings.health_path}, {base}/{settings.mount_points_subpath}/...\n"
            f"Mounts:  {', '.join(settings.mount_points)}\n"
            f"Interval: {settings.check_interval}s  write test: {settings.enable_write_test}",
            title="nfs-mounter-agent",
            border_style="green",
        )
    )

    app = create_app(settings)
    # uvicorn exits non-zero on its own if the listener cannot be bound
    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
    )


def main(argv: list[str] | None = None) -> None:
    try:
        settings = load_settings(argv)
    except ConfigError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)

    configure_logging(settings.log_level)
    logger.info(
        "Starting %s v%s on %s (metrics: %s, health: %s)",
        PROGRAM_NAME, __version__, settings.listen_address,
        settings.telemetry_path, settings.health_path,
    )
    run_server(settings)


if __name__ == "__main__":
    main()
