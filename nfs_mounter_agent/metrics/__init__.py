"""Metrics subsystem — Prometheus series for mount checks."""

from .reporter import MetricsReporter
