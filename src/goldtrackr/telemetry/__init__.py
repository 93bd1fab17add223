"""Telemetry module for logging, metrics, and reporting."""

from goldtrackr.telemetry.logger import QueueLogger, setup_logging
from goldtrackr.telemetry.metrics import MetricsCollector
from goldtrackr.telemetry.reporter import CLIReporter, SimpleReporter


__all__ = [
    "CLIReporter",
    "MetricsCollector",
    "QueueLogger",
    "SimpleReporter",
    "setup_logging",
]
