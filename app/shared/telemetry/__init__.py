"""Shared telemetry: logging setup, OpenTelemetry tracing, and tracing helpers."""

from app.shared.telemetry.logging import RequestIdFilter, get_logger, setup_logging
from app.shared.telemetry.telemetry import (
    get_tracer_provider,
    init_telemetry,
    shutdown_telemetry,
)
from app.shared.telemetry.tracing import add_span_attributes, traced

__all__ = [
    "setup_logging",
    "get_logger",
    "RequestIdFilter",
    "get_tracer_provider",
    "init_telemetry",
    "shutdown_telemetry",
    "traced",
    "add_span_attributes",
]
