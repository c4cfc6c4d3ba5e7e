"""Logging, tracing and metrics setup."""

from foreach_batch_sink.telemetry.setup import setup_telemetry, shutdown_telemetry

__all__ = ["setup_telemetry", "shutdown_telemetry"]
