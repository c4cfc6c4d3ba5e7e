"""Configuration management."""

from foreach_batch_sink.config.settings import (
    ReplayConfig,
    Settings,
    SinkConfig,
    TelemetryConfig,
    load_config,
)

__all__ = [
    "Settings",
    "SinkConfig",
    "ReplayConfig",
    "TelemetryConfig",
    "load_config",
]
