"""Configuration settings for the foreach-batch sink and its replay driver."""

import os
from configparser import ConfigParser
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv


@dataclass
class SinkConfig:
    """Configuration for the foreach-batch sink."""

    schema_policy: str = "names_and_types"  # 'names', 'names_and_types' or 'strict'


@dataclass
class ReplayConfig:
    """Configuration for replaying Parquet files as micro-batches."""

    source_path: Optional[str] = None
    callback: Optional[str] = None  # 'package.module:attribute'
    file_pattern: str = "*.parquet"
    start_batch_id: int = 0
    max_batches: Optional[int] = None

    # Physical layout already known for the files, carried through untouched
    partition_by: Optional[list[str]] = None
    num_partitions: int = 1
    sort_by: Optional[list[str]] = None


@dataclass
class TelemetryConfig:
    """Configuration for telemetry (logging and metrics)."""

    log_level: str = "INFO"
    log_format: str = "json"

    # OpenTelemetry
    enabled: bool = False
    service_name: str = "foreach-batch-sink"
    otlp_endpoint: Optional[str] = None
    trace_enabled: bool = True
    metrics_enabled: bool = True


@dataclass
class Settings:
    """Complete settings."""

    sink: SinkConfig = field(default_factory=SinkConfig)
    replay: ReplayConfig = field(default_factory=ReplayConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)


def _split_list(value: str) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


def _load_ini_file(config_path: str) -> dict:
    """
    Load configuration from INI file.

    Args:
        config_path: Path to INI configuration file

    Returns:
        Dictionary with configuration data
    """
    config = ConfigParser()
    config.read(config_path, encoding="utf-8")

    config_data = {"sink": {}, "replay": {}, "telemetry": {}}

    if config.has_section("sink"):
        for key, value in config.items("sink"):
            config_data["sink"][key] = value

    if config.has_section("replay"):
        for key, value in config.items("replay"):
            if key in ("partition_by", "sort_by"):
                config_data["replay"][key] = _split_list(value)
            elif key in ("start_batch_id", "num_partitions"):
                config_data["replay"][key] = config.getint("replay", key)
            elif key == "max_batches":
                # Handle null/None for optional integer values
                if value.lower() in ("null", "none", ""):
                    config_data["replay"][key] = None
                else:
                    config_data["replay"][key] = config.getint("replay", key)
            else:
                config_data["replay"][key] = value

    if config.has_section("telemetry"):
        for key, value in config.items("telemetry"):
            if key in ("enabled", "trace_enabled", "metrics_enabled"):
                config_data["telemetry"][key] = config.getboolean("telemetry", key)
            else:
                config_data["telemetry"][key] = value

    return config_data


def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from INI file and environment variables.

    Environment variables take precedence over file configuration.

    Args:
        config_path: Path to INI configuration file

    Returns:
        Settings object with complete configuration
    """
    load_dotenv()

    config_data = {}
    if config_path and os.path.exists(config_path):
        config_data = _load_ini_file(config_path)

    _apply_env_overrides(config_data)

    return Settings(
        sink=SinkConfig(**config_data.get("sink", {})),
        replay=ReplayConfig(**config_data.get("replay", {})),
        telemetry=TelemetryConfig(**config_data.get("telemetry", {})),
    )


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to configuration."""
    sink = config_data.setdefault("sink", {})

    if os.getenv("SINK_SCHEMA_POLICY"):
        sink["schema_policy"] = os.getenv("SINK_SCHEMA_POLICY")

    replay = config_data.setdefault("replay", {})

    if os.getenv("REPLAY_SOURCE_PATH"):
        replay["source_path"] = os.getenv("REPLAY_SOURCE_PATH")
    if os.getenv("REPLAY_CALLBACK"):
        replay["callback"] = os.getenv("REPLAY_CALLBACK")
    if os.getenv("REPLAY_MAX_BATCHES"):
        replay["max_batches"] = int(os.getenv("REPLAY_MAX_BATCHES"))
    if os.getenv("REPLAY_START_BATCH_ID"):
        replay["start_batch_id"] = int(os.getenv("REPLAY_START_BATCH_ID"))

    telemetry = config_data.setdefault("telemetry", {})

    if os.getenv("LOG_LEVEL"):
        telemetry["log_level"] = os.getenv("LOG_LEVEL")
    if os.getenv("OTEL_ENABLED"):
        telemetry["enabled"] = os.getenv("OTEL_ENABLED").lower() in ("true", "1", "yes")
    if os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT"):
        telemetry["otlp_endpoint"] = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if os.getenv("OTEL_SERVICE_NAME"):
        telemetry["service_name"] = os.getenv("OTEL_SERVICE_NAME")
