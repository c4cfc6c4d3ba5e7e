"""Telemetry setup for OpenTelemetry integration."""

import logging
import sys
from typing import Optional

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from foreach_batch_sink.config.settings import TelemetryConfig

logger = logging.getLogger(__name__)

JSON_FORMAT = (
    '{"time":"%(asctime)s","level":"%(levelname)s","name":"%(name)s",'
    '"message":"%(message)s","function":"%(funcName)s","line":%(lineno)d}'
)
TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_level: str, log_format: str) -> None:
    """
    Setup structured logging on the root logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Format type ('json' or 'text')
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(JSON_FORMAT if log_format == "json" else TEXT_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    # Exporter retries are noisy at INFO
    logging.getLogger("grpc").setLevel(logging.WARNING)
    logging.getLogger("opentelemetry").setLevel(logging.WARNING)


def _resource(service_name: str) -> Resource:
    return Resource.create({"service.name": service_name})


def setup_tracing(service_name: str, otlp_endpoint: Optional[str]) -> None:
    """
    Setup OpenTelemetry tracing.

    Args:
        service_name: Name of the service for trace identification
        otlp_endpoint: OTLP endpoint for exporting traces
    """
    tracer_provider = TracerProvider(resource=_resource(service_name))

    if otlp_endpoint:
        exporter = OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True)
        tracer_provider.add_span_processor(BatchSpanProcessor(exporter))

    trace.set_tracer_provider(tracer_provider)
    logger.info(
        "Tracing initialized for service %s (exporter: %s)",
        service_name,
        otlp_endpoint or "none",
    )


def setup_metrics(service_name: str, otlp_endpoint: Optional[str]) -> None:
    """
    Setup OpenTelemetry metrics.

    Args:
        service_name: Name of the service for metrics identification
        otlp_endpoint: OTLP endpoint for exporting metrics
    """
    readers = []
    if otlp_endpoint:
        exporter = OTLPMetricExporter(endpoint=otlp_endpoint, insecure=True)
        readers.append(PeriodicExportingMetricReader(exporter, export_interval_millis=5000))

    metrics.set_meter_provider(
        MeterProvider(resource=_resource(service_name), metric_readers=readers)
    )
    logger.info(
        "Metrics initialized for service %s (exporter: %s)",
        service_name,
        otlp_endpoint or "none",
    )


def setup_telemetry(config: TelemetryConfig) -> None:
    """
    Setup logging, and tracing and metrics when enabled.

    Args:
        config: Telemetry configuration
    """
    setup_logging(config.log_level, config.log_format)

    if not config.enabled:
        logger.info("OpenTelemetry disabled")
        return

    if config.trace_enabled:
        setup_tracing(config.service_name, config.otlp_endpoint)
    if config.metrics_enabled:
        setup_metrics(config.service_name, config.otlp_endpoint)
    logger.info("OpenTelemetry enabled")


def shutdown_telemetry() -> None:
    """Flush and shut down SDK providers, if any were installed."""
    tracer_provider = trace.get_tracer_provider()
    if isinstance(tracer_provider, TracerProvider):
        tracer_provider.shutdown()

    meter_provider = metrics.get_meter_provider()
    if isinstance(meter_provider, MeterProvider):
        meter_provider.shutdown()
