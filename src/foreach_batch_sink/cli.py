"""Command-line interface for foreach-batch-sink."""

import logging
import sys

import click

from foreach_batch_sink.config import load_config
from foreach_batch_sink.pipeline import ReplayPipeline
from foreach_batch_sink.telemetry import setup_telemetry, shutdown_telemetry

logger = logging.getLogger(__name__)


@click.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    help="Path to configuration file (INI format)",
)
@click.option(
    "--source-path",
    type=click.Path(exists=True),
    help="Parquet file or directory of Parquet files to replay",
)
@click.option(
    "--callback",
    help="Callback to deliver batches to, as 'module:attribute'",
)
@click.option(
    "--schema-policy",
    type=click.Choice(["names", "names_and_types", "strict"]),
    help="How output schemas are compared",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Logging level",
)
@click.option(
    "--max-batches",
    type=int,
    help="Maximum number of batches to replay",
)
@click.option(
    "--start-batch-id",
    type=int,
    help="Batch id assigned to the first replayed file",
)
def main(config, source_path, callback, schema_policy, log_level, max_batches, start_batch_id):
    """
    Foreach-batch sink - replay Parquet micro-batches into a Python callback.

    Each Parquet file becomes one micro-batch with an increasing batch id.
    The callback receives ``(view, batch_id)``.

    Configuration can be provided via:
    - INI configuration file (--config)
    - Environment variables
    - Command-line options

    Environment variables take precedence over config file values.
    """
    try:
        settings = load_config(config)

        if source_path:
            settings.replay.source_path = source_path
        if callback:
            settings.replay.callback = callback
        if schema_policy:
            settings.sink.schema_policy = schema_policy
        if log_level:
            settings.telemetry.log_level = log_level
        if max_batches is not None:
            settings.replay.max_batches = max_batches
        if start_batch_id is not None:
            settings.replay.start_batch_id = start_batch_id

        setup_telemetry(settings.telemetry)

        logger.info("Source: %s", settings.replay.source_path)
        logger.info("Callback: %s", settings.replay.callback)
        logger.info("Schema policy: %s", settings.sink.schema_policy)

        delivered = ReplayPipeline(settings).run()
        logger.info("Foreach-batch replay completed: %d batches", delivered)

        shutdown_telemetry()
        sys.exit(0)

    except KeyboardInterrupt:
        logger.info("Replay interrupted by user")
        sys.exit(130)

    except Exception as e:
        logger.error("Replay failed: %s", e, exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
