"""Replay driver feeding Parquet files to the sink as micro-batches."""

import importlib
import itertools
import logging
from pathlib import Path
from typing import Iterator, Optional

import pyarrow.parquet as pq
from opentelemetry import trace

from foreach_batch_sink.config import Settings
from foreach_batch_sink.plan import Relation, WriteMarker
from foreach_batch_sink.sink import ForeachBatchSink
from foreach_batch_sink.view import MaterializedBatch, Partitioning, SortOrder

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


def load_callback(reference: str):
    """
    Import a callback from a ``module:attribute`` reference.

    Args:
        reference: Reference such as ``mypackage.handlers:write_batch``

    Returns:
        The referenced object
    """
    module_name, sep, attr = reference.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Callback must be given as 'module:attribute', got: {reference}")

    target = importlib.import_module(module_name)
    for part in attr.split("."):
        target = getattr(target, part)
    return target


class ReplayPipeline:
    """
    Replays a directory of Parquet files through a ForeachBatchSink.

    Each file is one micro-batch. Files are delivered in name order with
    increasing batch ids. Partitioning and ordering come from configuration;
    they describe what is already known about the files and are never
    inferred from the data.
    """

    def __init__(self, settings: Settings, sink: Optional[ForeachBatchSink] = None):
        """
        Initialize replay pipeline.

        Args:
            settings: Complete settings
            sink: Sink to deliver to; built from ``settings.replay.callback`` if omitted
        """
        self.settings = settings
        self.sink = sink

    def _create_sink(self) -> ForeachBatchSink:
        """Create the sink for the configured callback."""
        if not self.settings.replay.callback:
            raise ValueError("Replay requires a callback reference")

        callback = load_callback(self.settings.replay.callback)
        return ForeachBatchSink(callback, schema_policy=self.settings.sink.schema_policy)

    def _list_files(self) -> list[Path]:
        replay_config = self.settings.replay
        if not replay_config.source_path:
            raise ValueError("Replay requires source_path")

        source = Path(replay_config.source_path)
        if source.is_file():
            return [source]
        if not source.is_dir():
            raise ValueError(f"Replay source does not exist: {source}")
        return sorted(source.glob(replay_config.file_pattern))

    def _partitioning(self) -> Partitioning:
        replay_config = self.settings.replay
        if replay_config.partition_by:
            return Partitioning(
                kind="hash",
                columns=tuple(replay_config.partition_by),
                num_partitions=replay_config.num_partitions,
            )
        if replay_config.num_partitions == 1:
            return Partitioning(kind="single")
        return Partitioning(num_partitions=replay_config.num_partitions)

    def _ordering(self) -> SortOrder:
        columns = tuple(self.settings.replay.sort_by or ())
        return SortOrder(columns=columns, ascending=(True,) * len(columns))

    def read_batches(self) -> Iterator[tuple[Path, MaterializedBatch]]:
        """Yield each file as a materialized batch."""
        partitioning = self._partitioning()
        ordering = self._ordering()
        for path in self._list_files():
            table = pq.read_table(path)
            yield path, MaterializedBatch(table=table, partitioning=partitioning, ordering=ordering)

    def run(self) -> int:
        """
        Run the replay.

        Returns:
            Number of batches delivered
        """
        with tracer.start_as_current_span("replay_run") as span:
            if self.sink is None:
                self.sink = self._create_sink()

            replay_config = self.settings.replay
            batch_id = replay_config.start_batch_id
            batch_count = 0
            total_records = 0

            logger.info("Starting replay from %s", replay_config.source_path)
            try:
                batches = self.read_batches()
                if replay_config.max_batches is not None:
                    batches = itertools.islice(batches, replay_config.max_batches)

                for path, batch in batches:
                    schema = batch.table.schema
                    plan = WriteMarker(Relation(schema, name=path.name))

                    self.sink.add_batch(batch_id, batch, schema, plan)

                    batch_count += 1
                    total_records += batch.num_rows
                    logger.info(
                        "Replayed %s as batch %d: %d records (total: %d records)",
                        path.name,
                        batch_id,
                        batch.num_rows,
                        total_records,
                    )
                    batch_id += 1

            except Exception as e:
                logger.error("Replay failed at batch %d: %s", batch_id, e, exc_info=True)
                raise

            if batch_count == replay_config.max_batches:
                logger.info("Reached max batches limit: %d", replay_config.max_batches)
            logger.info("Replay completed: %d batches, %d records", batch_count, total_records)
            span.set_attribute("replay.batches", batch_count)
            span.set_attribute("replay.records", total_records)
            return batch_count
