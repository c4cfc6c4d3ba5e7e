"""Per-batch sink forwarding materialized micro-batches to a user callback."""

import logging
from typing import Any, Callable, Optional

import pyarrow as pa
from opentelemetry import metrics, trace

from foreach_batch_sink.bridge import CallbackLike, as_batch_callback
from foreach_batch_sink.errors import InvariantViolation
from foreach_batch_sink.plan import LogicalPlan, eliminate_write_marker
from foreach_batch_sink.schema import (
    DEFAULT_SCHEMA_POLICY,
    describe_mismatch,
    schemas_match,
    validate_policy,
)
from foreach_batch_sink.view import DataView, MaterializedBatch

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)
meter = metrics.get_meter(__name__)

# Metrics
batches_delivered = meter.create_counter(
    "foreach_batch_sink.batches_delivered",
    description="Number of batches delivered to the callback",
    unit="1",
)
records_delivered = meter.create_counter(
    "foreach_batch_sink.records_delivered",
    description="Number of records delivered to the callback",
    unit="1",
)
invariant_violations = meter.create_counter(
    "foreach_batch_sink.invariant_violations",
    description="Number of batches rejected by the schema check",
    unit="1",
)
callback_failures = meter.create_counter(
    "foreach_batch_sink.callback_failures",
    description="Number of batches whose callback raised",
    unit="1",
)


class ForeachBatchSink:
    """
    Sink handing each micro-batch to a user-supplied callback.

    The batch has already been executed upstream. The sink reuses its rows,
    partitioning and ordering as they are, presents them under the
    caller-facing output schema, and invokes the callback once. It keeps no
    state between calls and performs no retry, buffering or reordering;
    overlapping calls must be prevented by the caller.
    """

    def __init__(
        self,
        callback: CallbackLike,
        encoder: Optional[Callable[[dict], Any]] = None,
        schema_policy: str = DEFAULT_SCHEMA_POLICY,
    ):
        """
        Initialize foreach-batch sink.

        Args:
            callback: BatchCallback, foreign handle, or function ``fn(view, batch_id)``
            encoder: Optional row decoder attached to every view
            schema_policy: How output schemas are compared ('names',
                'names_and_types' or 'strict')
        """
        self.callback = as_batch_callback(callback)
        self.encoder = encoder
        self.schema_policy = validate_policy(schema_policy)

    def add_batch(
        self,
        batch_id: int,
        batch: MaterializedBatch,
        output_schema: pa.Schema,
        analyzed_plan: LogicalPlan,
    ) -> None:
        """
        Deliver one materialized micro-batch to the callback.

        Args:
            batch_id: Identifier assigned by the scheduler, trusted as given
            batch: Already-executed rows with their partitioning and ordering
            output_schema: Output attributes the consumer is entitled to see
            analyzed_plan: Analyzed plan of the query, possibly marker-wrapped

        Raises:
            InvariantViolation: If ``output_schema`` differs from the plan's output.
                The callback is not invoked.
        """
        with tracer.start_as_current_span("foreach_batch.add_batch") as span:
            span.set_attribute("batch.id", batch_id)
            span.set_attribute("batch.num_rows", batch.num_rows)

            analyzed = eliminate_write_marker(analyzed_plan)
            if not schemas_match(output_schema, analyzed.output, self.schema_policy):
                invariant_violations.add(1)
                detail = describe_mismatch(output_schema, analyzed.output, self.schema_policy)
                logger.error("Schema check failed for batch %d: %s", batch_id, detail)
                raise InvariantViolation(
                    f"Output schema of batch {batch_id} does not match the analyzed plan: {detail}"
                )

            try:
                view = self._build_view(batch, output_schema, analyzed)
            except InvariantViolation as e:
                invariant_violations.add(1)
                logger.error("View check failed for batch %d: %s", batch_id, e)
                raise

            logger.debug("Delivering batch %d: %d rows", batch_id, view.num_rows)
            try:
                self.callback.call(batch_id, view)
            except Exception as e:
                callback_failures.add(1)
                logger.error("Callback failed for batch %d: %s", batch_id, e)
                raise

            batches_delivered.add(1)
            records_delivered.add(view.num_rows)
            logger.info("Delivered batch %d: %d records", batch_id, view.num_rows)

    def _build_view(
        self, batch: MaterializedBatch, output_schema: pa.Schema, analyzed: LogicalPlan
    ) -> DataView:
        """Relabel the materialized rows with the output schema's names."""
        table = batch.table
        if len(table.schema) != len(output_schema):
            raise InvariantViolation(
                f"Materialized batch has {len(table.schema)} columns, "
                f"output schema has {len(output_schema)}"
            )
        if table.schema.names != output_schema.names:
            table = table.rename_columns(output_schema.names)
        if not schemas_match(output_schema, table.schema, self.schema_policy):
            raise InvariantViolation(
                "Materialized batch does not match the output schema: "
                + describe_mismatch(output_schema, table.schema, self.schema_policy)
            )

        return DataView(
            table=table,
            schema=output_schema,
            lineage=analyzed,
            partitioning=batch.partitioning,
            ordering=batch.ordering,
            encoder=self.encoder,
        )

    def __str__(self) -> str:
        return "ForeachBatchSink"
