"""Materialized batches and the data views handed to callbacks."""

from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional

import pyarrow as pa

from foreach_batch_sink.plan import LogicalPlan


@dataclass(frozen=True)
class Partitioning:
    """Physical partitioning already computed upstream."""

    kind: str = "unknown"  # 'unknown', 'single', 'hash' or 'range'
    columns: tuple = ()
    num_partitions: int = 1


@dataclass(frozen=True)
class SortOrder:
    """Physical ordering already computed upstream."""

    columns: tuple = ()
    ascending: tuple = ()

    @property
    def is_sorted(self) -> bool:
        return bool(self.columns)


@dataclass(frozen=True)
class MaterializedBatch:
    """
    One already-executed micro-batch.

    Owned by the upstream engine. The sink only borrows it for the duration
    of a single add_batch call. ``partitioning`` and ``ordering`` are opaque
    to the sink and are passed through as-is.
    """

    table: pa.Table
    partitioning: Any = None
    ordering: Any = None

    @property
    def num_rows(self) -> int:
        return self.table.num_rows


@dataclass(frozen=True)
class DataView:
    """
    Logical view over already-computed rows.

    The table is the materialized data, relabelled with the caller-facing
    schema; nothing is copied or re-executed.
    """

    table: pa.Table
    schema: pa.Schema
    lineage: Optional[LogicalPlan] = None
    partitioning: Any = None
    ordering: Any = None
    encoder: Optional[Callable[[dict], Any]] = field(default=None, compare=False)

    @property
    def num_rows(self) -> int:
        return self.table.num_rows

    @property
    def column_names(self) -> list[str]:
        return self.schema.names

    def to_batches(self) -> list[pa.RecordBatch]:
        return self.table.to_batches()

    def to_pydict(self) -> dict:
        return self.table.to_pydict()

    def iter_rows(self) -> Iterator[dict]:
        """Yield rows as dicts in their materialized order."""
        for batch in self.table.to_batches():
            yield from batch.to_pylist()

    def collect(self) -> list:
        """
        Return all rows, decoded through the encoder when one is set.

        Returns:
            List of encoded objects, or of dicts when there is no encoder
        """
        if self.encoder is None:
            return list(self.iter_rows())
        return [self.encoder(row) for row in self.iter_rows()]
