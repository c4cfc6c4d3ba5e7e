"""
Foreach-batch sink - hands already-executed Arrow micro-batches to a callback
"""

__version__ = "0.1.0"

from foreach_batch_sink.bridge import (
    ForeignBatchCallback,
    FunctionCallback,
    MethodCallback,
    register_foreach_batch,
)
from foreach_batch_sink.errors import (
    CallbackFailure,
    ForeachBatchError,
    ForeignCallError,
    InvariantViolation,
)
from foreach_batch_sink.plan import Project, Relation, WriteMarker, eliminate_write_marker
from foreach_batch_sink.sink import ForeachBatchSink
from foreach_batch_sink.types import BatchCallback, ForeignCallbackHandle
from foreach_batch_sink.view import DataView, MaterializedBatch, Partitioning, SortOrder

__all__ = [
    "BatchCallback",
    "CallbackFailure",
    "DataView",
    "ForeachBatchError",
    "ForeachBatchSink",
    "ForeignBatchCallback",
    "ForeignCallError",
    "ForeignCallbackHandle",
    "FunctionCallback",
    "InvariantViolation",
    "MaterializedBatch",
    "MethodCallback",
    "Partitioning",
    "Project",
    "Relation",
    "SortOrder",
    "WriteMarker",
    "eliminate_write_marker",
    "register_foreach_batch",
]
