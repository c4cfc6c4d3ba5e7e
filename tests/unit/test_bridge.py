"""Tests for native and foreign callback dispatch."""

from unittest.mock import MagicMock

import pyarrow as pa
import pytest

from foreach_batch_sink.bridge import (
    ForeignBatchCallback,
    FunctionCallback,
    MethodCallback,
    as_batch_callback,
    register_foreach_batch,
)
from foreach_batch_sink.errors import CallbackFailure, ForeignCallError
from foreach_batch_sink.plan import Relation, WriteMarker
from foreach_batch_sink.sink import ForeachBatchSink
from foreach_batch_sink.types import ForeignCallbackHandle
from foreach_batch_sink.view import MaterializedBatch


class GatewayHandle:
    """Stand-in for a gateway proxy to a callback in another runtime."""

    def __init__(self, error=None):
        self.received = []
        self.error = error

    def call(self, batch_id, data):
        self.received.append((batch_id, data.to_pydict()))
        if self.error is not None:
            raise self.error


def _deliver(sink, table, batch_id):
    sink.add_batch(batch_id, MaterializedBatch(table), table.schema, WriteMarker(Relation(table.schema)))


def test_handle_satisfies_protocol():
    assert isinstance(GatewayHandle(), ForeignCallbackHandle)
    assert not isinstance(object(), ForeignCallbackHandle)


def test_as_batch_callback_selects_variant(recording_callback):
    """Test that each registration shape maps to the right variant."""
    assert as_batch_callback(recording_callback) is recording_callback
    assert isinstance(as_batch_callback(GatewayHandle()), MethodCallback)
    assert isinstance(as_batch_callback(lambda view, batch_id: None), FunctionCallback)


def test_as_batch_callback_rejects_non_callables():
    with pytest.raises(TypeError):
        as_batch_callback(42)


def test_function_callback_swaps_argument_order():
    """Test that user functions receive (view, batch_id)."""
    fn = MagicMock()
    view = MagicMock()

    FunctionCallback(fn).call(5, view)

    fn.assert_called_once_with(view, 5)


def test_sink_delivers_through_foreign_handle(sample_table):
    """Test that the sink is agnostic to foreign dispatch."""
    handle = GatewayHandle()
    sink = ForeachBatchSink(register_foreach_batch(handle))

    _deliver(sink, sample_table, 3)
    _deliver(sink, sample_table, 4)

    assert handle.received == [
        (3, {"id": [1, 2], "val": ["x", "y"]}),
        (4, {"id": [1, 2], "val": ["x", "y"]}),
    ]


def test_object_with_call_method_is_dispatched_natively(sample_table):
    """Test that only explicit registration takes the foreign path."""
    handle = GatewayHandle()
    sink = ForeachBatchSink(handle)

    _deliver(sink, sample_table, 0)

    assert isinstance(sink.callback, MethodCallback)
    assert [batch_id for batch_id, _ in handle.received] == [0]


def test_native_object_error_keeps_its_identity(sample_table):
    """Test that an in-process writer's exception reaches the caller unchanged."""
    error = KeyError("boom")

    class NativeWriter:
        def call(self, batch_id, data):
            raise error

    sink = ForeachBatchSink(NativeWriter())

    with pytest.raises(KeyError) as exc_info:
        _deliver(sink, sample_table, 1)

    assert exc_info.value is error


def test_foreign_error_surfaces_as_foreign_call_error(sample_table):
    """Test that a foreign failure is propagated, not swallowed."""
    original = ValueError("python worker raised")
    handle = GatewayHandle(error=original)
    sink = ForeachBatchSink(register_foreach_batch(handle))

    with pytest.raises(ForeignCallError) as exc_info:
        _deliver(sink, sample_table, 6)

    assert exc_info.value.cause is original
    assert exc_info.value.__cause__ is original
    assert isinstance(exc_info.value, CallbackFailure)
    assert "batch 6" in str(exc_info.value)
    assert len(handle.received) == 1


def test_foreign_call_error_is_not_rewrapped(sample_table):
    """Test that gateway-raised ForeignCallError passes through as-is."""
    gateway_error = ForeignCallError("gateway unreachable")
    sink = ForeachBatchSink(register_foreach_batch(GatewayHandle(error=gateway_error)))

    with pytest.raises(ForeignCallError) as exc_info:
        _deliver(sink, sample_table, 1)

    assert exc_info.value is gateway_error


def test_register_rejects_objects_without_call():
    with pytest.raises(TypeError, match="call"):
        register_foreach_batch(lambda view, batch_id: None)


def test_foreign_callback_returns_only_after_handle():
    """Test that delivery completes only after the handle returns."""
    order = []

    class RecordingHandle:
        def call(self, batch_id, data):
            order.append(("foreign", batch_id))

    ForeignBatchCallback(RecordingHandle()).call(1, MagicMock())
    order.append(("returned", 1))

    assert order == [("foreign", 1), ("returned", 1)]


def test_empty_batch_reaches_foreign_side():
    table = pa.table({"a": pa.array([], type=pa.int64())})
    handle = GatewayHandle()

    _deliver(ForeachBatchSink(register_foreach_batch(handle)), table, 7)

    assert handle.received == [(7, {"a": []})]
