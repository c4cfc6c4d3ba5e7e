"""Native and foreign callback variants behind the BatchCallback interface."""

import logging
from typing import Any, Callable, Union

from opentelemetry import trace

from foreach_batch_sink.errors import ForeignCallError
from foreach_batch_sink.types import BatchCallback, ForeignCallbackHandle
from foreach_batch_sink.view import DataView

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class FunctionCallback(BatchCallback):
    """In-process callback wrapping a user function ``fn(view, batch_id)``."""

    def __init__(self, fn: Callable[[DataView, int], Any]):
        self.fn = fn

    def call(self, batch_id: int, data: DataView) -> None:
        self.fn(data, batch_id)

    def __repr__(self) -> str:
        return f"FunctionCallback({getattr(self.fn, '__qualname__', self.fn)!r})"


class ForeignBatchCallback(BatchCallback):
    """
    Callback delegating to an implementation outside this process.

    The call blocks until the foreign side returns. Failures are never
    discarded: anything raised by the handle surfaces as ForeignCallError,
    with the original error chained as its cause.
    """

    def __init__(self, handle: ForeignCallbackHandle):
        """
        Initialize foreign callback.

        Args:
            handle: Gateway object exposing ``call(batch_id, data)``
        """
        self.handle = handle

    def call(self, batch_id: int, data: DataView) -> None:
        with tracer.start_as_current_span("foreign_callback_call") as span:
            span.set_attribute("batch.id", batch_id)
            try:
                self.handle.call(batch_id, data)
            except ForeignCallError:
                raise
            except Exception as e:
                logger.error("Foreign callback failed for batch %d: %s", batch_id, e)
                raise ForeignCallError(
                    f"Foreign callback failed for batch {batch_id}: {e}", cause=e
                ) from e

    def __repr__(self) -> str:
        return f"ForeignBatchCallback({self.handle!r})"


class MethodCallback(BatchCallback):
    """In-process object exposing ``call(batch_id, data)`` without subclassing BatchCallback."""

    def __init__(self, target: Any):
        self.target = target

    def call(self, batch_id: int, data: DataView) -> None:
        self.target.call(batch_id, data)

    def __repr__(self) -> str:
        return f"MethodCallback({self.target!r})"


CallbackLike = Union[BatchCallback, Callable[[DataView, int], Any]]


def as_batch_callback(callback: CallbackLike) -> BatchCallback:
    """
    Resolve the callback variant for a registered object.

    Everything reaching this point runs in-process. Foreign handles take the
    foreign path only when wrapped explicitly, through register_foreach_batch
    or ForeignBatchCallback.

    Args:
        callback: A BatchCallback, an object with ``call(batch_id, data)``,
            or a plain function taking ``(view, batch_id)``

    Returns:
        BatchCallback the sink can invoke without knowing which variant it is
    """
    if isinstance(callback, BatchCallback):
        return callback
    if callable(getattr(callback, "call", None)):
        return MethodCallback(callback)
    if callable(callback):
        return FunctionCallback(callback)
    raise TypeError(f"Unsupported callback type: {type(callback).__name__}")


def register_foreach_batch(handle: ForeignCallbackHandle) -> BatchCallback:
    """Wrap a foreign handle so it can be registered on a sink."""
    if not isinstance(handle, ForeignCallbackHandle):
        raise TypeError(f"Foreign handle must define call(batch_id, data): {handle!r}")
    logger.info("Registering foreign foreach-batch callback: %r", handle)
    return ForeignBatchCallback(handle)
