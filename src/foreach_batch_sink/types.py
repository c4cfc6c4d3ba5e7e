"""Common types and interfaces for per-batch callbacks."""

from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable

from foreach_batch_sink.view import DataView


class BatchCallback(ABC):
    """Abstract base class for the callback a sink delivers batches to."""

    @abstractmethod
    def call(self, batch_id: int, data: DataView) -> None:
        """
        Process one micro-batch.

        Called exactly once per accepted batch, synchronously. Any exception
        raised here propagates to the caller of ``add_batch``.

        Args:
            batch_id: Identifier assigned to the batch by the scheduler
            data: View over the batch's rows
        """


@runtime_checkable
class ForeignCallbackHandle(Protocol):
    """Reference to a callback implemented outside this process."""

    def call(self, batch_id: int, data: DataView) -> None: ...
