"""Error types raised by the foreach-batch sink."""

from typing import Optional


class ForeachBatchError(Exception):
    """Base class for errors raised by this package."""


class InvariantViolation(ForeachBatchError):
    """
    The reconstructed view does not match the caller-facing schema.

    This signals an internal defect upstream, not bad input. It is raised
    before the callback is invoked and must never be retried.
    """


class CallbackFailure(ForeachBatchError):
    """Base for failures on the callback side of a batch."""


class ForeignCallError(CallbackFailure):
    """A bridged callback failed, or the gateway could not reach it."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
