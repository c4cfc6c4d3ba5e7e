"""Pytest configuration and fixtures."""

import pyarrow as pa
import pytest

from foreach_batch_sink.types import BatchCallback


class RecordingCallback(BatchCallback):
    """Callback recording every delivery, optionally raising on one batch."""

    def __init__(self, fail_on=None, error=None):
        self.calls = []
        self.fail_on = fail_on
        self.error = error or RuntimeError("callback failed")

    def call(self, batch_id, data):
        self.calls.append((batch_id, data))
        if batch_id == self.fail_on:
            raise self.error

    @property
    def batch_ids(self):
        return [batch_id for batch_id, _ in self.calls]


@pytest.fixture
def recording_callback():
    """Provide a fresh recording callback."""
    return RecordingCallback()


@pytest.fixture
def sample_table():
    """Provide a small Arrow table with an id and a value column."""
    return pa.table(
        {
            "id": pa.array([1, 2], type=pa.int64()),
            "val": pa.array(["x", "y"], type=pa.string()),
        }
    )


@pytest.fixture
def make_callback():
    """Provide a factory for recording callbacks with failure injection."""
    return RecordingCallback
