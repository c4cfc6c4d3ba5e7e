"""Logical plan nodes and write-marker elimination."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import pyarrow as pa


class LogicalPlan(ABC):
    """Abstract base class for logical plan nodes."""

    @property
    @abstractmethod
    def output(self) -> pa.Schema:
        """Ordered output attribute list of this node."""


@dataclass(frozen=True)
class Relation(LogicalPlan):
    """Leaf node for an analyzed source of rows."""

    schema: pa.Schema
    name: Optional[str] = None

    @property
    def output(self) -> pa.Schema:
        return self.schema


@dataclass(frozen=True)
class Project(LogicalPlan):
    """Selects a subset of the child's columns, in the given order."""

    child: LogicalPlan
    columns: tuple

    def __post_init__(self):
        missing = [c for c in self.columns if c not in self.child.output.names]
        if missing:
            raise ValueError(f"Project references unknown columns: {missing}")
        # Stored as a tuple so the node stays hashable
        object.__setattr__(self, "columns", tuple(self.columns))

    @property
    def output(self) -> pa.Schema:
        child_output = self.child.output
        return pa.schema([child_output.field(name) for name in self.columns])


@dataclass(frozen=True)
class WriteMarker(LogicalPlan):
    """
    Sentinel wrapping a plan that feeds a write path.

    Inserted upstream for planning only; it must never reach user code.
    """

    child: LogicalPlan

    @property
    def output(self) -> pa.Schema:
        return self.child.output


def eliminate_write_marker(plan: LogicalPlan) -> LogicalPlan:
    """
    Strip a write marker from the root of ``plan``.

    Only the root is inspected. A marker nested deeper is returned untouched;
    upstream only ever places it at the top.

    Args:
        plan: Analyzed logical plan, possibly wrapped in a WriteMarker

    Returns:
        The marker's child if ``plan`` is a WriteMarker, else ``plan`` itself
    """
    if isinstance(plan, WriteMarker):
        return plan.child
    return plan
