"""
pipebench -- Common Primitives

Shared enums, base classes, and utilities used across the benchmark.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from pydantic import BaseModel
from ulid import ULID


def new_id() -> str:
    """Generate a new ULID string. Time-sortable, globally unique."""
    return str(ULID())


def utc_now() -> datetime:
    """Current UTC time, timezone-aware."""
    return datetime.now(timezone.utc)


# ─── Enums ────────────────────────────────────────────────────────


class Logic(enum.StrEnum):
    """Temporal-logic dialect of a property, selects the SPEC keyword."""

    CTL = "CTL"
    LTL = "LTL"

    @property
    def keyword(self) -> str:
        return f"{self.value}SPEC"


class QueryName(enum.StrEnum):
    """The fixed catalog of benchmark pipelines."""

    DUMMY = "Dummy"
    PASSTHROUGH = "Passthrough"
    PRODUCT = "Product"
    PRODUCT_1_K = "Product of 1 and k-th"
    PRODUCT_WINDOW_K = "Sum of window of width 3"
    WIN_SUM_OF_1 = "Sum of 1s on window"
    SUM_OF_DOUBLES = "Sum of doubles"
    OUTPUT_IF_SMALLER_K = "Output if smaller than k"
    COMPARE_WINDOW_SUM_2 = "Window sum of 2 comparison"
    COMPARE_WINDOW_SUM_3 = "Window sum of 3 comparison"
    COMPARE_PASSTHROUGH_DELAY = "Passthrough vs delay comparison"

    @property
    def is_comparison(self) -> bool:
        """Comparison queries pit two distinct pipelines against each other."""
        return "comparison" in self.value


class PropertyName(enum.StrEnum):
    """The fixed catalog of temporal properties."""

    X_STAYS_NULL = "x stays null"
    NO_FULL_QUEUES = "No full queues"
    LIVENESS = "Liveness"
    BOUNDED_LIVENESS = "Bounded liveness"
    OUTPUT_ALWAYS_EVEN = "Output always even"
    OUTPUT_ALWAYS_TRUE = "Output always true"
    STEP_EQUIVALENCE = "Step-wise equivalence"
    SEQUENCE_EQUIVALENCE = "Sequence equivalence"

    @property
    def is_equivalence(self) -> bool:
        return self in (PropertyName.STEP_EQUIVALENCE, PropertyName.SEQUENCE_EQUIVALENCE)


# ─── Base Models ──────────────────────────────────────────────────


class PipeBenchBaseModel(BaseModel):
    """Base model for all benchmark records."""

    model_config = {"populate_by_name": True, "from_attributes": True}
