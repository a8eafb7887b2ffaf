"""
pipebench -- Verification Types

Pydantic models for one verification experiment: its lifecycle status,
the raw outcome of each checker invocation, and the result record the
parser fills in. Numeric fields the checker output did not mention keep
the UNAVAILABLE sentinel and are displayed as "not observed".
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any

from pydantic import Field

from pipebench.primitives.common import PipeBenchBaseModel, new_id, utc_now

UNAVAILABLE = -1
NOT_OBSERVED = "not observed"


class ExperimentStatus(enum.StrEnum):
    CONSTRUCTED = "constructed"
    PREREQUISITES_MISSING = "prerequisites_missing"
    PREREQUISITES_READY = "prerequisites_ready"
    EXECUTING = "executing"
    DONE = "done"
    FAILED = "failed"


class Verdict(enum.StrEnum):
    """What the checker concluded about the property."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


class CheckerRun(PipeBenchBaseModel):
    """One NuSMV invocation: what was run and what came back."""

    batch_file: str
    model_file: str
    output: str = ""
    exit_code: int = UNAVAILABLE
    elapsed_ms: float = 0.0


class ResultRecord(PipeBenchBaseModel):
    """
    Accumulates everything known about one experiment.

    Model facts are copied in at construction; the check phase sets
    verdict, witness length and time; the stats phase sets the memory,
    BDD and state-space fields.
    """

    id: str = Field(default_factory=new_id)
    query: str = ""
    property_name: str = ""
    logic: str = ""
    formula: str = ""
    queue_size: int = UNAVAILABLE
    domain_size: int = UNAVAILABLE
    k: int | None = None

    # Model facts
    module_count: int = UNAVAILABLE
    processor_count: int = UNAVAILABLE
    variable_count: int = UNAVAILABLE
    queue_variable_count: int = UNAVAILABLE
    generation_time_ms: float = UNAVAILABLE

    # Check phase
    time_ms: float = UNAVAILABLE
    verdict: Verdict = Verdict.UNKNOWN
    witness_length: int = UNAVAILABLE

    # Stats phase
    memory: int = UNAVAILABLE
    total_nodes: int = UNAVAILABLE
    live_nodes: int = UNAVAILABLE
    system_diameter: int = UNAVAILABLE
    reachable_states: float = UNAVAILABLE
    total_states: float = UNAVAILABLE

    status: ExperimentStatus = ExperimentStatus.CONSTRUCTED
    failure_reason: str = ""
    created_at: datetime = Field(default_factory=utc_now)
    completed_at: datetime | None = None

    def display(self) -> dict[str, Any]:
        """Field values for reporting, with sentinels replaced by "not observed"."""
        shown: dict[str, Any] = {}
        for name, value in self.model_dump().items():
            if isinstance(value, (int, float)) and not isinstance(value, bool) and value == UNAVAILABLE:
                shown[name] = NOT_OBSERVED
            else:
                shown[name] = value
        return shown
