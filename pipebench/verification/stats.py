"""
pipebench -- Benchmark Statistics

Aggregates over a batch of result records: the size of the models that
were generated, and where the checker spent the most time.
"""

from __future__ import annotations

from typing import Iterable

from pipebench.pipelines.types import ModelId
from pipebench.primitives.common import PipeBenchBaseModel
from pipebench.verification.types import UNAVAILABLE, ExperimentStatus, ResultRecord


class ModelSummary(PipeBenchBaseModel):
    min_processors: int = 0
    max_processors: int = 0
    max_variables: int = 0
    max_modules: int = 0
    max_queue_size: int = 0
    max_domain_size: int = 0
    model_count: int = 0


class TimeSummary(PipeBenchBaseModel):
    max_time_ms: float = 0.0
    max_query: str = ""
    max_property: str = ""


def summarize_models(records: Iterable[ResultRecord]) -> ModelSummary:
    """Size statistics over the pipeline models (dummy models are ignored)."""
    graph_records = [r for r in records if r.processor_count != UNAVAILABLE]
    if not graph_records:
        return ModelSummary()
    distinct = {
        ModelId(
            query=r.query,
            queue_size=r.queue_size,
            domain_size=r.domain_size,
            shape=r.k,
            property_name=r.property_name,
        )
        for r in graph_records
    }
    return ModelSummary(
        min_processors=min(r.processor_count for r in graph_records),
        max_processors=max(r.processor_count for r in graph_records),
        max_variables=max(r.variable_count for r in graph_records),
        max_modules=max(r.module_count for r in graph_records),
        max_queue_size=max(r.queue_size for r in graph_records),
        max_domain_size=max(r.domain_size for r in graph_records),
        model_count=len(distinct),
    )


def summarize_times(records: Iterable[ResultRecord]) -> TimeSummary:
    """The slowest completed experiment, and which pipeline and property it checked."""
    summary = TimeSummary()
    for record in records:
        if record.status is not ExperimentStatus.DONE:
            continue
        if record.time_ms > summary.max_time_ms:
            summary = TimeSummary(
                max_time_ms=record.time_ms,
                max_query=record.query,
                max_property=record.property_name,
            )
    return summary
