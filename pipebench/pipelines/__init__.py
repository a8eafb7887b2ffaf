"""
pipebench -- Pipelines

The fixed catalog of benchmark pipelines and the structural cache in
front of it.
"""

from pipebench.pipelines.cache import PipelineCache
from pipebench.pipelines.catalog import CatalogEntry, PipelineCatalog
from pipebench.pipelines.types import (
    Configuration,
    ModelId,
    PipelineBuild,
    PipelineSection,
    Wiring,
    comparison_aware_equality,
    comparison_wiring,
)

__all__ = [
    "CatalogEntry",
    "Configuration",
    "ModelId",
    "PipelineBuild",
    "PipelineCache",
    "PipelineCatalog",
    "PipelineSection",
    "Wiring",
    "comparison_aware_equality",
    "comparison_wiring",
]
