"""
pipebench -- Pipeline Types

Benchmark configurations, the structural cache key derived from them, and
what pipeline creators and the catalog hand back.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from pydantic import ConfigDict, Field

from pipebench.primitives.common import PipeBenchBaseModel, PropertyName, QueryName

if TYPE_CHECKING:
    from pipebench.smv.graph import ModuleGraph, Node


class Configuration(PipeBenchBaseModel):
    """One point of the benchmark: which pipeline, at which size, under which property."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    query: str
    domain_size: int = Field(ge=1)
    queue_size: int = Field(ge=1)
    # Window width / decimation interval / threshold; <= 0 or None = query default
    k: int | None = None
    property_name: str = Field(default=PropertyName.NO_FULL_QUEUES.value, alias="property")

    @property
    def shape(self) -> int | None:
        """The explicit shape parameter, or None when the query default applies."""
        if self.k is None or self.k <= 0:
            return None
        return self.k


class Wiring(enum.StrEnum):
    """How the two branches of a comparison pipeline are exposed."""

    STEPWISE = "stepwise"  # both branch outputs are external outputs
    SEQUENCE = "sequence"  # an equality node compares them; one boolean output


def comparison_wiring(query: str, property_name: str) -> Wiring | None:
    """
    The branch wiring a configuration needs, or None for a plain pipeline.

    Equivalence properties always need two branches. Comparison queries
    have two branches whatever the property; "Output always true" on them
    checks the equality stream.
    """
    if property_name == PropertyName.STEP_EQUIVALENCE:
        return Wiring.STEPWISE
    if property_name == PropertyName.SEQUENCE_EQUIVALENCE:
        return Wiring.SEQUENCE
    if is_comparison_query(query):
        if property_name == PropertyName.OUTPUT_ALWAYS_TRUE:
            return Wiring.SEQUENCE
        return Wiring.STEPWISE
    return None


def is_comparison_query(query: str) -> bool:
    try:
        return QueryName(query).is_comparison
    except ValueError:
        return False


def is_comparison_style(query: str, property_name: str) -> bool:
    try:
        equivalence = PropertyName(property_name).is_equivalence
    except ValueError:
        equivalence = False
    return equivalence or is_comparison_query(query)


def comparison_aware_equality(a: ModelId, b: ModelId) -> bool:
    """
    Cache-key equality policy.

    Query, queue size, domain size and shape parameter must match. When
    either key is comparison-style (comparison query or equivalence
    property), the property name must match as well, since it decides how
    the branches are wired. Plain pipelines are shared across properties.
    """
    if (a.query, a.queue_size, a.domain_size, a.shape) != (
        b.query,
        b.queue_size,
        b.domain_size,
        b.shape,
    ):
        return False
    if a.comparison_style or b.comparison_style:
        return a.property_name == b.property_name
    return True


@dataclass(frozen=True, eq=False)
class ModelId:
    """Structural identity of a configuration, used as the pipeline cache key."""

    query: str
    queue_size: int
    domain_size: int
    shape: int | None
    property_name: str

    @classmethod
    def of(cls, config: Configuration) -> ModelId:
        return cls(
            query=config.query,
            queue_size=config.queue_size,
            domain_size=config.domain_size,
            shape=config.shape,
            property_name=config.property_name,
        )

    @property
    def comparison_style(self) -> bool:
        return is_comparison_style(self.query, self.property_name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ModelId):
            return NotImplemented
        return comparison_aware_equality(self, other)

    def __hash__(self) -> int:
        return hash((self.query, self.queue_size, self.domain_size, self.shape))


@dataclass(frozen=True)
class PipelineSection:
    """What a pipeline creator returns: its entry and exit nodes and the shape it used."""

    entry: Node
    exit: Node
    shape: int | None = None


@dataclass(frozen=True)
class PipelineBuild:
    """A constructed (and frozen) pipeline graph."""

    query: str
    graph: ModuleGraph
    shape: int | None
    wiring: Wiring | None = None


# A creator builds its nodes into the given graph. It returns None when
# the pipeline cannot be built for the graph's domain.
PipelineCreator = Callable[["ModuleGraph", "int | None"], "PipelineSection | None"]
