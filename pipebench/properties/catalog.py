"""
pipebench -- Property Catalog

Builds the formula for a property name from the facts a model provider
exposes. Returns None when the property does not apply to the model
(e.g. "Output always true" on a model with no boolean output).
"""

from __future__ import annotations

from typing import Callable

import structlog

from pipebench.models.provider import DummyModelProvider, ModelProvider
from pipebench.primitives.common import PropertyName
from pipebench.properties.formulas import (
    BoundedLiveness,
    Liveness,
    NoFullQueues,
    OutputAlwaysEven,
    OutputAlwaysTrue,
    PropertyFormula,
    SequenceEquivalence,
    StepEquivalence,
    XStaysNull,
)

logger = structlog.get_logger().bind(system="pipebench.properties.catalog")

_Builder = Callable[[ModelProvider], "PropertyFormula | None"]


def _x_stays_null(model: ModelProvider) -> PropertyFormula | None:
    return XStaysNull() if isinstance(model, DummyModelProvider) else None


def _no_full_queues(model: ModelProvider) -> PropertyFormula | None:
    return NoFullQueues(model.queue_variables())


def _liveness(model: ModelProvider) -> PropertyFormula | None:
    outputs = model.output_port_ids()
    return Liveness(model.input_port_ids(), outputs) if outputs else None


def _bounded_liveness(model: ModelProvider) -> PropertyFormula | None:
    outputs = model.output_port_ids()
    return BoundedLiveness(model.input_port_ids(), outputs) if outputs else None


def _output_always_even(model: ModelProvider) -> PropertyFormula | None:
    integer_outputs = model.output_port_ids() - model.boolean_output_ids()
    return OutputAlwaysEven(integer_outputs) if integer_outputs else None


def _output_always_true(model: ModelProvider) -> PropertyFormula | None:
    outputs = model.boolean_output_ids()
    return OutputAlwaysTrue(outputs) if outputs else None


def _step_equivalence(model: ModelProvider) -> PropertyFormula | None:
    return StepEquivalence(model.output_port_ids())


def _sequence_equivalence(model: ModelProvider) -> PropertyFormula | None:
    outputs = model.boolean_output_ids()
    return SequenceEquivalence(outputs) if outputs else None


class PropertyCatalog:
    """The fixed set of temporal properties, keyed by name."""

    def __init__(self) -> None:
        self._builders: dict[PropertyName, _Builder] = {
            PropertyName.X_STAYS_NULL: _x_stays_null,
            PropertyName.NO_FULL_QUEUES: _no_full_queues,
            PropertyName.LIVENESS: _liveness,
            PropertyName.BOUNDED_LIVENESS: _bounded_liveness,
            PropertyName.OUTPUT_ALWAYS_EVEN: _output_always_even,
            PropertyName.OUTPUT_ALWAYS_TRUE: _output_always_true,
            PropertyName.STEP_EQUIVALENCE: _step_equivalence,
            PropertyName.SEQUENCE_EQUIVALENCE: _sequence_equivalence,
        }
        self._log = logger

    @property
    def property_names(self) -> list[str]:
        return [p.value for p in self._builders]

    def build(self, name: str, model: ModelProvider) -> PropertyFormula | None:
        try:
            builder = self._builders[PropertyName(name)]
        except ValueError:
            self._log.debug("property_unknown", property=name)
            return None
        # Only the counter property applies to the dummy model
        if isinstance(model, DummyModelProvider) and builder is not _x_stays_null:
            return None
        formula = builder(model)
        if formula is None:
            self._log.debug("property_not_applicable", property=name, query=model.name)
        return formula
