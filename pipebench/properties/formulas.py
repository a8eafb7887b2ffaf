"""
pipebench -- Property Formulas

Each formula is built from the concrete port ids and queue flags of one
model and renders only the formula body; the experiment adds the
CTLSPEC / LTLSPEC keyword line.

Rendering conventions:
  - ids are iterated in ascending order, queue flags by qualified name
  - clauses are joined with " & " and the statement ends with ";"
  - degenerate cases (nothing to constrain) render "TRUE"
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

from pipebench.primitives.common import Logic, PropertyName
from pipebench.smv.compiler import (
    INPUT_FIRE_PREFIX,
    OUTPUT_FIRE_PREFIX,
    OUTPUT_VALUE_PREFIX,
    SmvVariable,
)

TRIVIAL = "TRUE"


def _fire(pipe_id: int) -> str:
    return f"{OUTPUT_FIRE_PREFIX}{pipe_id}"


def _value(pipe_id: int) -> str:
    return f"{OUTPUT_VALUE_PREFIX}{pipe_id}"


def _conjunction(clauses: list[str]) -> str:
    if not clauses:
        return TRIVIAL
    return " & ".join(clauses) + ";"


class PropertyFormula(ABC):
    """A named temporal property over a specific model."""

    name: str
    logic: Logic

    @abstractmethod
    def render(self) -> str: ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.logic}: {self.render()!r}>"


# ─── CTL ─────────────────────────────────────────────────────────


class NoFullQueues(PropertyFormula):
    """No queue ever reaches a state where its last slot is occupied."""

    name = PropertyName.NO_FULL_QUEUES.value
    logic = Logic.CTL

    def __init__(self, queue_flags: Iterable[SmvVariable]) -> None:
        self.queue_flags = sorted(queue_flags, key=lambda v: v.name)

    def render(self) -> str:
        if not self.queue_flags:
            return TRIVIAL
        full = " | ".join(f"{v.name}[{v.size - 1}]" for v in self.queue_flags)
        return f"! (EF ({full}));"


class XStaysNull(PropertyFormula):
    """Only meaningful on the dummy counter model."""

    name = PropertyName.X_STAYS_NULL.value
    logic = Logic.CTL

    def render(self) -> str:
        return "AG (x = 0 -> AG (x = 0));"


class OutputAlwaysEven(PropertyFormula):
    name = PropertyName.OUTPUT_ALWAYS_EVEN.value
    logic = Logic.CTL

    def __init__(self, output_ids: Iterable[int]) -> None:
        self.output_ids = sorted(output_ids)

    def render(self) -> str:
        return _conjunction(
            [f"AG ({_fire(n)} -> {_value(n)} mod 2 = 0)" for n in self.output_ids]
        )


# ─── LTL ─────────────────────────────────────────────────────────


class Liveness(PropertyFormula):
    """
    Whenever every input fires, every output eventually fires.

    The antecedent is built from the external input fire flags of main
    (ib_<n>, "an input event is available this step"), not from the
    per-processor queue-nonempty flags. With no inputs it is TRUE.
    """

    name = PropertyName.LIVENESS.value
    logic = Logic.LTL

    def __init__(self, input_ids: Iterable[int], output_ids: Iterable[int]) -> None:
        self.input_ids = sorted(input_ids)
        self.output_ids = sorted(output_ids)

    def antecedent(self) -> str:
        fired = [f"{INPUT_FIRE_PREFIX}{n}" for n in self.input_ids]
        if not fired:
            return TRIVIAL
        if len(fired) == 1:
            return fired[0]
        return "(" + " & ".join(fired) + ")"

    def response(self, pipe_id: int) -> str:
        return f"F {_fire(pipe_id)}"

    def render(self) -> str:
        ante = self.antecedent()
        return _conjunction([f"G ({ante} -> {self.response(n)})" for n in self.output_ids])


class BoundedLiveness(Liveness):
    """Like liveness, with the response due within two steps."""

    name = PropertyName.BOUNDED_LIVENESS.value

    def response(self, pipe_id: int) -> str:
        fire = _fire(pipe_id)
        return f"({fire} | X ({fire} | X {fire}))"


class OutputAlwaysTrue(PropertyFormula):
    """Every event on a boolean output carries TRUE."""

    name = PropertyName.OUTPUT_ALWAYS_TRUE.value
    logic = Logic.LTL

    def __init__(self, output_ids: Iterable[int]) -> None:
        self.output_ids = sorted(output_ids)

    def render(self) -> str:
        return _conjunction([f"G ({_fire(n)} -> {_value(n)})" for n in self.output_ids])


class SequenceEquivalence(OutputAlwaysTrue):
    """Checked on the output of the equality node comparing both branches."""

    name = PropertyName.SEQUENCE_EQUIVALENCE.value


class StepEquivalence(PropertyFormula):
    """Every pair of outputs fires together and with equal values."""

    name = PropertyName.STEP_EQUIVALENCE.value
    logic = Logic.LTL

    def __init__(self, output_ids: Iterable[int]) -> None:
        self.output_ids = sorted(output_ids)

    def render(self) -> str:
        if len(self.output_ids) < 2:
            return TRIVIAL
        clauses = []
        for i, left in enumerate(self.output_ids):
            for right in self.output_ids[i + 1:]:
                clauses.append(
                    f"G ({_fire(left)} = {_fire(right)} & "
                    f"({_fire(left)} -> {_value(left)} = {_value(right)}))"
                )
        return _conjunction(clauses)
