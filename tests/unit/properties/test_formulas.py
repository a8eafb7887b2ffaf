"""
Unit tests for property formula rendering.
"""

from __future__ import annotations

from pipebench.primitives.common import Logic
from pipebench.properties.formulas import (
    BoundedLiveness,
    Liveness,
    NoFullQueues,
    OutputAlwaysEven,
    OutputAlwaysTrue,
    SequenceEquivalence,
    StepEquivalence,
    XStaysNull,
)
from pipebench.smv.compiler import SmvVariable


def _flag(name: str, size: int = 3) -> SmvVariable:
    return SmvVariable(name, "boolean", size)


class TestNoFullQueues:
    def test_no_flags_is_trivially_true(self):
        assert NoFullQueues([]).render() == "TRUE"

    def test_flags_render_last_slot(self):
        formula = NoFullQueues({_flag("qb1"), _flag("qb0")})
        assert formula.render() == "! (EF (qb0[2] | qb1[2]));"

    def test_is_ctl(self):
        assert NoFullQueues([]).logic is Logic.CTL
        assert NoFullQueues([]).logic.keyword == "CTLSPEC"


class TestLiveness:
    def test_single_input_single_output(self):
        assert Liveness({4}, {7}).render() == "G (ib_4 -> F ob_7);"

    def test_several_inputs_are_parenthesized(self):
        assert Liveness({2, 1}, {5}).render() == "G ((ib_1 & ib_2) -> F ob_5);"

    def test_outputs_are_conjoined_in_order(self):
        rendered = Liveness({0}, {9, 3}).render()
        assert rendered == "G (ib_0 -> F ob_3) & G (ib_0 -> F ob_9);"

    def test_bounded_response_within_two_steps(self):
        assert BoundedLiveness({0}, {1}).render() == "G (ib_0 -> (ob_1 | X (ob_1 | X ob_1)));"

    def test_is_ltl(self):
        assert Liveness({0}, {1}).logic is Logic.LTL
        assert BoundedLiveness({0}, {1}).logic.keyword == "LTLSPEC"


class TestOutputProperties:
    def test_output_always_even(self):
        assert OutputAlwaysEven({3}).render() == "AG (ob_3 -> oc_3 mod 2 = 0);"
        assert OutputAlwaysEven({3}).logic is Logic.CTL

    def test_output_always_true(self):
        assert OutputAlwaysTrue({2, 1}).render() == "G (ob_1 -> oc_1) & G (ob_2 -> oc_2);"

    def test_sequence_equivalence_checks_equality_output(self):
        formula = SequenceEquivalence({8})
        assert formula.render() == "G (ob_8 -> oc_8);"
        assert formula.name == "Sequence equivalence"


class TestStepEquivalence:
    def test_one_output_is_trivially_true(self):
        assert StepEquivalence({4}).render() == "TRUE"

    def test_no_output_is_trivially_true(self):
        assert StepEquivalence(set()).render() == "TRUE"

    def test_pair_of_outputs(self):
        assert StepEquivalence({6, 5}).render() == "G (ob_5 = ob_6 & (ob_5 -> oc_5 = oc_6));"

    def test_every_unordered_pair(self):
        rendered = StepEquivalence({1, 2, 3}).render()
        assert rendered.count("G (") == 3
        assert "ob_1 = ob_3" in rendered
        assert "ob_3 = ob_1" not in rendered


class TestXStaysNull:
    def test_counter_property(self):
        assert XStaysNull().render() == "AG (x = 0 -> AG (x = 0));"
