"""
Unit tests for PipelineCatalog.

Every catalog query is built over a comfortable domain; the domain
feasibility guards, shape defaulting and the two-branch wirings are
checked separately.
"""

from __future__ import annotations

import pytest

from pipebench.pipelines.catalog import PipelineCatalog
from pipebench.pipelines.types import Configuration, Wiring
from pipebench.primitives.common import QueryName
from pipebench.smv.functions import Function
from pipebench.smv.graph import Apply, Fork, Group, PortType

DIRECT_QUERIES = [
    QueryName.PASSTHROUGH,
    QueryName.PRODUCT,
    QueryName.PRODUCT_1_K,
    QueryName.PRODUCT_WINDOW_K,
    QueryName.WIN_SUM_OF_1,
    QueryName.SUM_OF_DOUBLES,
    QueryName.OUTPUT_IF_SMALLER_K,
]

COMPARISON_QUERIES = [
    QueryName.COMPARE_WINDOW_SUM_2,
    QueryName.COMPARE_WINDOW_SUM_3,
    QueryName.COMPARE_PASSTHROUGH_DELAY,
]


@pytest.fixture
def catalog() -> PipelineCatalog:
    return PipelineCatalog()


def _config(query: str, prop: str = "No full queues", domain_size: int = 5, k: int | None = None):
    return Configuration(query=query, domain_size=domain_size, queue_size=2, k=k, property=prop)


class TestDirectQueries:
    @pytest.mark.parametrize("query", DIRECT_QUERIES)
    def test_one_input_one_output(self, catalog: PipelineCatalog, query: QueryName):
        build = catalog.build(_config(query.value))
        assert build is not None
        assert build.wiring is None
        assert len(build.graph.inputs) == 1
        assert len(build.graph.outputs) == 1
        build.graph.validate()

    def test_output_if_smaller_ends_in_filter(self, catalog: PipelineCatalog):
        build = catalog.build(_config(QueryName.OUTPUT_IF_SMALLER_K.value))
        exit_port = build.graph.outputs[0]
        assert exit_port.node.kind == "Filter"

    def test_sum_of_ones_counts_then_multiplies_over_window(self, catalog: PipelineCatalog):
        build = catalog.build(_config(QueryName.WIN_SUM_OF_1.value))
        window = build.graph.outputs[0].node
        assert window.kind == "Window"
        assert window.processor.function is Function.MULTIPLICATION
        assert window.width == 3

    def test_catalog_does_not_freeze(self, catalog: PipelineCatalog):
        build = catalog.build(_config(QueryName.PASSTHROUGH.value))
        assert not build.graph.frozen


class TestShapeParameter:
    def test_default_shape_is_reported(self, catalog: PipelineCatalog):
        build = catalog.build(_config(QueryName.PRODUCT_WINDOW_K.value))
        assert build.shape == 3

    def test_non_positive_shape_uses_default(self, catalog: PipelineCatalog):
        build = catalog.build(_config(QueryName.PRODUCT_1_K.value, k=0))
        assert build.shape == 3

    def test_explicit_shape_is_used(self, catalog: PipelineCatalog):
        build = catalog.build(_config(QueryName.PRODUCT_WINDOW_K.value, k=2))
        assert build.shape == 2
        window = build.graph.nodes[0]
        assert window.width == 2

    def test_delay_defaults_to_one_event(self, catalog: PipelineCatalog):
        build = catalog.build(_config(QueryName.COMPARE_PASSTHROUGH_DELAY.value))
        assert build.shape == 1

    def test_queries_without_shape_report_none(self, catalog: PipelineCatalog):
        assert catalog.build(_config(QueryName.PRODUCT.value)).shape is None


class TestDomainFeasibility:
    @pytest.mark.parametrize("domain_size", [1, 2])
    def test_sum_of_doubles_needs_the_constant_two(self, catalog: PipelineCatalog, domain_size: int):
        assert catalog.build(_config(QueryName.SUM_OF_DOUBLES.value, domain_size=domain_size)) is None

    def test_sum_of_doubles_with_domain_three(self, catalog: PipelineCatalog):
        assert catalog.build(_config(QueryName.SUM_OF_DOUBLES.value, domain_size=3)) is not None

    @pytest.mark.parametrize(("domain_size", "k"), [(3, 3), (2, 3), (4, 4)])
    def test_output_if_smaller_needs_domain_above_k(self, catalog: PipelineCatalog, domain_size: int, k: int):
        config = _config(QueryName.OUTPUT_IF_SMALLER_K.value, domain_size=domain_size, k=k)
        assert catalog.build(config) is None

    def test_output_if_smaller_with_domain_above_k(self, catalog: PipelineCatalog):
        config = _config(QueryName.OUTPUT_IF_SMALLER_K.value, domain_size=4, k=3)
        assert catalog.build(config) is not None

    def test_sum_of_ones_needs_the_constant_one(self, catalog: PipelineCatalog):
        assert catalog.build(_config(QueryName.WIN_SUM_OF_1.value, domain_size=1)) is None

    def test_infeasible_branch_makes_equivalence_infeasible(self, catalog: PipelineCatalog):
        config = _config(QueryName.SUM_OF_DOUBLES.value, "Sequence equivalence", domain_size=2)
        assert catalog.build(config) is None


class TestUnknownQueries:
    def test_unknown_name(self, catalog: PipelineCatalog):
        assert catalog.build(_config("No such pipeline")) is None

    def test_dummy_has_no_pipeline(self, catalog: PipelineCatalog):
        assert catalog.build(_config(QueryName.DUMMY.value)) is None

    def test_lists_every_pipeline_query(self, catalog: PipelineCatalog):
        assert set(catalog.query_names) == {q.value for q in DIRECT_QUERIES + COMPARISON_QUERIES}


class TestTwoBranchWiring:
    @pytest.mark.parametrize("query", COMPARISON_QUERIES)
    def test_stepwise_exposes_both_branches(self, catalog: PipelineCatalog, query: QueryName):
        build = catalog.build(_config(query.value, "Step-wise equivalence"))
        assert build.wiring is Wiring.STEPWISE
        assert len(build.graph.inputs) == 1
        assert len(build.graph.outputs) == 2
        assert all(isinstance(o.node, Group) for o in build.graph.outputs)

    @pytest.mark.parametrize("query", COMPARISON_QUERIES)
    def test_sequence_exposes_one_boolean(self, catalog: PipelineCatalog, query: QueryName):
        build = catalog.build(_config(query.value, "Sequence equivalence"))
        assert build.wiring is Wiring.SEQUENCE
        assert len(build.graph.outputs) == 1
        out = build.graph.outputs[0]
        assert isinstance(out.node, Apply)
        assert out.node.output_type(out.port) is PortType.BOOLEAN

    def test_plain_query_is_built_twice_for_equivalence(self, catalog: PipelineCatalog):
        build = catalog.build(_config(QueryName.PRODUCT.value, "Step-wise equivalence"))
        groups = [n for n in build.graph.nodes if isinstance(n, Group)]
        assert len(groups) == 2
        first, second = (g.graph.nodes[0] for g in groups)
        assert first.kind == second.kind == "Cumulate"
        assert first is not second
        assert first.id != second.id

    def test_single_fork_feeds_both_branches(self, catalog: PipelineCatalog):
        build = catalog.build(_config(QueryName.COMPARE_WINDOW_SUM_2.value, "Step-wise equivalence"))
        entry = build.graph.inputs[0].node
        assert isinstance(entry, Fork)
        assert entry.output_arity == 2
        assert {c.destination.kind for c in build.graph.connections if c.source is entry} == {"Group"}

    def test_comparison_query_under_plain_property_is_stepwise(self, catalog: PipelineCatalog):
        build = catalog.build(_config(QueryName.COMPARE_WINDOW_SUM_3.value, "Liveness"))
        assert build.wiring is Wiring.STEPWISE
        assert len(build.graph.outputs) == 2
