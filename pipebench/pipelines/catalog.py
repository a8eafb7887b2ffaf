"""
pipebench -- Pipeline Catalog

Maps every benchmark query to its creator (or pair of creators, for
comparison queries) and assembles the module graph a configuration needs.

Assembly rules:
  - plain query, plain property: the creator builds straight into the
    top-level graph, whose single input and output are exposed
  - equivalence property or comparison query: each branch is built inside
    its own Group (the same creator twice for a plain query), a Fork feeds
    both, and the branch outputs are either both exposed (step-wise) or
    compared by an EQUALS node whose boolean output is exposed (sequence)
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from pipebench.pipelines import creators
from pipebench.pipelines.types import (
    Configuration,
    PipelineBuild,
    PipelineCreator,
    PipelineSection,
    Wiring,
    comparison_wiring,
)
from pipebench.primitives.common import QueryName
from pipebench.smv.functions import Function
from pipebench.smv.graph import Apply, Fork, Group, ModuleGraph

logger = structlog.get_logger().bind(system="pipebench.pipelines.catalog")


@dataclass(frozen=True)
class CatalogEntry:
    query: QueryName
    creators: tuple[PipelineCreator, ...]
    image: str | None = None

    @property
    def is_comparison(self) -> bool:
        return len(self.creators) == 2


def _entries() -> dict[QueryName, CatalogEntry]:
    entries = [
        CatalogEntry(QueryName.PASSTHROUGH, (creators.passthrough,), "Passthrough.png"),
        CatalogEntry(QueryName.PRODUCT, (creators.product,), "Product.png"),
        CatalogEntry(QueryName.PRODUCT_1_K, (creators.product_1_k,), "Product1_k.png"),
        CatalogEntry(QueryName.PRODUCT_WINDOW_K, (creators.product_window_k,), "ProductWindow_k.png"),
        CatalogEntry(QueryName.WIN_SUM_OF_1, (creators.sum_of_ones_window,), "SumOfOnesWindow_k.png"),
        CatalogEntry(QueryName.SUM_OF_DOUBLES, (creators.sum_of_doubles,), "SumOfDoubles.png"),
        CatalogEntry(
            QueryName.OUTPUT_IF_SMALLER_K,
            (creators.output_if_smaller_k,),
            "OutputIfSmallerThan_k.png",
        ),
        CatalogEntry(
            QueryName.COMPARE_WINDOW_SUM_2,
            (creators.window_sum(2), creators.trim_sum_2),
            "CompareWindowSum2.png",
        ),
        CatalogEntry(
            QueryName.COMPARE_WINDOW_SUM_3,
            (creators.window_sum(3), creators.trim_sum_3),
            "CompareWindowSum3.png",
        ),
        CatalogEntry(
            QueryName.COMPARE_PASSTHROUGH_DELAY,
            (creators.passthrough, creators.delay),
        ),
    ]
    return {entry.query: entry for entry in entries}


class PipelineCatalog:
    """The fixed set of constructible benchmark pipelines."""

    def __init__(self) -> None:
        self._entries = _entries()
        self._log = logger

    @property
    def query_names(self) -> list[str]:
        return [q.value for q in self._entries]

    def entry(self, query: str) -> CatalogEntry | None:
        try:
            return self._entries.get(QueryName(query))
        except ValueError:
            return None

    def image_url(self, query: str) -> str | None:
        entry = self.entry(query)
        if entry is None or entry.image is None:
            return None
        return f"/resource/{entry.image}"

    def build(self, config: Configuration) -> PipelineBuild | None:
        """
        Construct the graph for a configuration.

        Returns None when the query is unknown or infeasible over the
        configured domain. The returned graph is validated but not frozen.
        """
        entry = self.entry(config.query)
        if entry is None:
            self._log.debug("pipeline_unknown_query", query=config.query)
            return None

        graph = ModuleGraph(config.domain_size, config.queue_size)
        wiring = comparison_wiring(config.query, config.property_name)
        if wiring is None:
            section = entry.creators[0](graph, config.shape)
            if section is None:
                return self._infeasible(config)
            graph.expose_input(section.entry, 0)
            graph.expose_output(section.exit, 0)
            shape = section.shape
        else:
            branch_creators = entry.creators if entry.is_comparison else entry.creators * 2
            sections = self._build_branches(graph, branch_creators, config.shape, wiring)
            if sections is None:
                return self._infeasible(config)
            shape = next((s.shape for s in sections if s.shape is not None), None)

        graph.validate()
        self._log.debug(
            "pipeline_built",
            query=config.query,
            wiring=wiring,
            nodes=graph.count_nodes(),
            shape=shape,
        )
        return PipelineBuild(query=config.query, graph=graph, shape=shape, wiring=wiring)

    def _build_branches(
        self,
        graph: ModuleGraph,
        branch_creators: tuple[PipelineCreator, ...],
        shape: int | None,
        wiring: Wiring,
    ) -> list[PipelineSection] | None:
        groups: list[Group] = []
        sections: list[PipelineSection] = []
        for create in branch_creators:
            group = Group(graph.domain_size, graph.queue_size)
            section = create(group.graph, shape)
            if section is None:
                return None
            group.associate_input(0, section.entry, 0)
            group.associate_output(0, section.exit, 0)
            groups.append(group)
            sections.append(section)

        fork = Fork(len(groups))
        graph.add(fork, *groups)
        for port, group in enumerate(groups):
            graph.connect(fork, port, group, 0)
        graph.expose_input(fork, 0)

        if wiring is Wiring.STEPWISE:
            for group in groups:
                graph.expose_output(group, 0)
        else:
            equals = Apply(Function.EQUALS, input_type=groups[0].output_type(0))
            graph.add(equals)
            graph.connect(groups[0], 0, equals, 0)
            graph.connect(groups[1], 0, equals, 1)
            graph.expose_output(equals, 0)
        return sections

    def _infeasible(self, config: Configuration) -> None:
        self._log.debug(
            "pipeline_not_applicable",
            query=config.query,
            domain_size=config.domain_size,
            k=config.k,
        )
        return None
