"""
pipebench -- Pipeline Cache

Memoizes catalog builds by structural ModelId. The first lookup for a key
constructs the graph (allocating node and pipe ids); every later lookup
returns that same instance, so model text and property formulas generated
for equal configurations always agree on variable names.
"""

from __future__ import annotations

import threading

import structlog

from pipebench.pipelines.catalog import PipelineCatalog
from pipebench.pipelines.types import Configuration, ModelId, PipelineBuild

logger = structlog.get_logger().bind(system="pipebench.pipelines.cache")


class PipelineCache:
    """
    Unbounded for the lifetime of a run. Infeasible configurations are
    cached as None so the catalog is consulted once per key either way.
    """

    def __init__(self, catalog: PipelineCatalog | None = None) -> None:
        self._catalog = catalog or PipelineCatalog()
        self._builds: dict[ModelId, PipelineBuild | None] = {}
        self._lock = threading.Lock()
        self._log = logger

    @property
    def catalog(self) -> PipelineCatalog:
        return self._catalog

    def get_or_build(self, config: Configuration) -> PipelineBuild | None:
        key = ModelId.of(config)
        with self._lock:
            if key in self._builds:
                return self._builds[key]
            build = self._catalog.build(config)
            if build is not None:
                build.graph.freeze()
            self._builds[key] = build
            self._log.debug(
                "pipeline_cache_miss",
                query=config.query,
                property=config.property_name,
                applicable=build is not None,
                cached=len(self._builds),
            )
            return build

    def __len__(self) -> int:
        with self._lock:
            return len(self._builds)

    def __contains__(self, config: object) -> bool:
        if not isinstance(config, Configuration):
            return False
        with self._lock:
            return ModelId.of(config) in self._builds
