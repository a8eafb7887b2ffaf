"""
pipebench -- Model Library

Resolves a configuration to a model provider, going through the pipeline
cache so equal configurations share one graph.
"""

from __future__ import annotations

import structlog

from pipebench.models.provider import DummyModelProvider, GraphModelProvider, ModelProvider
from pipebench.pipelines.cache import PipelineCache
from pipebench.pipelines.types import Configuration
from pipebench.primitives.common import QueryName

logger = structlog.get_logger().bind(system="pipebench.models.library")


class ModelLibrary:
    def __init__(self, cache: PipelineCache | None = None) -> None:
        self._cache = cache or PipelineCache()
        self._log = logger

    @property
    def cache(self) -> PipelineCache:
        return self._cache

    def get(self, config: Configuration) -> ModelProvider | None:
        """A fresh provider for the configuration, or None when it is not applicable."""
        if config.query == QueryName.DUMMY:
            return DummyModelProvider(config.queue_size, config.domain_size)
        build = self._cache.get_or_build(config)
        if build is None:
            return None
        return GraphModelProvider(
            build.graph,
            config.query,
            config.queue_size,
            config.domain_size,
            shape=build.shape,
        )
