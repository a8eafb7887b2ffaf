"""
pipebench -- Model Providers

A model provider owns the text of one NuSMV model and the facts about it
that properties and result records need.

GraphModelProvider wraps a cached pipeline graph. It compiles the graph
once at construction and answers every later question from the compiled
SmvModel, relying on the compiler's naming contract:
  ic_<n> / oc_<n>   top-level input / output values, <n> the pipe id
  qb<j>             queue occupancy flags, last slot = full
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod

import structlog

from pipebench.primitives.common import PipeBenchBaseModel
from pipebench.smv.compiler import (
    INPUT_VALUE_PREFIX,
    OUTPUT_VALUE_PREFIX,
    QUEUE_FLAG_PREFIX,
    SmvCompiler,
    SmvModel,
    SmvModule,
    SmvVariable,
)
from pipebench.smv.graph import ModuleGraph

logger = structlog.get_logger().bind(system="pipebench.models.provider")

UNAVAILABLE = -1


class ModelFacts(PipeBenchBaseModel):
    """Descriptive facts about a model, copied into its result record."""

    query: str
    queue_size: int
    domain_size: int
    k: int | None = None
    module_count: int = UNAVAILABLE
    processor_count: int = UNAVAILABLE
    variable_count: int = UNAVAILABLE
    queue_variable_count: int = UNAVAILABLE
    generation_time_ms: float = UNAVAILABLE


class ModelProvider(ABC):
    """A NuSMV model, plus what formula generation needs to know about it."""

    def __init__(self, name: str, queue_size: int, domain_size: int) -> None:
        self.name = name
        self.queue_size = queue_size
        self.domain_size = domain_size

    @abstractmethod
    def serialize(self) -> str:
        """The model body, without any SPEC section."""

    @abstractmethod
    def variable_count(self) -> int: ...

    @abstractmethod
    def queue_variables(self) -> set[SmvVariable]:
        """Queue flag arrays, with names qualified by their instance path."""

    @abstractmethod
    def input_port_ids(self) -> set[int]: ...

    @abstractmethod
    def output_port_ids(self) -> set[int]: ...

    @abstractmethod
    def boolean_output_ids(self) -> set[int]: ...

    def describe(self) -> ModelFacts:
        return ModelFacts(
            query=self.name,
            queue_size=self.queue_size,
            domain_size=self.domain_size,
            variable_count=self.variable_count(),
            queue_variable_count=len(self.queue_variables()),
        )


class GraphModelProvider(ModelProvider):
    """Provides the model compiled from a pipeline graph."""

    def __init__(
        self,
        graph: ModuleGraph,
        name: str,
        queue_size: int,
        domain_size: int,
        shape: int | None = None,
    ) -> None:
        super().__init__(name, queue_size, domain_size)
        self.graph = graph
        self.shape = shape
        compiler = SmvCompiler(domain_size, queue_size)
        start = time.monotonic()
        self._model: SmvModel = compiler.compile(graph)
        self._text = self._model.serialize()
        self.generation_time_ms = (time.monotonic() - start) * 1000
        self._log = logger
        self._log.debug(
            "model_compiled",
            query=name,
            modules=self.module_count,
            generation_ms=round(self.generation_time_ms, 2),
        )

    @property
    def model(self) -> SmvModel:
        return self._model

    @property
    def module_count(self) -> int:
        return 1 + len(self._model.modules)

    @property
    def processor_count(self) -> int:
        return self.graph.count_nodes()

    def serialize(self) -> str:
        return self._text

    def variable_count(self) -> int:
        seen: set[tuple[str, str]] = set()
        self._collect_variables(self._model.main, "", seen)
        return len(seen)

    def _collect_variables(self, module: SmvModule, prefix: str, seen: set[tuple[str, str]]) -> None:
        for variable in self._model.declared_variables(module):
            qualified = prefix + variable.name
            seen.add((qualified, variable.type))
        for name, nested in self._model.nested_subgraphs(module).items():
            self._collect_variables(nested, prefix + name + ".", seen)

    def queue_variables(self) -> set[SmvVariable]:
        flags: set[SmvVariable] = set()
        self._collect_queue_flags(self._model.main, "", flags)
        return flags

    def _collect_queue_flags(self, module: SmvModule, prefix: str, flags: set[SmvVariable]) -> None:
        for variable in self._model.declared_variables(module):
            if variable.name.startswith(QUEUE_FLAG_PREFIX):
                flags.add(SmvVariable(prefix + variable.name, "boolean", variable.size))
        for name, nested in self._model.nested_subgraphs(module).items():
            self._collect_queue_flags(nested, prefix + name + ".", flags)

    def input_port_ids(self) -> set[int]:
        return self._port_ids(INPUT_VALUE_PREFIX)

    def output_port_ids(self) -> set[int]:
        return self._port_ids(OUTPUT_VALUE_PREFIX)

    def boolean_output_ids(self) -> set[int]:
        return {
            int(v.name[len(OUTPUT_VALUE_PREFIX):])
            for v in self._model.declared_variables()
            if v.name.startswith(OUTPUT_VALUE_PREFIX) and v.type == "boolean"
        }

    def _port_ids(self, prefix: str) -> set[int]:
        # Only the top-level module carries external ports
        return {
            int(v.name[len(prefix):])
            for v in self._model.declared_variables()
            if v.name.startswith(prefix)
        }

    def describe(self) -> ModelFacts:
        facts = super().describe()
        return facts.model_copy(
            update={
                "k": self.shape,
                "module_count": self.module_count,
                "processor_count": self.processor_count,
                "generation_time_ms": self.generation_time_ms,
            }
        )


class DummyModelProvider(ModelProvider):
    """A single counter, for checking that the checker itself runs."""

    NAME = "Dummy"

    def __init__(self, queue_size: int, domain_size: int) -> None:
        super().__init__(self.NAME, queue_size, domain_size)

    def serialize(self) -> str:
        return (
            "MODULE main\n"
            "VAR\n"
            f"  x : 0..{self.domain_size};\n"
            "INIT\n"
            "  x = 0;\n"
            "TRANS\n"
            "  next(x) = x + 1;\n"
        )

    def variable_count(self) -> int:
        return 1

    def queue_variables(self) -> set[SmvVariable]:
        return set()

    def input_port_ids(self) -> set[int]:
        return set()

    def output_port_ids(self) -> set[int]:
        return set()

    def boolean_output_ids(self) -> set[int]:
        return set()
