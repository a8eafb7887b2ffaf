"""
pipebench -- Module Graph Primitives

Typed stream-processing nodes wired into a directed, port-indexed graph.
Only the structure is modelled here; the SMV compiler gives each node
kind its semantics.

Node ids and pipe ids come from process-wide counters, so building the
same pipeline twice yields two graphs whose SMV variables have different
names. This is why pipelines are cached by configuration.
"""

from __future__ import annotations

import enum
import itertools
from dataclasses import dataclass
from typing import ClassVar, Sequence

from pipebench.errors import GraphError
from pipebench.smv.functions import Function

_node_ids = itertools.count(1)
_pipe_ids = itertools.count()


class PortType(enum.StrEnum):
    INTEGER = "integer"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class Connection:
    source: Node
    source_port: int
    destination: Node
    destination_port: int


@dataclass(frozen=True)
class ExternalPort:
    """A top-level input or output of a graph, identified by its pipe id."""

    pipe_id: int
    node: Node
    port: int


# ─── Nodes ───────────────────────────────────────────────────────


class Node:
    """Base class of every module in a pipeline."""

    kind: ClassVar[str] = "Node"

    def __init__(
        self,
        input_types: Sequence[PortType],
        output_types: Sequence[PortType],
    ) -> None:
        self.id = next(_node_ids)
        self._input_types = tuple(input_types)
        self._output_types = tuple(output_types)

    @property
    def name(self) -> str:
        return f"{self.kind}_{self.id}"

    @property
    def input_arity(self) -> int:
        return len(self._input_types)

    @property
    def output_arity(self) -> int:
        return len(self._output_types)

    def input_type(self, port: int) -> PortType:
        self._check_port(port, self.input_arity, "input")
        return self._input_types[port]

    def output_type(self, port: int) -> PortType:
        self._check_port(port, self.output_arity, "output")
        return self._output_types[port]

    def children(self) -> list[Node]:
        """Nodes nested inside this one (window processors, group contents)."""
        return []

    def _check_port(self, port: int, arity: int, direction: str) -> None:
        if not 0 <= port < arity:
            raise GraphError(f"{self.name} has no {direction} port {port} (arity {arity})")

    def __repr__(self) -> str:
        return f"<{self.name}>"


class Passthrough(Node):
    kind = "Passthrough"

    def __init__(self, port_type: PortType = PortType.INTEGER) -> None:
        super().__init__([port_type], [port_type])


class Fork(Node):
    kind = "Fork"

    def __init__(self, arity: int = 2, port_type: PortType = PortType.INTEGER) -> None:
        if arity < 1:
            raise GraphError("A fork needs at least one output")
        super().__init__([port_type], [port_type] * arity)


class Trim(Node):
    """Drops the first `count` events, then lets everything through."""

    kind = "Trim"

    def __init__(self, count: int, port_type: PortType = PortType.INTEGER) -> None:
        if count < 0:
            raise GraphError("Trim count must be non-negative")
        super().__init__([port_type], [port_type])
        self.count = count


class CountDecimate(Node):
    """Outputs one event every `interval` events, starting with the first."""

    kind = "CountDecimate"

    def __init__(self, interval: int, port_type: PortType = PortType.INTEGER) -> None:
        if interval < 1:
            raise GraphError("Decimation interval must be positive")
        super().__init__([port_type], [port_type])
        self.interval = interval


class Filter(Node):
    """Lets input 0 through when the boolean on input 1 is true."""

    kind = "Filter"

    def __init__(self, port_type: PortType = PortType.INTEGER) -> None:
        super().__init__([port_type, PortType.BOOLEAN], [port_type])


class Constant(Node):
    """Turns every incoming event into the same constant value."""

    kind = "Constant"

    def __init__(self, value: int | bool, input_type: PortType = PortType.INTEGER) -> None:
        output_type = PortType.BOOLEAN if isinstance(value, bool) else PortType.INTEGER
        super().__init__([input_type], [output_type])
        self.value = value


class Apply(Node):
    """Applies a unary or binary function to one event of each input."""

    kind = "Apply"

    def __init__(self, function: Function, input_type: PortType = PortType.INTEGER) -> None:
        output_type = PortType.BOOLEAN if function.returns_boolean else PortType.INTEGER
        super().__init__([input_type] * function.arity, [output_type])
        self.function = function


class Cumulate(Node):
    """Outputs the running fold of its input with a binary function."""

    kind = "Cumulate"

    def __init__(self, function: Function) -> None:
        if function.arity != 2 or function.returns_boolean:
            raise GraphError(f"Cannot cumulate with {function.value}")
        super().__init__([PortType.INTEGER], [PortType.INTEGER])
        self.function = function


class Window(Node):
    """Runs a cumulative processor over each sliding window of `width` events."""

    kind = "Window"

    def __init__(self, processor: Cumulate, width: int) -> None:
        if not isinstance(processor, Cumulate):
            raise GraphError("Only cumulative processors can be windowed")
        if width < 1:
            raise GraphError("Window width must be positive")
        super().__init__([PortType.INTEGER], [PortType.INTEGER])
        self.processor = processor
        self.width = width

    def children(self) -> list[Node]:
        return [self.processor]


class Group(Node):
    """
    A sub-pipeline encapsulated as a single node.

    The group owns its own ModuleGraph. Its ports are associated with ports
    of inner nodes; their types follow the associated inner ports.
    """

    kind = "Group"

    def __init__(
        self,
        domain_size: int,
        queue_size: int,
        inputs: int = 1,
        outputs: int = 1,
    ) -> None:
        super().__init__([PortType.INTEGER] * inputs, [PortType.INTEGER] * outputs)
        self.graph = ModuleGraph(domain_size, queue_size)
        self.input_bindings: dict[int, tuple[Node, int]] = {}
        self.output_bindings: dict[int, tuple[Node, int]] = {}

    def associate_input(self, index: int, node: Node, port: int = 0) -> None:
        self._check_port(index, self.input_arity, "input")
        if index in self.input_bindings:
            raise GraphError(f"{self.name} input {index} is already associated")
        self.graph._bind_input(node, port, self)
        self.input_bindings[index] = (node, port)

    def associate_output(self, index: int, node: Node, port: int = 0) -> None:
        self._check_port(index, self.output_arity, "output")
        if index in self.output_bindings:
            raise GraphError(f"{self.name} output {index} is already associated")
        self.graph._bind_output(node, port, self)
        self.output_bindings[index] = (node, port)

    def input_type(self, port: int) -> PortType:
        self._check_port(port, self.input_arity, "input")
        if port not in self.input_bindings:
            return super().input_type(port)
        node, inner = self.input_bindings[port]
        return node.input_type(inner)

    def output_type(self, port: int) -> PortType:
        self._check_port(port, self.output_arity, "output")
        if port not in self.output_bindings:
            return super().output_type(port)
        node, inner = self.output_bindings[port]
        return node.output_type(inner)

    def children(self) -> list[Node]:
        return list(self.graph.nodes)


# ─── Graph ───────────────────────────────────────────────────────


class ModuleGraph:
    """
    A directed multigraph of nodes over a shared value domain 0..domain_size-1.

    Every input port must be fed exactly once (by a connection, an external
    input, or a group association) and every output port may feed at most
    one consumer; use a Fork to duplicate a stream.
    """

    def __init__(self, domain_size: int, queue_size: int) -> None:
        if domain_size < 1:
            raise GraphError("Domain size must be positive")
        if queue_size < 1:
            raise GraphError("Queue size must be positive")
        self.domain_size = domain_size
        self.queue_size = queue_size
        self.nodes: list[Node] = []
        self.connections: list[Connection] = []
        self.inputs: list[ExternalPort] = []
        self.outputs: list[ExternalPort] = []
        self._bound_inputs: dict[tuple[int, int], object] = {}
        self._bound_outputs: dict[tuple[int, int], object] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def add(self, *nodes: Node) -> None:
        self._check_mutable()
        for node in nodes:
            if node in self.nodes:
                raise GraphError(f"{node.name} is already part of the graph")
            self.nodes.append(node)

    def connect(
        self,
        source: Node,
        source_port: int,
        destination: Node,
        destination_port: int,
    ) -> Connection:
        """Wire output `source_port` of `source` to input `destination_port` of `destination`."""
        self._check_mutable()
        self._check_member(source)
        self._check_member(destination)
        source_type = source.output_type(source_port)
        destination_type = destination.input_type(destination_port)
        if source_type != destination_type:
            raise GraphError(
                f"Cannot connect {source.name}:{source_port} ({source_type}) "
                f"to {destination.name}:{destination_port} ({destination_type})"
            )
        if (destination.id, destination_port) in self._bound_inputs:
            raise GraphError(f"Input {destination_port} of {destination.name} is already connected")
        connection = Connection(source, source_port, destination, destination_port)
        self._bind_output(source, source_port, connection)
        self._bind_input(destination, destination_port, connection)
        self.connections.append(connection)
        return connection

    def expose_input(self, node: Node, port: int = 0) -> int:
        """Make an input port of `node` an external input of the graph. Returns its pipe id."""
        self._check_mutable()
        node.input_type(port)
        external = ExternalPort(next(_pipe_ids), node, port)
        self._bind_input(node, port, external)
        self.inputs.append(external)
        return external.pipe_id

    def expose_output(self, node: Node, port: int = 0) -> int:
        """Make an output port of `node` an external output of the graph. Returns its pipe id."""
        self._check_mutable()
        node.output_type(port)
        external = ExternalPort(next(_pipe_ids), node, port)
        self._bind_output(node, port, external)
        self.outputs.append(external)
        return external.pipe_id

    def incoming(self, node: Node, port: int) -> Connection | None:
        """The connection feeding an input port, if it is fed by another node."""
        binding = self._bound_inputs.get((node.id, port))
        return binding if isinstance(binding, Connection) else None

    def validate(self) -> None:
        """Check that every input port of every node is fed, recursively."""
        for node in self.nodes:
            for port in range(node.input_arity):
                if (node.id, port) not in self._bound_inputs:
                    raise GraphError(f"Input {port} of {node.name} is not connected")
            if isinstance(node, Group):
                for index in range(node.input_arity):
                    if index not in node.input_bindings:
                        raise GraphError(f"Input {index} of {node.name} is not associated")
                for index in range(node.output_arity):
                    if index not in node.output_bindings:
                        raise GraphError(f"Output {index} of {node.name} is not associated")
                node.graph.validate()

    def freeze(self) -> None:
        """Forbid any further mutation of this graph and of its groups."""
        self._frozen = True
        for node in self.nodes:
            if isinstance(node, Group):
                node.graph.freeze()

    def count_nodes(self) -> int:
        """Number of processors, counting nested ones."""

        def _count(node: Node) -> int:
            return 1 + sum(_count(child) for child in node.children())

        return sum(_count(node) for node in self.nodes)

    # ─── Internal ────────────────────────────────────────────────

    def _check_mutable(self) -> None:
        if self._frozen:
            raise GraphError("Cannot modify a frozen module graph")

    def _check_member(self, node: Node) -> None:
        if node not in self.nodes:
            raise GraphError(f"{node.name} is not part of the graph")

    def _bind_input(self, node: Node, port: int, binding: object) -> None:
        self._check_mutable()
        self._check_member(node)
        node.input_type(port)
        key = (node.id, port)
        if key in self._bound_inputs:
            raise GraphError(f"Input {port} of {node.name} is already connected")
        self._bound_inputs[key] = binding

    def _bind_output(self, node: Node, port: int, binding: object) -> None:
        self._check_mutable()
        self._check_member(node)
        node.output_type(port)
        key = (node.id, port)
        if key in self._bound_outputs:
            raise GraphError(f"Output {port} of {node.name} is already connected")
        self._bound_outputs[key] = binding
