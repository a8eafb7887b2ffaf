"""
pipebench -- SMV Compiler

Turns a ModuleGraph into NuSMV model text.

Layout of the generated model:
  - one MODULE per node, named <Kind>_<id>, parameterized by the value
    (inc_<j>) and fire flag (inb_<j>) of each of its inputs
  - each input j owns a bounded queue: qc<j> holds the values and qb<j>
    the occupancy flags; qb<j>[Q-1] is true exactly when the queue is full
  - every module exposes outc_<p> / outb_<p> (value / fire) per output
  - main declares the external inputs ic_<n> / ib_<n>, instantiates the
    top-level nodes as pr_<id>, and declares the external outputs
    oc_<n> / ob_<n>, where <n> is the pipe id

The ic_/oc_/qb naming is a contract with ModelProvider, which discovers
port ids and queue flags by scanning declared variables.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pipebench.errors import GraphError
from pipebench.smv.graph import (
    Apply,
    Constant,
    CountDecimate,
    Cumulate,
    Filter,
    Fork,
    Group,
    ModuleGraph,
    Node,
    Passthrough,
    PortType,
    Trim,
    Window,
)

INPUT_VALUE_PREFIX = "ic_"
INPUT_FIRE_PREFIX = "ib_"
OUTPUT_VALUE_PREFIX = "oc_"
OUTPUT_FIRE_PREFIX = "ob_"
QUEUE_FLAG_PREFIX = "qb"
QUEUE_VALUE_PREFIX = "qc"
INSTANCE_PREFIX = "pr_"


@dataclass(frozen=True)
class SmvVariable:
    """
    A declared SMV variable. `size` is the width of array variables
    (0 for scalars); `module` is set for instances of another module.
    """

    name: str
    type: str
    size: int = 0
    module: SmvModule | None = field(default=None, compare=False, hash=False)


@dataclass
class SmvModule:
    name: str
    parameters: list[str] = field(default_factory=list)
    variables: list[SmvVariable] = field(default_factory=list)
    defines: list[tuple[str, str]] = field(default_factory=list)
    assigns: list[tuple[str, str]] = field(default_factory=list)

    def variable(self, name: str, type_: str, size: int = 0, module: SmvModule | None = None) -> None:
        self.variables.append(SmvVariable(name, type_, size, module))

    def define(self, name: str, expression: str) -> None:
        self.defines.append((name, expression))

    def assign(self, target: str, expression: str) -> None:
        self.assigns.append((target, expression))

    def render(self) -> str:
        header = f"MODULE {self.name}"
        if self.parameters:
            header += f"({', '.join(self.parameters)})"
        lines = [header]
        if self.variables:
            lines.append("VAR")
            lines.extend(f"  {v.name} : {v.type};" for v in self.variables)
        if self.defines:
            lines.append("DEFINE")
            lines.extend(f"  {name} := {expr};" for name, expr in self.defines)
        if self.assigns:
            lines.append("ASSIGN")
            lines.extend(f"  {target} := {expr};" for target, expr in self.assigns)
        return "\n".join(lines) + "\n"


@dataclass
class SmvModel:
    """A compiled model: `main` plus one module per node."""

    main: SmvModule
    modules: list[SmvModule]

    def serialize(self) -> str:
        return "\n".join(m.render() for m in [self.main, *self.modules])

    def declared_variables(self, module: SmvModule | None = None) -> list[SmvVariable]:
        return list((module or self.main).variables)

    def nested_subgraphs(self, module: SmvModule | None = None) -> dict[str, SmvModule]:
        return {
            v.name: v.module
            for v in (module or self.main).variables
            if v.module is not None
        }


class SmvCompiler:
    """Compiles module graphs over a fixed domain and queue capacity."""

    def __init__(self, domain_size: int, queue_size: int) -> None:
        self._domain_size = domain_size
        self._queue_size = queue_size
        self._modules: list[SmvModule] = []

    def compile(self, graph: ModuleGraph) -> SmvModel:
        graph.validate()
        self._modules = []
        main = SmvModule("main")
        for external in graph.inputs:
            value_type = self._type_of(external.node.input_type(external.port))
            main.variable(f"{INPUT_VALUE_PREFIX}{external.pipe_id}", value_type)
            main.variable(f"{INPUT_FIRE_PREFIX}{external.pipe_id}", "boolean")
        external_inputs = {
            (e.node.id, e.port): (
                f"{INPUT_VALUE_PREFIX}{e.pipe_id}",
                f"{INPUT_FIRE_PREFIX}{e.pipe_id}",
            )
            for e in graph.inputs
        }
        self._instantiate(graph, main, external_inputs)
        for external in graph.outputs:
            value_type = self._type_of(external.node.output_type(external.port))
            value = f"{OUTPUT_VALUE_PREFIX}{external.pipe_id}"
            fire = f"{OUTPUT_FIRE_PREFIX}{external.pipe_id}"
            main.variable(value, value_type)
            main.variable(fire, "boolean")
            instance = f"{INSTANCE_PREFIX}{external.node.id}"
            main.assign(value, f"{instance}.outc_{external.port}")
            main.assign(fire, f"{instance}.outb_{external.port}")
        return SmvModel(main=main, modules=list(self._modules))

    # ─── Instantiation ───────────────────────────────────────────

    def _instantiate(
        self,
        graph: ModuleGraph,
        owner: SmvModule,
        bound: dict[tuple[int, int], tuple[str, str]],
    ) -> None:
        """Declare one instance per node of `graph` inside `owner`."""
        for node in graph.nodes:
            module = self._compile_node(node)
            args: list[str] = []
            for port in range(node.input_arity):
                connection = graph.incoming(node, port)
                if connection is not None:
                    source = f"{INSTANCE_PREFIX}{connection.source.id}"
                    args.append(f"{source}.outc_{connection.source_port}")
                    args.append(f"{source}.outb_{connection.source_port}")
                elif (node.id, port) in bound:
                    args.extend(bound[(node.id, port)])
                else:
                    raise GraphError(f"Input {port} of {node.name} is not connected")
            owner.variable(
                f"{INSTANCE_PREFIX}{node.id}",
                f"{module.name}({', '.join(args)})",
                module=module,
            )

    def _compile_node(self, node: Node) -> SmvModule:
        module = SmvModule(node.name)
        for port in range(node.input_arity):
            module.parameters.extend([f"inc_{port}", f"inb_{port}"])
        if isinstance(node, Group):
            self._compile_group(node, module)
        else:
            self._compile_queues(node, module)
            self._compile_behaviour(node, module)
        self._modules.append(module)
        return module

    def _compile_group(self, group: Group, module: SmvModule) -> None:
        bound = {
            (inner.id, inner_port): (f"inc_{index}", f"inb_{index}")
            for index, (inner, inner_port) in group.input_bindings.items()
        }
        self._instantiate(group.graph, module, bound)
        for index in range(group.output_arity):
            inner, inner_port = group.output_bindings[index]
            instance = f"{INSTANCE_PREFIX}{inner.id}"
            module.define(f"outc_{index}", f"{instance}.outc_{inner_port}")
            module.define(f"outb_{index}", f"{instance}.outb_{inner_port}")

    # ─── Queues ──────────────────────────────────────────────────

    def _compile_queues(self, node: Node, module: SmvModule) -> None:
        q = self._queue_size
        for j in range(node.input_arity):
            flags = f"{QUEUE_FLAG_PREFIX}{j}"
            values = f"{QUEUE_VALUE_PREFIX}{j}"
            value_type = self._type_of(node.input_type(j))
            module.variable(values, f"array 0..{q - 1} of {value_type}", size=q)
            module.variable(flags, f"array 0..{q - 1} of boolean", size=q)
            module.define(f"avail_{j}", f"{flags}[0] | inb_{j}")
            module.define(f"front_{j}", f"{flags}[0] ? {values}[0] : inc_{j}")
            initial = "FALSE" if node.input_type(j) is PortType.BOOLEAN else "0"
            for i in range(q):
                module.assign(f"init({flags}[{i}])", "FALSE")
                module.assign(f"init({values}[{i}])", initial)
                module.assign(f"next({flags}[{i}])", self._next_flag(j, i))
                module.assign(f"next({values}[{i}])", self._next_value(j, i))
        if node.input_arity:
            module.define("ready", " & ".join(f"avail_{j}" for j in range(node.input_arity)))
        else:
            module.define("ready", "TRUE")

    def _next_flag(self, j: int, i: int) -> str:
        flags = f"{QUEUE_FLAG_PREFIX}{j}"
        after = f"{flags}[{i + 1}]" if i + 1 < self._queue_size else "FALSE"
        before = f"{flags}[{i - 1}]" if i > 0 else "TRUE"
        return (
            f"case ready & !inb_{j} : {after}; "
            f"!ready & inb_{j} : {flags}[{i}] | {before}; "
            f"TRUE : {flags}[{i}]; esac"
        )

    def _next_value(self, j: int, i: int) -> str:
        flags = f"{QUEUE_FLAG_PREFIX}{j}"
        values = f"{QUEUE_VALUE_PREFIX}{j}"
        here = f"{values}[{i}]"
        if i + 1 < self._queue_size:
            shifted = f"{values}[{i + 1}]"
            on_both = f"{flags}[{i + 1}] ? {shifted} : ({flags}[{i}] ? inc_{j} : {here})"
        else:
            shifted = here
            on_both = f"{flags}[{i}] ? inc_{j} : {here}"
        empty_slot = f"!{flags}[{i}]" + (f" & {flags}[{i - 1}]" if i > 0 else "")
        return (
            f"case ready & inb_{j} : {on_both}; "
            f"ready & !inb_{j} : {shifted}; "
            f"inb_{j} & {empty_slot} : inc_{j}; "
            f"TRUE : {here}; esac"
        )

    # ─── Node semantics ──────────────────────────────────────────

    def _compile_behaviour(self, node: Node, module: SmvModule) -> None:
        d = self._domain_size
        if isinstance(node, (Passthrough, Fork)):
            for p in range(node.output_arity):
                module.define(f"outc_{p}", "front_0")
                module.define(f"outb_{p}", "ready")
        elif isinstance(node, Constant):
            module.define("outc_0", self._literal(node.value))
            module.define("outb_0", "ready")
        elif isinstance(node, Apply):
            args = [f"front_{j}" for j in range(node.input_arity)]
            module.define("outc_0", node.function.render(args, d))
            module.define("outb_0", "ready")
        elif isinstance(node, Filter):
            module.define("outc_0", "front_0")
            module.define("outb_0", "ready & front_1")
        elif isinstance(node, Trim):
            n = node.count
            module.variable("cnt", f"0..{n}")
            module.assign("init(cnt)", "0")
            module.assign("next(cnt)", f"ready & cnt < {n} ? cnt + 1 : cnt")
            module.define("outc_0", "front_0")
            module.define("outb_0", f"ready & cnt = {n}")
        elif isinstance(node, CountDecimate):
            n = node.interval
            module.variable("cnt", f"0..{n - 1}")
            module.assign("init(cnt)", "0")
            module.assign("next(cnt)", f"ready ? (cnt + 1) mod {n} : cnt")
            module.define("outc_0", "front_0")
            module.define("outb_0", "ready & cnt = 0")
        elif isinstance(node, Cumulate):
            module.variable("acc", self._type_of(PortType.INTEGER))
            module.variable("started", "boolean")
            module.assign("init(acc)", "0")
            module.assign("init(started)", "FALSE")
            folded = node.function.render(["acc", "front_0"], d)
            module.define("outc_0", f"started ? {folded} : front_0")
            module.define("outb_0", "ready")
            module.assign("next(acc)", "ready ? outc_0 : acc")
            module.assign("next(started)", "started | ready")
        elif isinstance(node, Window):
            self._compile_window(node, module)
        else:
            raise GraphError(f"No SMV semantics for {node.kind}")

    def _compile_window(self, node: Window, module: SmvModule) -> None:
        w = node.width
        if w == 1:
            module.define("outc_0", "front_0")
            module.define("outb_0", "ready")
            return
        last = w - 1
        module.variable("win", f"array 0..{w - 2} of {self._type_of(PortType.INTEGER)}", size=w - 1)
        module.variable("cnt", f"0..{last}")
        module.assign("init(cnt)", "0")
        module.assign("next(cnt)", f"ready & cnt < {last} ? cnt + 1 : cnt")
        for i in range(w - 1):
            shifted = f"win[{i + 1}]" if i + 1 < w - 1 else "front_0"
            module.assign(f"init(win[{i}])", "0")
            module.assign(
                f"next(win[{i}])",
                f"case ready & cnt = {last} : {shifted}; "
                f"ready & cnt = {i} : front_0; "
                f"TRUE : win[{i}]; esac",
            )
        folded = "win[0]"
        for operand in [f"win[{i}]" for i in range(1, w - 1)] + ["front_0"]:
            folded = node.processor.function.render([folded, operand], self._domain_size)
        module.define("outc_0", folded)
        module.define("outb_0", f"ready & cnt = {last}")

    # ─── Helpers ─────────────────────────────────────────────────

    def _type_of(self, port_type: PortType) -> str:
        if port_type is PortType.BOOLEAN:
            return "boolean"
        return f"0..{self._domain_size - 1}"

    def _literal(self, value: int | bool) -> str:
        if isinstance(value, bool):
            return "TRUE" if value else "FALSE"
        if not 0 <= value < self._domain_size:
            raise GraphError(f"Constant {value} is outside the domain 0..{self._domain_size - 1}")
        return str(value)
