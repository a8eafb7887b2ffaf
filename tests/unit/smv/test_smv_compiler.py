"""
Unit tests for the SMV compiler.

Checks the naming contract of the generated model (ic_/ib_/oc_/ob_ in
main, pr_<id> instances, qb<j>/qc<j> queues) and the rendering of node
semantics.
"""

from __future__ import annotations

import pytest

from pipebench.errors import GraphError
from pipebench.smv.compiler import SmvCompiler
from pipebench.smv.functions import Function
from pipebench.smv.graph import (
    Apply,
    Constant,
    Cumulate,
    Fork,
    Group,
    ModuleGraph,
    Passthrough,
    Trim,
    Window,
)


def _single(node, domain_size: int = 3, queue_size: int = 2):
    graph = ModuleGraph(domain_size, queue_size)
    graph.add(node)
    pipe_in = graph.expose_input(node)
    pipe_out = graph.expose_output(node)
    return graph, pipe_in, pipe_out


class TestFunctions:
    def test_arithmetic_wraps_around_domain(self):
        assert Function.ADDITION.render(["a", "b"], 4) == "(a + b) mod 4"
        assert Function.MULTIPLICATION.render(["a", "b"], 4) == "(a * b) mod 4"

    def test_comparisons(self):
        assert Function.IS_GREATER_OR_EQUAL.render(["a", "b"], 4) == "a >= b"
        assert Function.EQUALS.render(["a", "b"], 4) == "a = b"
        assert Function.IS_EVEN.render(["a"], 4) == "a mod 2 = 0"

    def test_wrong_operand_count(self):
        with pytest.raises(ValueError):
            Function.IS_EVEN.render(["a", "b"], 4)


class TestMainModule:
    def test_declares_external_ports_and_instance(self):
        node = Passthrough()
        graph, pipe_in, pipe_out = _single(node)
        model = SmvCompiler(3, 2).compile(graph)
        names = [v.name for v in model.declared_variables()]
        assert names == [
            f"ic_{pipe_in}",
            f"ib_{pipe_in}",
            f"pr_{node.id}",
            f"oc_{pipe_out}",
            f"ob_{pipe_out}",
        ]

    def test_value_ports_range_over_domain(self):
        graph, pipe_in, pipe_out = _single(Passthrough(), domain_size=4)
        text = SmvCompiler(4, 2).compile(graph).serialize()
        assert f"ic_{pipe_in} : 0..3;" in text
        assert f"oc_{pipe_out} : 0..3;" in text

    def test_outputs_are_assigned_from_instances(self):
        node = Passthrough()
        graph, _, pipe_out = _single(node)
        text = SmvCompiler(3, 2).compile(graph).serialize()
        assert f"oc_{pipe_out} := pr_{node.id}.outc_0;" in text
        assert f"ob_{pipe_out} := pr_{node.id}.outb_0;" in text

    def test_main_is_serialized_first(self):
        graph, _, _ = _single(Passthrough())
        assert SmvCompiler(3, 2).compile(graph).serialize().startswith("MODULE main\n")

    def test_instance_exposes_its_module(self):
        node = Passthrough()
        graph, _, _ = _single(node)
        model = SmvCompiler(3, 2).compile(graph)
        nested = model.nested_subgraphs()
        assert list(nested) == [f"pr_{node.id}"]
        assert nested[f"pr_{node.id}"].name == node.name


class TestNodeModules:
    def test_each_input_owns_a_bounded_queue(self):
        node = Apply(Function.ADDITION)
        graph = ModuleGraph(3, 2)
        fork = Fork(2)
        graph.add(fork, node)
        graph.connect(fork, 0, node, 0)
        graph.connect(fork, 1, node, 1)
        graph.expose_input(fork)
        graph.expose_output(node)
        model = SmvCompiler(3, 2).compile(graph)
        module = model.nested_subgraphs()[f"pr_{node.id}"]
        queues = {v.name: v for v in model.declared_variables(module)}
        assert queues["qb0"].size == 2
        assert queues["qb1"].type == "array 0..1 of boolean"
        assert queues["qc1"].type == "array 0..1 of 0..2"

    def test_connected_inputs_reference_upstream_outputs(self):
        graph = ModuleGraph(3, 2)
        first, second = Passthrough(), Trim(1)
        graph.add(first, second)
        graph.connect(first, 0, second, 0)
        graph.expose_input(first)
        graph.expose_output(second)
        text = SmvCompiler(3, 2).compile(graph).serialize()
        assert f"pr_{second.id} : Trim_{second.id}(pr_{first.id}.outc_0, pr_{first.id}.outb_0);" in text

    def test_constant_outside_domain_is_rejected(self):
        graph = ModuleGraph(3, 2)
        const = Constant(5)
        graph.add(const)
        graph.expose_input(const)
        graph.expose_output(const)
        with pytest.raises(GraphError):
            SmvCompiler(3, 2).compile(graph)

    def test_window_folds_its_processor_function(self):
        win = Window(Cumulate(Function.ADDITION), 3)
        graph, _, _ = _single(win)
        text = SmvCompiler(3, 2).compile(graph).serialize()
        assert "outc_0 := ((win[0] + win[1]) mod 3 + front_0) mod 3;" in text
        assert "outb_0 := ready & cnt = 2;" in text

    def test_group_defines_outputs_from_inner_exit(self):
        group = Group(3, 2)
        inner = Passthrough()
        group.graph.add(inner)
        group.associate_input(0, inner)
        group.associate_output(0, inner)
        graph, _, _ = _single(group)
        text = SmvCompiler(3, 2).compile(graph).serialize()
        assert f"MODULE Group_{group.id}(inc_0, inb_0)" in text
        assert f"pr_{inner.id} : Passthrough_{inner.id}(inc_0, inb_0);" in text
        assert f"outc_0 := pr_{inner.id}.outc_0;" in text

    def test_compiling_twice_is_byte_identical(self):
        graph, _, _ = _single(Cumulate(Function.MULTIPLICATION))
        compiler = SmvCompiler(3, 2)
        assert compiler.compile(graph).serialize() == compiler.compile(graph).serialize()
