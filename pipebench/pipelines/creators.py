"""
pipebench -- Pipeline Creators

One function per benchmark pipeline. Each creator builds its nodes into
the graph it is given, wires them explicitly port by port, and returns
the entry and exit nodes together with the shape parameter it actually
used. A creator returns None when the pipeline makes no sense over the
graph's domain (e.g. it needs a constant the domain does not contain).
"""

from __future__ import annotations

from pipebench.pipelines.types import PipelineSection
from pipebench.smv.functions import Function
from pipebench.smv.graph import (
    Apply,
    Constant,
    CountDecimate,
    Cumulate,
    Filter,
    Fork,
    ModuleGraph,
    Passthrough,
    Trim,
    Window,
)

DEFAULT_SHAPE = 3
DEFAULT_DELAY = 1


def _effective(shape: int | None, default: int) -> int:
    return shape if shape is not None and shape > 0 else default


def passthrough(graph: ModuleGraph, shape: int | None = None) -> PipelineSection:
    node = Passthrough()
    graph.add(node)
    return PipelineSection(node, node)


def product(graph: ModuleGraph, shape: int | None = None) -> PipelineSection:
    node = Cumulate(Function.MULTIPLICATION)
    graph.add(node)
    return PipelineSection(node, node)


def product_1_k(graph: ModuleGraph, shape: int | None = None) -> PipelineSection:
    """Multiplies each event by the last event of rank 1, k+1, 2k+1, ..."""
    k = _effective(shape, DEFAULT_SHAPE)
    fork = Fork(2)
    mul = Apply(Function.MULTIPLICATION)
    dec = CountDecimate(k)
    graph.add(fork, mul, dec)
    graph.connect(fork, 0, mul, 0)
    graph.connect(fork, 1, dec, 0)
    graph.connect(dec, 0, mul, 1)
    return PipelineSection(fork, mul, k)


def product_window_k(graph: ModuleGraph, shape: int | None = None) -> PipelineSection:
    k = _effective(shape, DEFAULT_SHAPE)
    win = Window(Cumulate(Function.MULTIPLICATION), k)
    graph.add(win)
    return PipelineSection(win, win, k)


def sum_of_ones_window(graph: ModuleGraph, shape: int | None = None) -> PipelineSection | None:
    """Counts events, then multiplies that running count over a sliding window of width k."""
    # The domain must contain the constant 1
    if graph.domain_size < 2:
        return None
    k = _effective(shape, DEFAULT_SHAPE)
    one = Constant(1)
    total = Cumulate(Function.ADDITION)
    win = Window(Cumulate(Function.MULTIPLICATION), k)
    graph.add(one, total, win)
    graph.connect(one, 0, total, 0)
    graph.connect(total, 0, win, 0)
    return PipelineSection(one, win, k)


def sum_of_doubles(graph: ModuleGraph, shape: int | None = None) -> PipelineSection | None:
    # The domain must contain the constant 2
    if graph.domain_size < 3:
        return None
    fork = Fork(2)
    mul = Apply(Function.MULTIPLICATION)
    two = Constant(2)
    total = Cumulate(Function.ADDITION)
    graph.add(fork, mul, two, total)
    graph.connect(fork, 0, mul, 0)
    graph.connect(fork, 1, two, 0)
    graph.connect(two, 0, mul, 1)
    graph.connect(mul, 0, total, 0)
    return PipelineSection(fork, total)


def output_if_smaller_k(graph: ModuleGraph, shape: int | None = None) -> PipelineSection | None:
    """Lets events through as long as fewer than k+1 have been seen."""
    k = _effective(shape, DEFAULT_SHAPE)
    # The domain must contain k
    if graph.domain_size <= k:
        return None
    fork = Fork(3)
    filt = Filter()
    turn_k = Constant(k)
    turn_1 = Constant(1)
    count = Cumulate(Function.ADDITION)
    gte = Apply(Function.IS_GREATER_OR_EQUAL)
    graph.add(fork, filt, turn_k, turn_1, count, gte)
    graph.connect(fork, 0, filt, 0)
    graph.connect(fork, 1, turn_k, 0)
    graph.connect(fork, 2, turn_1, 0)
    graph.connect(turn_1, 0, count, 0)
    graph.connect(turn_k, 0, gte, 0)
    graph.connect(count, 0, gte, 1)
    graph.connect(gte, 0, filt, 1)
    return PipelineSection(fork, filt, k)


def window_sum(width: int):
    """Creator of a sliding sum of fixed width."""

    def create(graph: ModuleGraph, shape: int | None = None) -> PipelineSection:
        win = Window(Cumulate(Function.ADDITION), width)
        graph.add(win)
        return PipelineSection(win, win)

    create.__name__ = f"window_sum_{width}"
    return create


def trim_sum_2(graph: ModuleGraph, shape: int | None = None) -> PipelineSection:
    """Adds each event to its successor using a trimmed copy of the stream."""
    fork = Fork(2)
    trim1 = Trim(1)
    add1 = Apply(Function.ADDITION)
    graph.add(fork, trim1, add1)
    graph.connect(fork, 0, add1, 0)
    graph.connect(fork, 1, trim1, 0)
    graph.connect(trim1, 0, add1, 1)
    return PipelineSection(fork, add1)


def trim_sum_3(graph: ModuleGraph, shape: int | None = None) -> PipelineSection:
    """Adds each event to its two successors using two trimmed copies of the stream."""
    fork = Fork(3)
    trim1 = Trim(1)
    add1 = Apply(Function.ADDITION)
    trim2 = Trim(2)
    add2 = Apply(Function.ADDITION)
    graph.add(fork, trim1, add1, trim2, add2)
    graph.connect(fork, 0, add1, 0)
    graph.connect(fork, 1, trim1, 0)
    graph.connect(trim1, 0, add1, 1)
    graph.connect(fork, 2, trim2, 0)
    graph.connect(add1, 0, add2, 0)
    graph.connect(trim2, 0, add2, 1)
    return PipelineSection(fork, add2)


def delay(graph: ModuleGraph, shape: int | None = None) -> PipelineSection:
    k = _effective(shape, DEFAULT_DELAY)
    trim = Trim(k)
    graph.add(trim)
    return PipelineSection(trim, trim, k)
