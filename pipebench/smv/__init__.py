"""
pipebench -- SMV Subsystem

Module graph primitives for stream-processing pipelines and the compiler
that turns them into NuSMV models.
"""

from pipebench.smv.compiler import SmvCompiler, SmvModel, SmvModule, SmvVariable
from pipebench.smv.functions import Function
from pipebench.smv.graph import (
    Apply,
    Connection,
    Constant,
    CountDecimate,
    Cumulate,
    ExternalPort,
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

__all__ = [
    "Apply",
    "Connection",
    "Constant",
    "CountDecimate",
    "Cumulate",
    "ExternalPort",
    "Filter",
    "Fork",
    "Function",
    "Group",
    "ModuleGraph",
    "Node",
    "Passthrough",
    "PortType",
    "SmvCompiler",
    "SmvModel",
    "SmvModule",
    "SmvVariable",
    "Trim",
    "Window",
]
