"""
Pipegraph

Typed processing pipelines built from small nodes.
Nodes are joined sequentially with Pipe and fanned out over tuples with
Parallel; a graph is just the outermost composite node.
"""

from .config import ConfigLoader, GraphSettings, configure, get_settings, setup_logging
from .dag import (
    FunctionNode,
    GraphBuilder,
    GraphNode,
    Node,
    NodeAdapter,
    Parallel,
    Pipe,
    as_node,
    graph,
    parallel,
    pipe,
)
from .errors import (
    ArityMismatchError,
    BuilderError,
    CompositionError,
    NodeDefinitionError,
    PipegraphError,
    SharedNodeError,
    TypeMismatchError,
)
from .nodes import Duplicate, Identity

__version__ = "0.1.0"

__all__ = [
    "ArityMismatchError",
    "BuilderError",
    "CompositionError",
    "ConfigLoader",
    "Duplicate",
    "FunctionNode",
    "GraphBuilder",
    "GraphNode",
    "GraphSettings",
    "Identity",
    "Node",
    "NodeAdapter",
    "NodeDefinitionError",
    "Parallel",
    "Pipe",
    "PipegraphError",
    "SharedNodeError",
    "TypeMismatchError",
    "as_node",
    "configure",
    "get_settings",
    "graph",
    "parallel",
    "pipe",
    "setup_logging",
]
