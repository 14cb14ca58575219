"""
DAG Module

Node contract, Pipe and Parallel composites, and the graph builder.
"""

from .node import Node, NodeLike, GraphNode, FunctionNode, NodeAdapter, as_node
from .pipe import Pipe, pipe
from .parallel import Parallel, parallel
from .builder import GraphBuilder, Stage, graph

__all__ = [
    "Node",
    "NodeLike",
    "GraphNode",
    "FunctionNode",
    "NodeAdapter",
    "as_node",
    "Pipe",
    "pipe",
    "Parallel",
    "parallel",
    "GraphBuilder",
    "Stage",
    "graph",
]
