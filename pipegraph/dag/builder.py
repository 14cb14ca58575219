"""
Graph Builder

Builds a graph from an ordered list of stages.
Each stage is one node or a group of nodes run as a Parallel stage; the stages
are folded left to right into nested Pipe composites.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple, Union
import logging

from ..config import GraphSettings, get_settings
from ..errors import ArityMismatchError, BuilderError, CompositionError, type_name
from .node import GraphNode, NodeLike, as_node
from .parallel import Parallel
from .pipe import Pipe

logger = logging.getLogger(__name__)

# A graph() directive: one node, or a tuple of nodes forming a parallel stage
Directive = Union[NodeLike[Any, Any], Tuple[NodeLike[Any, Any], ...]]


@dataclass
class Stage:
    """
    One entry of the stage list.

    Attributes:
        nodes: Nodes of this stage, in positional order
        grouped: True for a parallel group, False for a single node
    """
    nodes: Tuple[Any, ...]
    grouped: bool = False

    def describe(self) -> str:
        if self.grouped:
            return f"parallel group of {len(self.nodes)}"
        return "single node"


class GraphBuilder:
    """
    Builds a graph from stages added in order.

    The builder:
    1. Collects stages via then() and parallel()
    2. Seeds the graph with the first stage (a Parallel if it is a group)
    3. Pipes the running graph into each following stage

    The result is identical to nesting Pipe/Parallel by hand:
    then(a).parallel(b, c).then(d) builds Pipe(Pipe(a, Parallel(b, c)), d).
    Types are checked at each fold step exactly as Pipe checks them.

    Example usage:
        graph = (
            GraphBuilder()
            .then(Duplicate())
            .parallel(len, parse_int)
            .build()
        )
        graph.run("42")  # (2, 42)
    """

    def __init__(self, settings: Optional[GraphSettings] = None):
        """
        Initialize an empty builder.

        Args:
            settings: Composition settings (default: process-wide settings)
        """
        self.settings = settings or get_settings()
        self.stages: List[Stage] = []
        self._built = False

    def then(self, node: NodeLike[Any, Any]) -> "GraphBuilder":
        """
        Add a single-node stage.

        Args:
            node: Node receiving the previous stage's output

        Returns:
            self, for chaining
        """
        self._check_open()
        self.stages.append(Stage(nodes=(node,)))
        return self

    def parallel(self, *nodes: NodeLike[Any, Any]) -> "GraphBuilder":
        """
        Add a parallel stage.

        Args:
            *nodes: Two or more nodes, one per component of the previous stage's tuple output

        Returns:
            self, for chaining

        Raises:
            ArityMismatchError: If fewer than two nodes are given
        """
        self._check_open()
        if len(nodes) < 2:
            raise ArityMismatchError(
                expected=2,
                actual=len(nodes),
                message=f"a parallel stage needs at least two nodes, got {len(nodes)}",
            )
        self.stages.append(Stage(nodes=tuple(nodes), grouped=True))
        return self

    def build(self) -> GraphNode:
        """
        Fold the stages into one graph.

        Returns:
            Root node of the graph

        Raises:
            BuilderError: If no stages were added or the builder was already built
            CompositionError: If two consecutive stages do not compose
        """
        self._check_open()
        if not self.stages:
            raise BuilderError("cannot build a graph with no stages")

        logger.debug(f"Building graph from {len(self.stages)} stages...")

        graph = self._stage_node(self.stages[0])
        for index, stage in enumerate(self.stages[1:], start=2):
            try:
                graph = Pipe(graph, self._stage_node(stage), settings=self.settings)
            except CompositionError as e:
                logger.error(f"Failed to add stage {index} ({stage.describe()}): {e}")
                raise
            logger.debug(f"Added stage {index} ({stage.describe()})")

        self._built = True
        logger.info(
            f"Graph built: {len(self.stages)} stages, "
            f"{type_name(graph.input_type)} -> {type_name(graph.output_type)}"
        )
        return graph

    def _stage_node(self, stage: Stage) -> GraphNode:
        if stage.grouped:
            return Parallel(*stage.nodes, settings=self.settings)
        return as_node(stage.nodes[0], self.settings)

    def _check_open(self) -> None:
        if self._built:
            raise BuilderError("builder already built a graph; its nodes belong to that graph")

    def __len__(self) -> int:
        return len(self.stages)


def graph(*directives: Directive, settings: Optional[GraphSettings] = None) -> GraphNode:
    """
    Build a graph from directives in one call.

    A tuple directive is a parallel group; anything else is a single node.

        graph(double, str, str.encode)
        graph(Duplicate(), (len, parse_int))

    Args:
        *directives: Stages in order
        settings: Composition settings (default: process-wide settings)

    Returns:
        Root node of the graph
    """
    builder = GraphBuilder(settings)
    for directive in directives:
        if isinstance(directive, tuple):
            builder.parallel(*directive)
        else:
            builder.then(directive)
    return builder.build()
