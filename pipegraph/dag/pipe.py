"""
Pipe Combinator

Sequential composite: runs a first node and feeds its result to a second node.
"""

import logging
from typing import Any, Iterator, Optional, TypeVar

from ..config import GraphSettings, get_settings
from ..errors import type_name
from .node import GraphNode, NodeLike, as_node, ensure_exclusive
from .typecheck import check_compatible, substitute

logger = logging.getLogger(__name__)

In = TypeVar("In")
Mid = TypeVar("Mid")
Out = TypeVar("Out")


class Pipe(GraphNode[In, Out]):
    """
    Composite node running `first`, then `second` on its result.

    The output type of `first` is checked against the input type of `second`
    when the pipe is built. Running the pipe calls each child exactly once,
    first then second; nothing is retained between calls and no error
    raised by a child is caught.

    Example usage:
        graph = Pipe(double, str)
        graph.run(5)  # "10"
    """

    def __init__(
        self,
        first: NodeLike[In, Mid],
        second: NodeLike[Mid, Out],
        settings: Optional[GraphSettings] = None,
    ):
        """
        Join two nodes end to end.

        Args:
            first: Node receiving the pipe's input
            second: Node receiving first's output
            settings: Composition settings (default: process-wide settings)

        Raises:
            TypeMismatchError: If first's output type does not feed second's input type
            ArityMismatchError: If both are fixed tuples of different lengths
            SharedNodeError: If first and second share a node object
        """
        settings = settings or get_settings()
        self.first: GraphNode[In, Mid] = as_node(first, settings)
        self.second: GraphNode[Mid, Out] = as_node(second, settings)
        ensure_exclusive((self.first, self.second))

        bindings = check_compatible(
            self.first.output_type,
            self.second.input_type,
            numeric_promotion=settings.numeric_promotion,
        )
        self.input_type = substitute(self.first.input_type, bindings)
        self.output_type = substitute(self.second.output_type, bindings)

        logger.debug(
            f"Piped {self.first!r} into {self.second!r}: "
            f"{type_name(self.input_type)} -> {type_name(self.output_type)}"
        )

    def run(self, value: In) -> Out:
        return self.second.run(self.first.run(value))

    def owned_objects(self) -> Iterator[Any]:
        yield self
        yield from self.first.owned_objects()
        yield from self.second.owned_objects()

    def __repr__(self) -> str:
        return f"Pipe({self.first!r}, {self.second!r})"


def pipe(
    first: NodeLike[In, Mid],
    second: NodeLike[Mid, Out],
    settings: Optional[GraphSettings] = None,
) -> Pipe[In, Out]:
    """Join two nodes end to end; see Pipe"""
    return Pipe(first, second, settings=settings)
