"""
Tuple Combinator

Composite node that routes each component of a tuple input to the node at the
same position and collects the results into a tuple of the same length.

One class covers every arity. The parallel() factory carries typing overloads
for arities 1 through 8 so static checkers see the exact tuple types; larger
stages work at run time and are typed as tuples of Any.
"""

import logging
from typing import Any, Iterator, Optional, Tuple, TypeVar, overload

from ..config import GraphSettings, get_settings
from ..errors import ArityMismatchError, TypeMismatchError, type_name
from .node import GraphNode, NodeLike, as_node, ensure_exclusive

logger = logging.getLogger(__name__)

In = TypeVar("In")
Out = TypeVar("Out")

I1 = TypeVar("I1")
I2 = TypeVar("I2")
I3 = TypeVar("I3")
I4 = TypeVar("I4")
I5 = TypeVar("I5")
I6 = TypeVar("I6")
I7 = TypeVar("I7")
I8 = TypeVar("I8")
O1 = TypeVar("O1")
O2 = TypeVar("O2")
O3 = TypeVar("O3")
O4 = TypeVar("O4")
O5 = TypeVar("O5")
O6 = TypeVar("O6")
O7 = TypeVar("O7")
O8 = TypeVar("O8")


class Parallel(GraphNode[In, Out]):
    """
    Composite node over a fixed, ordered sequence of nodes.

    Input type is tuple[I1, ..., In] and output type is tuple[O1, ..., On]
    for nodes of type Ii -> Oi. Component i of the input always goes to node
    i and node i's result always lands at position i of the output.

    Branches run one after another, left to right, in the calling thread.
    A 1-node Parallel is a passthrough wrapper over 1-tuples.

    Example usage:
        stage = Parallel(len, parse_int)
        stage.run(("42", "42"))  # (2, 42)
    """

    def __init__(self, *nodes: NodeLike[Any, Any], settings: Optional[GraphSettings] = None):
        """
        Build a tuple composite.

        Args:
            *nodes: One node per tuple position, in positional order
            settings: Composition settings (default: process-wide settings)

        Raises:
            ArityMismatchError: If no nodes are given
            SharedNodeError: If one node object is given at two positions
        """
        if not nodes:
            raise ArityMismatchError(
                expected=1, actual=0, message="a parallel stage needs at least one node"
            )

        settings = settings or get_settings()
        self.nodes: Tuple[GraphNode, ...] = tuple(as_node(node, settings) for node in nodes)
        ensure_exclusive(self.nodes)

        self.input_type = tuple[tuple(node.input_type for node in self.nodes)]
        self.output_type = tuple[tuple(node.output_type for node in self.nodes)]

        logger.debug(
            f"Built {self.arity}-way parallel stage: "
            f"{type_name(self.input_type)} -> {type_name(self.output_type)}"
        )

    @property
    def arity(self) -> int:
        """Number of tuple positions"""
        return len(self.nodes)

    def run(self, value: In) -> Out:
        """
        Run each node on its tuple component.

        Args:
            value: Tuple with exactly one component per node

        Returns:
            Tuple of node results, in node order

        Raises:
            TypeMismatchError: If value is not a tuple
            ArityMismatchError: If value has the wrong number of components
        """
        if not isinstance(value, tuple):
            raise TypeMismatchError(
                type(value),
                self.input_type,
                message=f"parallel stage expects a tuple, got {type(value).__name__}",
            )
        if len(value) != self.arity:
            raise ArityMismatchError(
                expected=self.arity,
                actual=len(value),
                message=f"parallel stage of {self.arity} nodes received a {len(value)}-tuple",
            )

        return tuple(node.run(item) for node, item in zip(self.nodes, value))

    def owned_objects(self) -> Iterator[Any]:
        yield self
        for node in self.nodes:
            yield from node.owned_objects()

    def __repr__(self) -> str:
        return f"Parallel({', '.join(repr(node) for node in self.nodes)})"


@overload
def parallel(
    n1: NodeLike[I1, O1], /, *, settings: Optional[GraphSettings] = None
) -> Parallel[Tuple[I1], Tuple[O1]]: ...


@overload
def parallel(
    n1: NodeLike[I1, O1], n2: NodeLike[I2, O2], /, *, settings: Optional[GraphSettings] = None
) -> Parallel[Tuple[I1, I2], Tuple[O1, O2]]: ...


@overload
def parallel(
    n1: NodeLike[I1, O1], n2: NodeLike[I2, O2], n3: NodeLike[I3, O3], /,
    *, settings: Optional[GraphSettings] = None,
) -> Parallel[Tuple[I1, I2, I3], Tuple[O1, O2, O3]]: ...


@overload
def parallel(
    n1: NodeLike[I1, O1], n2: NodeLike[I2, O2], n3: NodeLike[I3, O3], n4: NodeLike[I4, O4], /,
    *, settings: Optional[GraphSettings] = None,
) -> Parallel[Tuple[I1, I2, I3, I4], Tuple[O1, O2, O3, O4]]: ...


@overload
def parallel(
    n1: NodeLike[I1, O1], n2: NodeLike[I2, O2], n3: NodeLike[I3, O3], n4: NodeLike[I4, O4],
    n5: NodeLike[I5, O5], /, *, settings: Optional[GraphSettings] = None,
) -> Parallel[Tuple[I1, I2, I3, I4, I5], Tuple[O1, O2, O3, O4, O5]]: ...


@overload
def parallel(
    n1: NodeLike[I1, O1], n2: NodeLike[I2, O2], n3: NodeLike[I3, O3], n4: NodeLike[I4, O4],
    n5: NodeLike[I5, O5], n6: NodeLike[I6, O6], /, *, settings: Optional[GraphSettings] = None,
) -> Parallel[Tuple[I1, I2, I3, I4, I5, I6], Tuple[O1, O2, O3, O4, O5, O6]]: ...


@overload
def parallel(
    n1: NodeLike[I1, O1], n2: NodeLike[I2, O2], n3: NodeLike[I3, O3], n4: NodeLike[I4, O4],
    n5: NodeLike[I5, O5], n6: NodeLike[I6, O6], n7: NodeLike[I7, O7], /,
    *, settings: Optional[GraphSettings] = None,
) -> Parallel[Tuple[I1, I2, I3, I4, I5, I6, I7], Tuple[O1, O2, O3, O4, O5, O6, O7]]: ...


@overload
def parallel(
    n1: NodeLike[I1, O1], n2: NodeLike[I2, O2], n3: NodeLike[I3, O3], n4: NodeLike[I4, O4],
    n5: NodeLike[I5, O5], n6: NodeLike[I6, O6], n7: NodeLike[I7, O7], n8: NodeLike[I8, O8], /,
    *, settings: Optional[GraphSettings] = None,
) -> Parallel[Tuple[I1, I2, I3, I4, I5, I6, I7, I8], Tuple[O1, O2, O3, O4, O5, O6, O7, O8]]: ...


@overload
def parallel(
    *nodes: NodeLike[Any, Any], settings: Optional[GraphSettings] = None
) -> Parallel[Tuple[Any, ...], Tuple[Any, ...]]: ...


def parallel(*nodes: NodeLike[Any, Any], settings: Optional[GraphSettings] = None) -> Parallel[Any, Any]:
    """Build a tuple composite from nodes in positional order; see Parallel"""
    return Parallel(*nodes, settings=settings)
