"""
DAG Node Model

Defines the node contract and the adapters that turn plain callables and
run()-style objects into nodes with known input and output types.
"""

import inspect
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, Iterator, Optional, Protocol, Tuple, TypeVar, Union, get_type_hints, runtime_checkable

from ..config import GraphSettings, get_settings
from ..errors import NodeDefinitionError, SharedNodeError, type_name
from .typecheck import freshen

logger = logging.getLogger(__name__)

In = TypeVar("In")
Out = TypeVar("Out")
In_contra = TypeVar("In_contra", contravariant=True)
Out_co = TypeVar("Out_co", covariant=True)

_MISSING = inspect.Parameter.empty

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.VAR_POSITIONAL,
)


@runtime_checkable
class Node(Protocol[In_contra, Out_co]):
    """
    Protocol for processing nodes.

    Any object with a run() method taking one value and returning one value
    is a node; no base class is required. Nodes may hold and mutate internal
    state across calls. Failures a caller should react to belong in the
    output value (e.g. Optional[int]), not in exceptions.

    Example implementation:
        class RunningTotal:
            def __init__(self):
                self.total = 0

            def run(self, value: int) -> int:
                self.total += value
                return self.total
    """

    def run(self, value: In_contra) -> Out_co:
        """
        Process one input value.

        Args:
            value: Input value

        Returns:
            Output value
        """
        ...


# Anything as_node() accepts
NodeLike = Union[Node[In, Out], Callable[[In], Out]]


class GraphNode(ABC, Generic[In, Out]):
    """
    Base class for nodes built or adapted by pipegraph.

    Carries the declared input_type and output_type used to check
    composition, and the pipe() method that joins it to a following node.

    Attributes:
        input_type: Declared input annotation (typing.Any when unknown)
        output_type: Declared output annotation (typing.Any when unknown)
    """
    input_type: Any = Any
    output_type: Any = Any

    @abstractmethod
    def run(self, value: In) -> Out:
        ...

    def __call__(self, value: In) -> Out:
        return self.run(value)

    def pipe(self, next_node: "NodeLike[Out, Any]", settings: Optional[GraphSettings] = None) -> "GraphNode[In, Any]":
        """
        Chain this node with a following node.

        Args:
            next_node: Node receiving this node's output
            settings: Composition settings (default: process-wide settings)

        Returns:
            Pipe composite running self, then next_node

        Raises:
            TypeMismatchError: If this output type does not feed next_node's input
        """
        from .pipe import Pipe

        return Pipe(self, next_node, settings=settings)

    def __rshift__(self, next_node: "NodeLike[Out, Any]") -> "GraphNode[In, Any]":
        return self.pipe(next_node)

    def owned_objects(self) -> Iterator[Any]:
        """Objects this node owns exclusively, used to reject shared sub-nodes"""
        yield self

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}"
            f"({type_name(self.input_type)} -> {type_name(self.output_type)})"
        )


class FunctionNode(GraphNode[In, Out]):
    """
    Node wrapping a plain callable.

    Types are read from the callable's annotations unless given explicitly.
    A class used as a callable (str, int, a dataclass) produces an instance
    of itself. Pass type(None) to declare a None type explicitly.

    Example usage:
        def double(x: int) -> int:
            return x * 2

        node = FunctionNode(double)
        node.run(5)  # 10

        shout = FunctionNode(lambda s: s.upper(), input_type=str, output_type=str)
    """

    def __init__(
        self,
        func: Callable[[In], Out],
        input_type: Any = None,
        output_type: Any = None,
        name: Optional[str] = None,
        settings: Optional[GraphSettings] = None,
    ):
        if not callable(func):
            raise NodeDefinitionError(f"{func!r} is not callable")

        self.func = func
        self.name = name or getattr(func, "__qualname__", None) or repr(func)

        if input_type is None or output_type is None:
            hinted_in, hinted_out = _callable_signature(func, self.name, settings or get_settings())
            input_type = hinted_in if input_type is None else input_type
            output_type = hinted_out if output_type is None else output_type

        self.input_type, self.output_type = freshen(input_type, output_type)

    def run(self, value: In) -> Out:
        return self.func(value)

    def owned_objects(self) -> Iterator[Any]:
        # Functions and bound methods may be reused; stateful callables may not
        if not inspect.isroutine(self.func) and not isinstance(self.func, type):
            yield self.func

    def __repr__(self) -> str:
        return (
            f"FunctionNode({self.name}: "
            f"{type_name(self.input_type)} -> {type_name(self.output_type)})"
        )


class NodeAdapter(GraphNode[In, Out]):
    """Node wrapping a third-party object that implements run()"""

    def __init__(self, node: Node[In, Out], settings: Optional[GraphSettings] = None):
        self.node = node
        self.name = type(node).__qualname__
        input_type, output_type = _callable_signature(node.run, self.name, settings or get_settings())
        self.input_type, self.output_type = freshen(input_type, output_type)

    def run(self, value: In) -> Out:
        return self.node.run(value)

    def owned_objects(self) -> Iterator[Any]:
        yield self.node

    def __repr__(self) -> str:
        return (
            f"NodeAdapter({self.name}: "
            f"{type_name(self.input_type)} -> {type_name(self.output_type)})"
        )


def as_node(obj: Any, settings: Optional[GraphSettings] = None) -> GraphNode:
    """
    Adapt an object to a GraphNode.

    Args:
        obj: GraphNode, object with a run() method, or callable
        settings: Composition settings (default: process-wide settings)

    Returns:
        obj itself if it is already a GraphNode, otherwise an adapter

    Raises:
        NodeDefinitionError: If obj cannot act as a node
    """
    if isinstance(obj, GraphNode):
        return obj

    if isinstance(obj, type):
        if callable(getattr(obj, "run", None)):
            raise NodeDefinitionError(
                f"{obj.__qualname__} is a node class; pass an instance instead"
            )
        return FunctionNode(obj, settings=settings)

    if callable(getattr(obj, "run", None)) and not inspect.isroutine(obj):
        return NodeAdapter(obj, settings=settings)

    if callable(obj):
        return FunctionNode(obj, settings=settings)

    raise NodeDefinitionError(
        f"{obj!r} is not a node: expected an object with run() or a callable"
    )


def ensure_exclusive(nodes: Tuple[GraphNode, ...]) -> None:
    """
    Reject composites in which one node object would appear twice.

    Raises:
        SharedNodeError: If any owned object is reachable from two positions
    """
    seen = set()
    for node in nodes:
        for owned in node.owned_objects():
            if id(owned) in seen:
                raise SharedNodeError(
                    f"{owned!r} appears more than once in the graph; "
                    f"each position needs its own node instance"
                )
            seen.add(id(owned))


def _callable_signature(func: Callable[..., Any], name: str, settings: GraphSettings) -> Tuple[Any, Any]:
    """
    Read input and output annotations of a node callable.

    Args:
        func: Function, bound run() method, callable instance or class
        name: Name used in messages
        settings: Composition settings

    Returns:
        (input_type, output_type), typing.Any for anything unannotated

    Raises:
        NodeDefinitionError: If func takes no positional argument, or an
            annotation is missing while strict_annotations is enabled
    """
    if isinstance(func, type):
        hint_source = func.__init__
        output_type: Any = func
    else:
        hint_source = func if inspect.isroutine(func) else getattr(func, "__call__", func)
        output_type = _MISSING

    try:
        hints = get_type_hints(hint_source)
    except Exception as e:
        logger.warning(f"Could not resolve annotations of {name}: {e}")
        hints = {}

    try:
        parameters = list(inspect.signature(func).parameters.values())
    except (TypeError, ValueError):
        # Builtins without a signature
        logger.debug(f"No signature available for {name}")
        parameters = None

    input_type: Any = _MISSING
    if parameters is not None:
        positional = [p for p in parameters if p.kind in _POSITIONAL]
        if not positional:
            raise NodeDefinitionError(f"{name} takes no positional argument to receive the input value")
        input_type = hints.get(positional[0].name, _MISSING)

    if output_type is _MISSING:
        output_type = hints.get("return", _MISSING)

    if settings.strict_annotations:
        if input_type is _MISSING:
            raise NodeDefinitionError(f"{name} has no input type annotation")
        if output_type is _MISSING:
            raise NodeDefinitionError(f"{name} has no return type annotation")

    input_type = Any if input_type is _MISSING else input_type
    output_type = Any if output_type is _MISSING else output_type
    logger.debug(f"Resolved {name}: {type_name(input_type)} -> {type_name(output_type)}")
    return input_type, output_type
