"""
Pipegraph Errors

Exceptions raised while assembling a graph.
Nothing here is raised while a graph runs, except ArityMismatchError for an
input tuple of the wrong length: failures inside nodes propagate untouched.
"""

from typing import Any, get_args


class PipegraphError(Exception):
    """Base class for all pipegraph errors"""


class NodeDefinitionError(PipegraphError, TypeError):
    """Raised when an object cannot be used as a node"""


class CompositionError(PipegraphError, TypeError):
    """Raised when nodes cannot be joined into a composite"""


class TypeMismatchError(CompositionError):
    """
    Upstream output type does not feed the downstream input type.

    Attributes:
        upstream: Output type of the upstream node
        downstream: Input type of the downstream node
    """

    def __init__(self, upstream: Any, downstream: Any, message: str = ""):
        self.upstream = upstream
        self.downstream = downstream
        detail = message or (
            f"cannot pipe output {type_name(upstream)} "
            f"into input {type_name(downstream)}"
        )
        super().__init__(detail)


class ArityMismatchError(CompositionError, ValueError):
    """
    Number of tuple components does not match the number of nodes.

    Attributes:
        expected: Number of components the receiving side needs
        actual: Number of components supplied
    """

    def __init__(self, expected: int, actual: int, message: str = ""):
        self.expected = expected
        self.actual = actual
        super().__init__(
            message or f"expected {expected} tuple components, got {actual}"
        )


class SharedNodeError(CompositionError):
    """Raised when one node object would be owned at two positions"""


class BuilderError(CompositionError):
    """Raised for an empty or already consumed GraphBuilder"""


def type_name(tp: Any) -> str:
    """Readable name of a type annotation for error messages"""
    if isinstance(tp, type) and not get_args(tp):
        return tp.__qualname__
    return repr(tp)
