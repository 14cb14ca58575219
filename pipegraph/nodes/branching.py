"""
Branching Nodes

Ordinary nodes for reshaping values around parallel stages.
A value feeding several branches is copied explicitly with Duplicate; the
composition layer itself never clones anything.
"""

import copy
import logging
from typing import Any, Callable, Tuple, TypeVar

from ..dag.node import GraphNode

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Identity(GraphNode[T, T]):
    """
    Returns its input unchanged.

    Generic: piped after a node producing X, its output type resolves to X.
    """

    def __init__(self):
        var = TypeVar("T")
        self.input_type = var
        self.output_type = var

    def run(self, value: T) -> T:
        return value


class Duplicate(GraphNode[T, Tuple[T, ...]]):
    """
    Turns one value into a tuple of independent copies.

    Position 0 holds the original value; the remaining positions hold copies
    made with `copier` (copy.deepcopy by default), so branches can mutate
    their component without affecting each other.

    Example usage:
        graph(Duplicate(), (len, parse_int)).run("42")  # (2, 42)
    """

    def __init__(self, copies: int = 2, copier: Callable[[Any], Any] = copy.deepcopy):
        """
        Args:
            copies: Length of the output tuple
            copier: Function producing an independent copy of a value

        Raises:
            ValueError: If copies is less than 1
        """
        if copies < 1:
            raise ValueError(f"Duplicate needs at least one copy, got {copies}")

        self.copies = copies
        self.copier = copier

        var = TypeVar("T")
        self.input_type = var
        self.output_type = tuple[(var,) * copies]

        logger.debug(f"Initialized Duplicate with copies={copies}")

    def run(self, value: T) -> Tuple[T, ...]:
        return (value,) + tuple(self.copier(value) for _ in range(self.copies - 1))
