"""Nodes shared by the test modules."""

from typing import Any, List, Optional, TypeVar

T = TypeVar("T")


def double(x: int) -> int:
    return x * 2


def increment(x: int) -> int:
    return x + 1


def negate(x: int) -> int:
    return -x


def stringify(x: int) -> str:
    return str(x)


def encode(s: str) -> bytes:
    return s.encode("utf-8")


def count_chars(s: str) -> int:
    return len(s)


def parse_int(s: str) -> Optional[int]:
    try:
        return int(s)
    except ValueError:
        return None


def halve(x: float) -> float:
    return x / 2


def is_even(x: int) -> bool:
    return x % 2 == 0


def ident(x: T) -> T:
    return x


def explode(x: int) -> int:
    return 1 // 0


class RunningTotal:
    """Stateful node: running sum of its inputs"""

    def __init__(self):
        self.total = 0

    def run(self, value: int) -> int:
        self.total += value
        return self.total


class Recorder:
    """Passes values through and records its name in a shared call log"""

    def __init__(self, name: str, log: List[str]):
        self.name = name
        self.log = log

    def run(self, value: Any) -> Any:
        self.log.append(self.name)
        return value


class Scale:
    """Callable instance node"""

    def __init__(self, factor: int):
        self.factor = factor

    def __call__(self, x: int) -> int:
        return x * self.factor
