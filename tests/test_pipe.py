"""Tests for the Pipe combinator."""

from typing import Optional

import pytest

from pipegraph import (
    ArityMismatchError,
    CompositionError,
    Duplicate,
    FunctionNode,
    GraphSettings,
    Identity,
    Parallel,
    Pipe,
    SharedNodeError,
    TypeMismatchError,
    graph,
    pipe,
)
from tests.helpers import (
    Recorder,
    RunningTotal,
    count_chars,
    double,
    explode,
    halve,
    increment,
    is_even,
    parse_int,
    stringify,
)


def describe(x: Optional[int]) -> str:
    return "none" if x is None else f"int {x}"


def test_runs_first_then_second():
    assert pipe(double, stringify).run(5) == "10"


def test_types_come_from_ends():
    p = Pipe(double, stringify)

    assert p.input_type is int
    assert p.output_type is str


def test_execution_order(call_log):
    p = Pipe(Recorder("first", call_log), Recorder("second", call_log))

    p.run(None)
    p.run(None)

    assert call_log == ["first", "second", "first", "second"]


def test_mismatched_types_rejected():
    with pytest.raises(TypeMismatchError) as exc_info:
        pipe(stringify, double)

    assert exc_info.value.upstream is str
    assert exc_info.value.downstream is int
    assert "str" in str(exc_info.value)


def test_mismatch_is_a_type_error():
    with pytest.raises(TypeError):
        pipe(stringify, double)


def test_optional_does_not_feed_plain_type():
    with pytest.raises(TypeMismatchError):
        pipe(parse_int, double)


def test_plain_type_feeds_optional():
    assert pipe(double, describe).run(2) == "int 4"
    assert pipe(parse_int, describe).run("x") == "none"


def test_subclass_feeds_base_class():
    assert pipe(is_even, double).run(4) == 2


def test_numeric_promotion():
    assert pipe(double, halve).run(3) == 3.0


def test_numeric_promotion_can_be_disabled():
    with pytest.raises(TypeMismatchError):
        pipe(double, halve, settings=GraphSettings(numeric_promotion=False))


def test_tuple_length_mismatch_is_arity_error():
    with pytest.raises(ArityMismatchError) as exc_info:
        pipe(Duplicate(copies=3), Parallel(count_chars, parse_int))

    assert exc_info.value.expected == 2
    assert exc_info.value.actual == 3


def test_pipe_method_and_operator():
    node = FunctionNode(double)

    assert node.pipe(stringify).run(1) == "2"
    assert (FunctionNode(double) >> increment >> stringify).run(1) == "3"


def test_identity_resolves_to_upstream_type():
    p = pipe(double, Identity())

    assert p.output_type is int
    with pytest.raises(TypeMismatchError):
        pipe(p, count_chars)


def test_identity_takes_downstream_input_type():
    p = pipe(Identity(), double)

    assert p.input_type is int
    assert p.output_type is int


def test_generic_head_rejects_mismatch_in_either_nesting():
    with pytest.raises(TypeMismatchError):
        pipe(pipe(stringify, Identity()), double)
    with pytest.raises(TypeMismatchError):
        pipe(stringify, pipe(Identity(), double))


def test_duplicate_head_takes_group_input_type():
    tail = graph(Duplicate(), (count_chars, parse_int))

    assert tail.input_type is str
    assert pipe(stringify, tail).run(42) == (2, 42)
    with pytest.raises(CompositionError):
        pipe(double, tail)


def test_generic_chain_resolves_through_both_ends():
    p = pipe(Identity(), pipe(Identity(), Duplicate()))

    assert p.input_type is p.output_type.__args__[0]
    assert pipe(double, p).output_type == tuple[int, int]


def test_child_errors_propagate_unchanged():
    p = pipe(double, explode)

    with pytest.raises(ZeroDivisionError):
        p.run(1)


def test_node_state_persists_across_runs():
    p = pipe(double, RunningTotal())

    assert p.run(1) == 2
    assert p.run(2) == 6


def test_same_stateful_node_twice_rejected():
    total = RunningTotal()

    with pytest.raises(SharedNodeError):
        pipe(total, total)


def test_plain_function_may_repeat():
    assert pipe(double, double).run(3) == 12


def test_unannotated_callable_composes():
    assert pipe(lambda x: x + 1, stringify).run(1) == "2"


def test_nested_pipe_is_a_node():
    inner = pipe(double, increment)

    assert pipe(inner, stringify).run(4) == "9"
    assert inner(4) == 9
