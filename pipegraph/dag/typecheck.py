"""
Type Compatibility

Construction-time checks that decide whether one node's output type can feed
another node's input type. Python checks nothing when a graph is assembled,
so every Pipe runs these checks and fails loudly instead of coercing values.

Rules, applied recursively:
- Any on either side composes with anything; object accepts anything
- plain classes follow the subclass relation, plus int -> float -> complex promotion
- a Union target accepts a source matching any member; a Union source must match with every member
- fixed-length tuples match position by position and must have the same length
- TypeVars in the target bind to the source so generic nodes resolve their output type;
  a TypeVar met again is widened to the wider of its two sources (bool then int binds int)
- TypeVars in the source bind to the target so generic nodes resolve their input type

A plain class feeding a parameterized generic is checked on the class alone:
str feeds Iterable[int] because str is an Iterable and its element type is
not visible to the checker. Parameterized sources (list[str]) are checked
argument by argument.
"""

import logging
import types
from typing import Annotated, Any, Dict, List, Optional, Tuple, TypeVar, Union, get_args, get_origin

from ..errors import ArityMismatchError, TypeMismatchError, type_name

logger = logging.getLogger(__name__)

Bindings = Dict[TypeVar, Any]

_NUMERIC_PROMOTIONS = {
    int: (float, complex),
    float: (complex,),
}

# Tuple shapes
_FIXED = "fixed"
_VARIADIC = "variadic"
_UNKNOWN = "unknown"


def check_compatible(upstream: Any, downstream: Any, numeric_promotion: bool = True) -> Bindings:
    """
    Check that an upstream output type feeds a downstream input type.

    Args:
        upstream: Output type of the node that runs first
        downstream: Input type of the node that runs second
        numeric_promotion: Allow int -> float -> complex

    Returns:
        TypeVar bindings collected from both types

    Raises:
        ArityMismatchError: If both sides are fixed tuples of different lengths
        TypeMismatchError: If the types are otherwise incompatible
    """
    bindings: Bindings = {}
    if unify(upstream, downstream, bindings, numeric_promotion):
        logger.debug(
            f"{type_name(upstream)} feeds {type_name(downstream)}"
            + (f" with bindings {bindings}" if bindings else "")
        )
        return bindings

    up_shape = _tuple_shape(_normalize(upstream))
    down_shape = _tuple_shape(_normalize(downstream))
    if (
        up_shape is not None and down_shape is not None
        and up_shape[0] == _FIXED and down_shape[0] == _FIXED
        and len(up_shape[1]) != len(down_shape[1])
    ):
        raise ArityMismatchError(
            expected=len(down_shape[1]),
            actual=len(up_shape[1]),
            message=(
                f"cannot pipe a {len(up_shape[1])}-tuple {type_name(upstream)} "
                f"into a {len(down_shape[1])}-tuple input {type_name(downstream)}"
            ),
        )
    raise TypeMismatchError(upstream, downstream)


def unify(source: Any, target: Any, bindings: Bindings, numeric_promotion: bool = True) -> bool:
    """
    Decide whether a value of type source is acceptable where target is expected.

    TypeVars found in target are bound to the matching part of source, and
    unbound TypeVars found in source are bound to the matching part of target.
    The bindings dict is updated in place.

    Returns:
        True if compatible
    """
    source = _normalize(source)
    target = _normalize(target)

    if source is Any or target is Any or target is object:
        return True

    if source == target:
        return True

    if isinstance(target, TypeVar):
        return _bind(target, source, bindings, numeric_promotion)

    if isinstance(source, TypeVar):
        if source in bindings:
            return unify(bindings[source], target, bindings, numeric_promotion)
        return _bind_upstream(source, target, bindings, numeric_promotion)

    if _is_union(source):
        return all(unify(member, target, bindings, numeric_promotion) for member in get_args(source))

    if _is_union(target):
        for member in get_args(target):
            trial = dict(bindings)
            if unify(source, member, trial, numeric_promotion):
                bindings.update(trial)
                return True
        return False

    source_shape = _tuple_shape(source)
    target_shape = _tuple_shape(target)
    if source_shape is not None or target_shape is not None:
        return _unify_tuple(source, target, source_shape, target_shape, bindings, numeric_promotion)

    source_origin = get_origin(source)
    target_origin = get_origin(target)
    if source_origin is None and target_origin is None:
        return _is_subclass(source, target, numeric_promotion)

    source_base = source_origin if source_origin is not None else source
    target_base = target_origin if target_origin is not None else target
    if not _is_subclass(source_base, target_base, numeric_promotion):
        return False

    source_args = get_args(source)
    target_args = get_args(target)
    if not source_args or not target_args or len(source_args) != len(target_args):
        return True
    return all(
        unify(s, t, bindings, numeric_promotion)
        for s, t in zip(source_args, target_args)
    )


def substitute(tp: Any, bindings: Bindings) -> Any:
    """Replace bound TypeVars inside a type annotation"""
    if not bindings:
        return tp
    if isinstance(tp, TypeVar):
        if tp not in bindings:
            return tp
        # Bindings may chain (U -> T -> int); drop tp so a cycle cannot recurse
        rest = {var: bound for var, bound in bindings.items() if var is not tp}
        return substitute(bindings[tp], rest)

    origin = get_origin(tp)
    args = get_args(tp)
    if origin is None or not args:
        return tp
    if any(isinstance(arg, list) for arg in args):
        # Callable[[...], R] parameter lists are left alone
        return tp

    new_args = tuple(substitute(arg, bindings) for arg in args)
    if new_args == args:
        return tp
    if _is_union(tp):
        return Union[new_args]
    if origin is tuple:
        return tuple[new_args]
    if isinstance(tp, types.GenericAlias):
        return types.GenericAlias(origin, new_args)
    if hasattr(tp, "copy_with"):
        return tp.copy_with(new_args)
    return tp


def freshen(*annotations: Any) -> Tuple[Any, ...]:
    """
    Replace every TypeVar in the given annotations with a private copy.

    Two nodes built from the same generic function must not share TypeVars,
    or binding one would constrain the other.
    """
    found: List[TypeVar] = []
    for tp in annotations:
        _collect_typevars(tp, found)
    if not found:
        return annotations

    fresh = {var: _copy_typevar(var) for var in found}
    return tuple(substitute(tp, fresh) for tp in annotations)


def _bind(var: TypeVar, source: Any, bindings: Bindings, numeric_promotion: bool) -> bool:
    if var in bindings:
        current = bindings[var]
        trial = dict(bindings)
        if unify(source, current, trial, numeric_promotion):
            bindings.update(trial)
            return True
        # Widen to the wider of the two sources
        if not unify(current, source, {}, numeric_promotion):
            return False

    if var.__bound__ is not None and not unify(source, var.__bound__, {}, numeric_promotion):
        return False
    if var.__constraints__ and not any(
        unify(source, constraint, {}, numeric_promotion) for constraint in var.__constraints__
    ):
        return False

    bindings[var] = source
    return True


def _bind_upstream(var: TypeVar, target: Any, bindings: Bindings, numeric_promotion: bool) -> bool:
    """Bind an unresolved generic output to the type its consumer accepts"""
    if var.__constraints__:
        for constraint in var.__constraints__:
            if unify(constraint, target, {}, numeric_promotion):
                bindings[var] = constraint
                return True
        return False

    if var.__bound__ is not None and not unify(target, var.__bound__, {}, numeric_promotion):
        # Target is outside the bound: accept only if the whole bound fits it
        return unify(var.__bound__, target, bindings, numeric_promotion)

    bindings[var] = target
    return True


def _unify_tuple(
    source: Any,
    target: Any,
    source_shape: Optional[Tuple[str, Tuple[Any, ...]]],
    target_shape: Optional[Tuple[str, Tuple[Any, ...]]],
    bindings: Bindings,
    numeric_promotion: bool,
) -> bool:
    if source_shape is None:
        # Only tuple subclasses (NamedTuple) can feed a tuple input
        return _is_class(source) and _is_subclass(source, tuple, numeric_promotion)

    source_kind, source_args = source_shape
    if target_shape is None:
        target_origin = get_origin(target)
        if target_origin is None:
            return _is_subclass(tuple, target, numeric_promotion)
        if not _is_subclass(tuple, target_origin, numeric_promotion):
            return False
        target_args = get_args(target)
        if len(target_args) != 1:
            return True
        return all(unify(arg, target_args[0], bindings, numeric_promotion) for arg in source_args)

    target_kind, target_args = target_shape
    if source_kind == _UNKNOWN or target_kind == _UNKNOWN:
        return True
    if target_kind == _VARIADIC:
        return all(unify(arg, target_args[0], bindings, numeric_promotion) for arg in source_args)
    if source_kind == _VARIADIC:
        return all(unify(source_args[0], arg, bindings, numeric_promotion) for arg in target_args)
    if len(source_args) != len(target_args):
        return False
    return all(
        unify(s, t, bindings, numeric_promotion)
        for s, t in zip(source_args, target_args)
    )


def _tuple_shape(tp: Any) -> Optional[Tuple[str, Tuple[Any, ...]]]:
    """Classify a tuple annotation, or return None for non-tuple types"""
    if tp is tuple:
        return _UNKNOWN, ()
    if get_origin(tp) is not tuple:
        return None

    args = get_args(tp)
    if not args or args == ((),):
        return _UNKNOWN, ()
    if len(args) == 2 and args[1] is Ellipsis:
        return _VARIADIC, (args[0],)
    return _FIXED, args


def _is_subclass(source: Any, target: Any, numeric_promotion: bool) -> bool:
    if not (_is_class(source) and _is_class(target)):
        return _accept_unchecked(source, target)

    try:
        if issubclass(source, target):
            return True
    except TypeError:
        # Non-runtime protocols and similar
        return _accept_unchecked(source, target)

    if numeric_promotion:
        for narrow, wider in _NUMERIC_PROMOTIONS.items():
            if issubclass(source, narrow) and target in wider:
                return True
    return False


def _is_class(tp: Any) -> bool:
    # list[int] passes isinstance(..., type) on 3.10
    return isinstance(tp, type) and get_origin(tp) is None


def _accept_unchecked(source: Any, target: Any) -> bool:
    logger.debug(
        f"Cannot check {type_name(source)} against {type_name(target)}, accepting"
    )
    return True


def _is_union(tp: Any) -> bool:
    return get_origin(tp) in (Union, types.UnionType)


def _normalize(tp: Any) -> Any:
    if tp is None:
        return type(None)
    if get_origin(tp) is Annotated:
        return _normalize(get_args(tp)[0])
    supertype = getattr(tp, "__supertype__", None)
    if supertype is not None:
        # typing.NewType
        return _normalize(supertype)
    return tp


def _collect_typevars(tp: Any, found: List[TypeVar]) -> None:
    if isinstance(tp, TypeVar):
        if tp not in found:
            found.append(tp)
        return
    for arg in get_args(tp):
        if isinstance(arg, list):
            for item in arg:
                _collect_typevars(item, found)
        else:
            _collect_typevars(arg, found)


def _copy_typevar(var: TypeVar) -> TypeVar:
    return TypeVar(var.__name__, *var.__constraints__, bound=var.__bound__)
