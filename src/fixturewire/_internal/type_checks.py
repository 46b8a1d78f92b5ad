from __future__ import annotations

import collections.abc
import types
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum, Flag
from typing import Annotated, Any, Literal, NewType, TypeGuard, TypeVar, Union, get_args, get_origin

_NONE_TYPE = type(None)
_VARIADIC_TUPLE_MIN_ARGS = 2
_MAPPING_ARGS_COUNT = 2

NOT_OPTIONAL: Any = object()
"""Sentinel returned by ``optional_inner_type`` for non-optional annotations."""

_SEQUENCE_ORIGINS: tuple[Any, ...] = (
    list,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Collection,
    collections.abc.Iterable,
)
_SET_ORIGINS: tuple[Any, ...] = (
    set,
    collections.abc.Set,
    collections.abc.MutableSet,
)
_MAPPING_ORIGINS: tuple[Any, ...] = (
    dict,
    collections.abc.Mapping,
    collections.abc.MutableMapping,
)


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def is_new_type(candidate: object) -> bool:
    """Return true when candidate was created with ``typing.NewType``."""
    return isinstance(candidate, NewType)


def is_union(candidate: object) -> bool:
    """Return true for ``typing.Union[...]`` and PEP 604 ``X | Y`` annotations."""
    origin = get_origin(candidate)
    return origin is Union or origin is types.UnionType


def describe_type(dependency: Any) -> str:
    """Return a short human readable name for a dependency key.

    Args:
        dependency: Dependency key used in error messages and logs.

    """
    if is_runtime_class(dependency):
        return dependency.__qualname__
    if is_new_type(dependency):
        return str(dependency.__name__)
    return repr(dependency).replace("typing.", "")


def optional_inner_type(dependency: Any) -> Any:
    """Return the wrapped type of ``Optional[U]``/``U | None`` or ``NOT_OPTIONAL``.

    Unions with several non-``None`` members keep the remaining members as a union.
    """
    if not is_union(dependency):
        return NOT_OPTIONAL
    members = get_args(dependency)
    if _NONE_TYPE not in members:
        return NOT_OPTIONAL
    remaining = tuple(member for member in members if member is not _NONE_TYPE)
    if len(remaining) == 1:
        return remaining[0]
    return Union[remaining]  # type: ignore[valid-type]  # noqa: UP007


def union_members(dependency: Any) -> tuple[Any, ...]:
    """Return the members of a union without ``None``, or an empty tuple for non-unions."""
    if not is_union(dependency):
        return ()
    return tuple(member for member in get_args(dependency) if member is not _NONE_TYPE)


def closed_choices(dependency: Any) -> tuple[Any, ...]:
    """Return the finite set of values of an ``Enum`` or ``Literal`` type.

    An empty tuple means the dependency is not a closed-choice type, or that it
    has no members to choose from.
    """
    if is_runtime_class(dependency) and issubclass(dependency, Enum):
        return tuple(dependency)
    if get_origin(dependency) is Literal:
        return get_args(dependency)
    return ()


def enum_raw_value_type(dependency: Any) -> Any | None:
    """Return the raw value type backing an enum, if there is one.

    The raw type is the enum's mixin data type (``str`` for ``class Color(str, Enum)``),
    otherwise the single common type of all member values. Flags are excluded
    because converting arbitrary raw values creates pseudo-members.
    """
    if not is_runtime_class(dependency) or not issubclass(dependency, Enum):
        return None
    if issubclass(dependency, Flag):
        return None
    member_type = getattr(dependency, "_member_type_", object)
    if member_type is not object:
        return member_type
    value_types = {type(member.value) for member in dependency}
    if len(value_types) == 1:
        return value_types.pop()
    return None


class CollectionKind(Enum):
    """Describe how the items of a collection shape are resolved."""

    HOMOGENEOUS = "homogeneous"
    """One item type, resolved once for a single-element container."""

    MAPPING = "mapping"
    """A key type and a value type, resolved once for a single-entry mapping."""

    FIXED = "fixed"
    """A fixed-length tuple where every position is resolved."""


@dataclass(frozen=True, slots=True)
class CollectionShape:
    """Describe a container annotation the resolver knows how to fill."""

    kind: CollectionKind
    item_types: tuple[Any, ...]
    build: Callable[[Iterable[Any]], Any]


def collection_shape(dependency: Any) -> CollectionShape | None:
    """Return the container shape for collection annotations, parametrised or bare.

    Args:
        dependency: Dependency key to inspect.

    """
    origin = get_origin(dependency) or dependency
    args = get_args(dependency)

    if origin is tuple:
        return _tuple_shape(args, parametrised=get_origin(dependency) is not None)
    if origin is frozenset:
        return CollectionShape(CollectionKind.HOMOGENEOUS, (_first_or_any(args),), frozenset)
    if any(origin is candidate for candidate in _SEQUENCE_ORIGINS):
        return CollectionShape(CollectionKind.HOMOGENEOUS, (_first_or_any(args),), list)
    if any(origin is candidate for candidate in _SET_ORIGINS):
        return CollectionShape(CollectionKind.HOMOGENEOUS, (_first_or_any(args),), set)
    if any(origin is candidate for candidate in _MAPPING_ORIGINS):
        key_type, value_type = args if len(args) == _MAPPING_ARGS_COUNT else (Any, Any)
        return CollectionShape(CollectionKind.MAPPING, (key_type, value_type), dict)
    return None


def _tuple_shape(args: tuple[Any, ...], *, parametrised: bool) -> CollectionShape:
    if not args and not parametrised:
        return CollectionShape(CollectionKind.HOMOGENEOUS, (Any,), tuple)
    if not args or args == ((),):
        # ``tuple[()]``, spelled with a nested empty tuple before Python 3.11.
        return CollectionShape(CollectionKind.FIXED, (), tuple)
    if len(args) == _VARIADIC_TUPLE_MIN_ARGS and args[1] is Ellipsis:
        return CollectionShape(CollectionKind.HOMOGENEOUS, (args[0],), tuple)
    return CollectionShape(CollectionKind.FIXED, args, tuple)


def _first_or_any(args: tuple[Any, ...]) -> Any:
    return args[0] if args else Any


def matches_type(value: Any, expected: Any) -> bool:  # noqa: C901, PLR0911, PLR0912
    """Return whether an override value can be used where ``expected`` is requested.

    Container annotations are checked shallowly: the container type and the type
    of each direct item. Typing constructs that cannot be checked at runtime are
    accepted.

    Args:
        value: Override value supplied by the caller.
        expected: Type requested for the override label.

    """
    if expected is Any or expected is object or isinstance(expected, TypeVar):
        return True
    if expected is None or expected is _NONE_TYPE:
        return value is None
    if is_new_type(expected):
        return matches_type(value, expected.__supertype__)

    origin = get_origin(expected)
    if origin is Annotated:
        return matches_type(value, get_args(expected)[0])
    if is_union(expected):
        return any(matches_type(value, member) for member in get_args(expected))
    if origin is Literal:
        return any(
            value == choice and type(value) is type(choice) for choice in get_args(expected)
        )
    if origin is collections.abc.Callable:
        return callable(value)
    if origin is type:
        return isinstance(value, type)
    if origin is not None:
        return _isinstance(value, origin) and _items_match(value, origin, get_args(expected))

    if expected is bool:
        return isinstance(value, bool)
    if expected is int:
        return isinstance(value, int) and not isinstance(value, bool)
    if expected is float:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if isinstance(expected, type):
        return _isinstance(value, expected)
    return True


def _isinstance(value: Any, expected: Any) -> bool:
    try:
        return isinstance(value, expected)
    except TypeError:
        # Protocols that are not runtime checkable cannot be verified.
        return True


def _items_match(value: Any, origin: Any, args: tuple[Any, ...]) -> bool:
    if origin is tuple and args in ((), ((),)):
        return len(value) == 0
    if not args or not isinstance(value, collections.abc.Collection):
        return True
    if origin is tuple:
        if len(args) == _VARIADIC_TUPLE_MIN_ARGS and args[1] is Ellipsis:
            return all(matches_type(item, args[0]) for item in value)
        return len(value) == len(args) and all(
            matches_type(item, item_type) for item, item_type in zip(value, args, strict=True)
        )
    if isinstance(value, collections.abc.Mapping):
        if len(args) != _MAPPING_ARGS_COUNT:
            return True
        key_type, value_type = args
        return all(
            matches_type(key, key_type) and matches_type(item, value_type)
            for key, item in value.items()
        )
    if len(args) == 1:
        return all(matches_type(item, args[0]) for item in value)
    return True


__all__ = [
    "NOT_OPTIONAL",
    "CollectionKind",
    "CollectionShape",
    "closed_choices",
    "collection_shape",
    "describe_type",
    "enum_raw_value_type",
    "is_new_type",
    "is_runtime_class",
    "is_union",
    "matches_type",
    "optional_inner_type",
]
