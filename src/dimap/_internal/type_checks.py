from __future__ import annotations

import datetime
import decimal
import inspect
import pathlib
import types
import uuid
from enum import Enum
from typing import Any, Literal, NewType, TypeGuard, Union, get_args, get_origin

from typing_extensions import get_protocol_members, is_protocol

from dimap.defaults import DEFAULT_COLLECTION_TYPES, DEFAULT_PRIMITIVE_TYPES
from dimap.markers import strip_annotated
from dimap.types import Ref

_NON_STRUCTURED_BASE_TYPES: tuple[type[Any], ...] = (
    pathlib.PurePath,
    datetime.datetime,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    uuid.UUID,
    decimal.Decimal,
    tuple,
    Enum,
    Ref,
    type,
    types.UnionType,
)
_NUMERIC_PROMOTIONS: dict[type[Any], tuple[type[Any], ...]] = {
    int: (float, complex),
    float: (complex,),
}
_UNION_ORIGINS: tuple[Any, ...] = (Union, types.UnionType)
_TUPLE_ELLIPSIS_ARGS = 2


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def normalize_key(key: Any) -> Any:
    """Return the binding key for a type expression with ``Annotated`` layers removed."""
    return strip_annotated(key)


def is_type_expression(candidate: object) -> bool:
    """Return true when candidate denotes a type rather than a plain value."""
    if candidate is Any or is_runtime_class(candidate):
        return True
    if isinstance(candidate, NewType):
        return True
    return get_origin(candidate) is not None


def type_of(value: object) -> Any:
    """Return the binding key describing a runtime value.

    Instances of parametrized generics keep their parameters through
    ``__orig_class__``. A bare ``Ref`` is keyed by the type of the value it holds.
    """
    orig_class = getattr(value, "__orig_class__", None)
    if orig_class is not None:
        return orig_class
    if type(value) is Ref and value.value is not None:  # type: ignore[attr-defined]
        return Ref[type_of(value.value)]  # type: ignore[attr-defined,misc]
    return type(value)


def ref_element(key: Any) -> Any | None:
    """Return ``T`` for ``Ref[T]`` (``Any`` for a bare ``Ref``), otherwise None."""
    if key is Ref:
        return Any
    if get_origin(key) is Ref:
        return get_args(key)[0]
    return None


def is_interface(candidate: object) -> TypeGuard[type[Any]]:
    """Return true for capability-set types: protocols and abstract base classes."""
    if not is_runtime_class(candidate):
        return False
    return is_protocol(candidate) or inspect.isabstract(candidate)


def is_union(key: Any) -> bool:
    return get_origin(key) in _UNION_ORIGINS


def is_collection(key: Any) -> bool:
    """Return true for sequence, associative-map and channel-like types."""
    origin = get_origin(key) or key
    if not is_runtime_class(origin):
        return False
    return issubclass(origin, DEFAULT_COLLECTION_TYPES)


def new_collection(key: Any) -> Any:
    """Return a new empty instance of a collection type."""
    origin = get_origin(key) or key
    return origin()


def structured_origin(key: Any) -> Any:
    """Return the class to build for ``key``: the origin of a parametrized generic."""
    return get_origin(key) or key


def is_structured(key: Any) -> bool:
    """Return true when key is a record-like class that can be built field by field.

    Parametrized user generics such as ``Box[int]`` are classified by their
    origin class.
    """
    key = structured_origin(key)
    if key is Any or not is_runtime_class(key):
        return False
    if key.__module__ == "builtins":
        return False
    if is_interface(key):
        return False
    if issubclass(key, DEFAULT_PRIMITIVE_TYPES) or issubclass(key, DEFAULT_COLLECTION_TYPES):
        return False
    return not issubclass(key, _NON_STRUCTURED_BASE_TYPES)


def zero_value(key: Any) -> Any:  # noqa: PLR0911
    """Return the default value of a type without consulting any registry.

    Primitive types produce their empty value, enums their first member,
    ``Literal`` its first option and fixed-size tuples a tuple of zeros.
    Every other type (classes, protocols, unions, callables, references)
    produces ``None``.
    """
    key = normalize_key(key)
    if isinstance(key, NewType):
        return zero_value(key.__supertype__)

    origin = get_origin(key)
    if origin is Literal:
        return get_args(key)[0]
    if origin is tuple:
        args = get_args(key)
        if not args or args == ((),):
            return ()
        if len(args) == _TUPLE_ELLIPSIS_ARGS and args[1] is Ellipsis:
            return ()
        return tuple(zero_value(arg) for arg in args)
    if key is tuple:
        return ()

    if not is_runtime_class(key):
        return None
    if issubclass(key, Enum):
        members = list(key)
        return members[0] if members else None
    if issubclass(key, DEFAULT_PRIMITIVE_TYPES):
        return key()
    return None


def is_convertible(source: object, target: Any, *, source_is_type: bool) -> bool:
    """Return whether a value or a type can be bound under ``target``.

    Args:
        source: The value, or the type when ``source_is_type`` is set.
        target: The binding key the source is registered against.
        source_is_type: Treat ``source`` as a type expression instead of a value.

    """
    if source_is_type:
        return _is_type_convertible(normalize_key(source), normalize_key(target))
    return _is_value_convertible(source, normalize_key(target))


def _is_type_convertible(source: Any, target: Any) -> bool:  # noqa: PLR0911
    if target is Any or target is object or source == target:
        return True
    if is_union(source):
        return all(_is_type_convertible(member, target) for member in get_args(source))
    if is_union(target):
        return any(_is_type_convertible(source, member) for member in get_args(target))

    source_origin = get_origin(source) or source
    if is_runtime_class(target) and is_protocol(target):
        return _satisfies_protocol(source_origin, target)

    if get_origin(target) is not None:
        if get_origin(source) is None or get_args(source) != get_args(target):
            return False
        return _is_subclass(source_origin, get_origin(target))

    if is_runtime_class(target):
        return _is_subclass(source_origin, target) or _is_numeric_promotion(source_origin, target)
    return False


def _is_value_convertible(value: object, target: Any) -> bool:  # noqa: PLR0911
    if target is Any or target is object:
        return True
    if is_union(target):
        return any(_is_value_convertible(value, member) for member in get_args(target))
    if value is None:
        return target is None or target is type(None)

    if is_runtime_class(target) and is_protocol(target):
        return _satisfies_protocol(value, target)

    element = ref_element(target)
    if element is not None:
        if not isinstance(value, Ref):
            return False
        return value.value is None or _is_value_convertible(value.value, normalize_key(element))

    origin = get_origin(target)
    if origin is not None:
        return is_runtime_class(origin) and isinstance(value, origin)
    if is_runtime_class(target):
        return isinstance(value, target) or _is_numeric_promotion(type(value), target)
    return _is_type_convertible(type_of(value), target)


def _satisfies_protocol(candidate: object, protocol: type[Any]) -> bool:
    members = get_protocol_members(protocol)
    if is_runtime_class(candidate):
        annotated = {
            name for klass in candidate.__mro__ for name in getattr(klass, "__annotations__", {})
        }
        return all(hasattr(candidate, name) or name in annotated for name in members)
    return all(hasattr(candidate, name) for name in members)


def _is_subclass(source: Any, target: Any) -> bool:
    if not is_runtime_class(source) or not is_runtime_class(target):
        return False
    try:
        return issubclass(source, target)
    except TypeError:
        return False


def _is_numeric_promotion(source: Any, target: Any) -> bool:
    if not is_runtime_class(source):
        return False
    return any(
        issubclass(source, numeric) and target in promotions
        for numeric, promotions in _NUMERIC_PROMOTIONS.items()
    )


__all__ = [
    "is_collection",
    "is_convertible",
    "is_interface",
    "is_runtime_class",
    "is_structured",
    "is_type_expression",
    "is_union",
    "new_collection",
    "normalize_key",
    "ref_element",
    "structured_origin",
    "type_of",
    "zero_value",
]
