from __future__ import annotations

import functools
import importlib
from collections.abc import Callable, Iterator
from typing import Any

from dimap._internal.type_checks import is_runtime_class
from dimap.markers import InjectedMarker


def _load_base_model() -> type[Any] | None:
    try:
        module = importlib.import_module("pydantic")
    except ImportError:
        return None
    base_model = getattr(module, "BaseModel", None)
    if isinstance(base_model, type):
        return base_model
    return None


BASE_MODEL: type[Any] | None = _load_base_model()


def is_pydantic_model(candidate: object) -> bool:
    """Return whether a class is a Pydantic v2 model.

    dimap treats models as structured types: resolving an unregistered model
    builds it with ``model_construct`` and injects its marked fields. If
    Pydantic is not installed, this function returns ``False`` for every
    candidate.

    Args:
        candidate: Object to test.

    Returns:
        ``True`` when ``candidate`` is a runtime class subclassing
        ``pydantic.BaseModel``; otherwise ``False``.

    """
    if BASE_MODEL is None or not is_runtime_class(candidate):
        return False
    try:
        return issubclass(candidate, BASE_MODEL)
    except TypeError:
        return False


def is_frozen_model(candidate: object) -> bool:
    """Return whether a Pydantic model rejects attribute assignment."""
    if not is_pydantic_model(candidate):
        return False
    return bool(candidate.model_config.get("frozen", False))  # type: ignore[attr-defined]


def iter_model_fields(
    model: type[Any],
) -> Iterator[tuple[str, Any, bool, Callable[[], Any] | None]]:
    """Yield ``(name, annotation, injectable, default_factory)`` for each model field.

    Pydantic moves ``Annotated`` metadata into ``FieldInfo.metadata``, so the
    ``Injected`` marker is looked up there.

    Args:
        model: The Pydantic model class.

    """
    for name, field_info in model.model_fields.items():
        injectable = any(isinstance(item, InjectedMarker) for item in field_info.metadata)
        default_factory: Callable[[], Any] | None = None
        if not field_info.is_required():
            default_factory = functools.partial(field_info.get_default, call_default_factory=True)
        yield name, field_info.annotation, injectable, default_factory


def build_model_zero_instance(model: type[Any], zero_values: dict[str, Any]) -> Any:
    """Build a model without validation.

    Fields that declare a default keep it; ``zero_values`` supplies the
    remaining required fields.

    Args:
        model: The Pydantic model class.
        zero_values: Values for fields without a declared default.

    """
    return model.model_construct(**zero_values)


__all__ = [
    "BASE_MODEL",
    "build_model_zero_instance",
    "is_frozen_model",
    "is_pydantic_model",
    "iter_model_fields",
]
