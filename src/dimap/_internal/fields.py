from __future__ import annotations

import dataclasses
import types
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, ClassVar, get_origin, get_type_hints

from dimap._internal.type_checks import normalize_key, zero_value
from dimap.exceptions import FieldExtractionError
from dimap.integrations.pydantic import (
    build_model_zero_instance,
    is_frozen_model,
    is_pydantic_model,
    iter_model_fields,
)
from dimap.markers import is_injected_annotation


@dataclass(frozen=True, slots=True)
class StructuredField:
    """Describe one annotated field of a structured type."""

    name: str
    """The attribute name on instances."""
    annotation: Any
    """The field type with ``Annotated`` metadata removed."""
    injectable: bool
    """True when the field carries the injection marker or metadata tag."""
    default_factory: Callable[[], Any] | None = None
    """Produces the field default when the field declares one."""

    @property
    def settable(self) -> bool:
        """Public fields are settable; underscore-prefixed fields are private."""
        return not self.name.startswith("_")


@dataclass(slots=True)
class StructuredFieldsExtractor:
    """Extract annotated fields from structured classes.

    Fields inherited from base classes are included in base-first order, which
    makes them participate in injection exactly like fields declared on the
    class itself.
    """

    inject_tag: str
    _cache: dict[type[Any], tuple[StructuredField, ...]] = field(default_factory=dict)

    def get_fields(self, cls: type[Any]) -> tuple[StructuredField, ...]:
        """Return the cached field descriptions of ``cls``."""
        cached = self._cache.get(cls)
        if cached is not None:
            return cached

        if is_pydantic_model(cls):
            fields = tuple(
                StructuredField(
                    name=name,
                    annotation=normalize_key(annotation),
                    injectable=injectable,
                    default_factory=default_factory,
                )
                for name, annotation, injectable, default_factory in iter_model_fields(cls)
            )
        else:
            fields = self._get_class_fields(cls)

        self._cache[cls] = fields
        return fields

    def build_zero_instance(self, cls: type[Any]) -> Any:
        """Create an instance of ``cls`` without calling ``__init__``.

        Declared defaults are kept; fields without a default get the zero value
        of their type. ``__post_init__`` hooks do not run.
        """
        fields = self.get_fields(cls)
        if is_pydantic_model(cls):
            return build_model_zero_instance(
                cls,
                {f.name: zero_value(f.annotation) for f in fields if f.default_factory is None},
            )

        instance = cls.__new__(cls)
        for f in fields:
            if f.default_factory is not None:
                value = f.default_factory()
            elif _has_class_default(cls, f.name):
                continue
            else:
                value = zero_value(f.annotation)
            object.__setattr__(instance, f.name, value)
        return instance

    def _get_class_fields(self, cls: type[Any]) -> tuple[StructuredField, ...]:
        dataclass_fields = (
            {f.name: f for f in dataclasses.fields(cls)} if dataclasses.is_dataclass(cls) else {}
        )
        result: list[StructuredField] = []
        for name, hint in self._resolved_annotations(cls).items():
            if hint is ClassVar or get_origin(hint) is ClassVar:
                continue
            if isinstance(hint, dataclasses.InitVar):
                continue
            dataclass_field = dataclass_fields.get(name)
            result.append(
                StructuredField(
                    name=name,
                    annotation=normalize_key(hint),
                    injectable=self._is_injectable(hint, dataclass_field),
                    default_factory=_dataclass_default_factory(dataclass_field),
                ),
            )
        return tuple(result)

    def _resolved_annotations(self, cls: type[Any]) -> dict[str, Any]:
        """Resolve class annotations with extras.

        Raises:
            FieldExtractionError: If an annotation cannot be evaluated.

        """
        try:
            return get_type_hints(cls, include_extras=True)
        except (NameError, TypeError) as error:
            raise FieldExtractionError(cls, error) from error

    def _is_injectable(
        self,
        hint: Any,
        dataclass_field: dataclasses.Field[Any] | None,
    ) -> bool:
        if is_injected_annotation(hint):
            return True
        if dataclass_field is None:
            return False
        return bool(dataclass_field.metadata.get(self.inject_tag))


def is_frozen_instance(instance: object) -> bool:
    """Return true when the fields of ``instance`` cannot be reassigned."""
    cls = type(instance)
    if dataclasses.is_dataclass(cls) and cls.__dataclass_params__.frozen:  # type: ignore[attr-defined]
        return True
    return is_frozen_model(cls)


def _dataclass_default_factory(
    dataclass_field: dataclasses.Field[Any] | None,
) -> Callable[[], Any] | None:
    if dataclass_field is None:
        return None
    if dataclass_field.default_factory is not dataclasses.MISSING:
        return dataclass_field.default_factory
    if dataclass_field.default is not dataclasses.MISSING:
        default = dataclass_field.default
        return lambda: default
    return None


def _has_class_default(cls: type[Any], name: str) -> bool:
    for klass in cls.__mro__:
        if name in vars(klass):
            return not isinstance(vars(klass)[name], types.MemberDescriptorType)
    return False


__all__ = ["StructuredField", "StructuredFieldsExtractor", "is_frozen_instance"]
