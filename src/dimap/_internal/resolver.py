from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, NamedTuple

from dimap._internal.bindings import AliasBinding, Binding, InstanceBinding, ProviderBinding
from dimap._internal.fields import StructuredFieldsExtractor, is_frozen_instance
from dimap._internal.signatures import UNANNOTATED, CallableInspector
from dimap._internal.type_checks import (
    is_collection,
    is_structured,
    new_collection,
    normalize_key,
    ref_element,
    structured_origin,
    zero_value,
)
from dimap.types import Ref, TypeKey

if TYPE_CHECKING:
    from dimap.registry import Registry

logger = logging.getLogger(__name__)


class Resolved(NamedTuple):
    """A resolved value and whether a reference to it may be handed out."""

    value: Any
    addressable: bool


class Resolver:
    """Resolve type keys against one registry level.

    The resolver shares the binding mapping of its registry, so a shared
    provider is cached by replacing the registry entry itself. Parent lookups
    run on the parent's own resolver, which never sees child bindings.
    """

    def __init__(
        self,
        registry: Registry,
        bindings: dict[TypeKey, Binding],
        fields_extractor: StructuredFieldsExtractor,
    ) -> None:
        self._registry = registry
        self._bindings = bindings
        self._fields = fields_extractor
        self._inspector = CallableInspector()

    def resolve(self, key: TypeKey) -> Any:
        """Return a value for ``key``; unbound types degrade to defaults."""
        return self.build(key).value

    def build(self, key: TypeKey) -> Resolved:
        key = normalize_key(key)

        binding = self._bindings.get(key)
        if binding is not None:
            return self._build_bound(key, binding)

        parent = self._registry.get_parent()
        if parent is not None:
            return parent._resolver.build(key)  # noqa: SLF001

        return self._build_fallback(key)

    def inject(self, target: Any) -> None:
        """Set every public, marked field of a structured value.

        ``Ref`` indirections are followed to the referenced value. Targets that
        are not structured, and frozen instances, are left untouched.
        """
        while isinstance(target, Ref):
            target = target.value

        cls = type(target)
        if not is_structured(cls) or is_frozen_instance(target):
            return

        for structured_field in self._fields.get_fields(cls):
            if structured_field.injectable and structured_field.settable:
                setattr(target, structured_field.name, self.resolve(structured_field.annotation))

    def call(self, callable_obj: Callable[..., Any]) -> list[Any]:
        """Call ``callable_obj`` with a resolved value for each parameter."""
        inspection = self._inspector.inspect_callable(callable_obj)

        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for parameter in inspection.parameters:
            if parameter.dependency is not UNANNOTATED:
                value = self.resolve(parameter.dependency)
            elif parameter.default is not inspect.Parameter.empty:
                value = parameter.default
            else:
                value = None

            if parameter.is_positional:
                args.append(value)
            else:
                kwargs[parameter.name] = value

        return inspection.shape_result(callable_obj(*args, **kwargs))

    def _build_bound(self, key: TypeKey, binding: Binding) -> Resolved:
        if isinstance(binding, AliasBinding):
            return self.build(binding.target)

        if isinstance(binding, ProviderBinding):
            value = binding.factory(self._registry)
            if binding.shared:
                self._bindings[key] = InstanceBinding(value)
                logger.debug("Cached shared provider result for %r", key)
            return Resolved(value, addressable=False)

        return Resolved(binding.value, addressable=False)

    def _build_fallback(self, key: TypeKey) -> Resolved:
        ref_key = Ref[key]  # type: ignore[valid-type]
        if ref_key in self._bindings:
            reference = self.build(ref_key).value
            if isinstance(reference, Ref) and reference.value is not None:
                return Resolved(reference.value, addressable=True)
            return Resolved(zero_value(key), addressable=True)

        element = ref_element(key)
        if element is not None:
            resolved = self.build(element)
            if resolved.addressable:
                return Resolved(Ref[element](resolved.value), addressable=False)  # type: ignore[valid-type]
        elif is_structured(key):
            logger.debug("No binding for %r, building a default instance", key)
            instance = self._fields.build_zero_instance(structured_origin(key))
            self.inject(instance)
            return Resolved(instance, addressable=True)
        elif is_collection(key):
            logger.debug("No binding for %r, building an empty collection", key)
            return Resolved(new_collection(key), addressable=False)

        logger.debug("No binding for %r, using its zero value", key)
        return Resolved(zero_value(key), addressable=True)


__all__ = ["Resolved", "Resolver"]
