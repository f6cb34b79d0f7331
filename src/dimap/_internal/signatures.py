from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, get_origin, get_type_hints

from dimap._internal.type_checks import is_runtime_class, normalize_key
from dimap.exceptions import InvalidCallableError
from dimap.markers import is_injected_annotation

UNANNOTATED: Any = object()
"""Sentinel dependency for parameters without a usable annotation."""

_SKIPPED_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


@dataclass(frozen=True, slots=True)
class CallParameter:
    """A parameter of an inspected callable."""

    name: str
    kind: inspect._ParameterKind
    dependency: Any
    """The normalized annotation, or ``UNANNOTATED``."""
    default: Any
    """The declared default, or ``inspect.Parameter.empty``."""
    injected: bool
    """True when the annotation carries the ``Injected`` marker."""

    @property
    def is_positional(self) -> bool:
        return self.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        )


@dataclass(frozen=True, slots=True)
class CallableInspection:
    """Injection metadata derived from a callable signature and annotations."""

    signature: inspect.Signature
    parameters: tuple[CallParameter, ...]
    return_annotation: Any

    @property
    def injected_parameters(self) -> tuple[CallParameter, ...]:
        return tuple(parameter for parameter in self.parameters if parameter.injected)

    def public_signature(self) -> inspect.Signature:
        """Build a signature that hides ``Injected[...]`` parameters."""
        hidden = {parameter.name for parameter in self.injected_parameters}
        return self.signature.replace(
            parameters=[p for p in self.signature.parameters.values() if p.name not in hidden],
        )

    def shape_result(self, result: Any) -> list[Any]:
        """Turn a call result into the list of returned values.

        A callable declared to return ``None`` returns no values, a callable
        declared to return ``tuple[...]`` returns each tuple item, and anything
        else returns its single result.
        """
        annotation = normalize_key(self.return_annotation)
        if annotation is None or annotation is type(None):
            return []
        if (get_origin(annotation) is tuple or annotation is tuple) and isinstance(result, tuple):
            return list(result)
        return [result]


@dataclass(slots=True)
class CallableInspector:
    """Inspect callables for the parameter types used by ``Registry.call``."""

    def inspect_callable(self, callable_obj: Callable[..., Any]) -> CallableInspection:
        """Build injection metadata for a callable.

        Raises:
            InvalidCallableError: If the object is not callable, has no
                retrievable signature, or its annotations reference names that
                cannot be resolved.

        """
        if not callable(callable_obj):
            raise InvalidCallableError(callable_obj, "object is not callable")
        try:
            signature = inspect.signature(callable_obj)
        except (TypeError, ValueError) as error:
            raise InvalidCallableError(callable_obj, str(error)) from error

        hints = self.resolved_annotations(callable_obj)
        parameters = tuple(
            self._build_parameter(parameter, hints)
            for parameter in signature.parameters.values()
            if parameter.kind not in _SKIPPED_KINDS
        )
        if is_runtime_class(callable_obj):
            return_annotation: Any = callable_obj
        else:
            return_annotation = hints.get("return", signature.return_annotation)
        return CallableInspection(
            signature=signature,
            parameters=parameters,
            return_annotation=return_annotation,
        )

    def resolved_annotations(self, callable_obj: Callable[..., Any]) -> dict[str, Any]:
        """Resolve callable annotations with extras.

        Classes are inspected through ``__init__`` and callable instances through
        ``__call__``. Objects that carry no annotations yield an empty mapping.
        """
        target: Any = callable_obj
        if is_runtime_class(callable_obj):
            target = callable_obj.__init__
        elif not (inspect.isfunction(callable_obj) or inspect.ismethod(callable_obj)):
            target = getattr(type(callable_obj), "__call__", callable_obj)  # noqa: B004
        try:
            return get_type_hints(target, include_extras=True)
        except NameError as error:
            raise InvalidCallableError(callable_obj, str(error)) from error
        except (AttributeError, TypeError):
            return {}

    def _build_parameter(
        self,
        parameter: inspect.Parameter,
        hints: dict[str, Any],
    ) -> CallParameter:
        annotation = hints.get(parameter.name, parameter.annotation)
        if annotation is inspect.Parameter.empty or isinstance(annotation, str):
            dependency = UNANNOTATED
        else:
            dependency = normalize_key(annotation)
        return CallParameter(
            name=parameter.name,
            kind=parameter.kind,
            dependency=dependency,
            default=parameter.default,
            injected=is_injected_annotation(annotation),
        )


__all__ = ["UNANNOTATED", "CallParameter", "CallableInspection", "CallableInspector"]
