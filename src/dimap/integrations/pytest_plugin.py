from __future__ import annotations

import functools
import inspect
from collections.abc import Callable, Iterator
from contextlib import suppress
from typing import Any, cast

import pytest

from dimap._internal.signatures import CallableInspector, CallParameter
from dimap.registry import Registry

_DIMAP_REGISTRY_ATTR = "_dimap_registry"
_DIMAP_INJECTED_PARAMETERS_ATTR = "__dimap_pytest_injected_parameters__"
_DIMAP_ORIGINAL_SIGNATURE_ATTR = "__dimap_pytest_original_signature__"
_CALLABLE_INSPECTOR = CallableInspector()


@pytest.fixture()
def dimap_registry() -> Registry:
    """Create a per-test registry used by the plugin.

    Tests that use ``Injected[...]`` parameters resolve them from this registry.
    Override the fixture to register bindings or to link a parent registry.

    Returns:
        A new ``Registry`` instance.

    """
    return Registry()


@pytest.fixture(autouse=True)
def _dimap_state(
    request: pytest.FixtureRequest,
    dimap_registry: Registry,
) -> None:
    """Store plugin state on the test node for hook access."""
    node = cast("Any", request.node)
    setattr(node, _DIMAP_REGISTRY_ATTR, dimap_registry)


def pytest_pycollect_makeitem(
    collector: Any,
    name: str,
    obj: object,
) -> Any | None:
    """Hide ``Injected[...]`` parameters from pytest fixture name matching.

    Args:
        collector: Pytest collector instance.
        name: Collected object name.
        obj: Candidate object.

    Returns:
        ``None`` to continue default collection flow.

    """
    if not callable(obj):
        return None
    if not collector.istestfunction(obj, name):
        return None

    inspection = _CALLABLE_INSPECTOR.inspect_callable(cast("Callable[..., Any]", obj))
    if not inspection.injected_parameters:
        return None

    obj_as_any = cast("Any", obj)
    obj_as_any.__dict__[_DIMAP_INJECTED_PARAMETERS_ATTR] = inspection.injected_parameters
    obj_as_any.__dict__[_DIMAP_ORIGINAL_SIGNATURE_ATTR] = inspection.signature
    obj_as_any.__signature__ = inspection.public_signature()
    return None


@pytest.hookimpl(hookwrapper=True, tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> Iterator[None]:
    """Wrap test function execution to resolve ``Injected[...]`` parameters.

    Injected parameters are resolved with ``Registry.make`` from the registry
    attached to the test node. Without injected parameters or attached
    registry this hook is a no-op.

    Args:
        pyfuncitem: Collected pytest function item.

    Yields:
        Control back to pytest around test execution.

    """
    original_callable = cast("Callable[..., Any]", pyfuncitem.obj)
    original_callable_as_any = cast("Any", original_callable)
    injected_parameters = cast(
        "tuple[CallParameter, ...] | None",
        getattr(original_callable_as_any, _DIMAP_INJECTED_PARAMETERS_ATTR, None),
    )
    if injected_parameters is None:
        injected_parameters = _CALLABLE_INSPECTOR.inspect_callable(
            original_callable,
        ).injected_parameters
    if not injected_parameters:
        yield
        return

    registry = cast("Registry | None", getattr(pyfuncitem, _DIMAP_REGISTRY_ATTR, None))
    if registry is None:
        yield
        return

    had_signature_override = hasattr(original_callable_as_any, "__signature__")
    signature_override = cast("Any", getattr(original_callable_as_any, "__signature__", None))
    original_signature = cast(
        "inspect.Signature | None",
        getattr(original_callable_as_any, _DIMAP_ORIGINAL_SIGNATURE_ATTR, None),
    )
    if original_signature is not None:
        original_callable_as_any.__signature__ = original_signature

    try:
        pyfuncitem.obj = _bind_injected(original_callable, registry, injected_parameters)
    finally:
        if had_signature_override:
            original_callable_as_any.__signature__ = signature_override
        else:
            with suppress(AttributeError):
                del original_callable_as_any.__signature__

    try:
        yield
    finally:
        pyfuncitem.obj = original_callable


def _bind_injected(
    original: Callable[..., Any],
    registry: Registry,
    injected_parameters: tuple[CallParameter, ...],
) -> Callable[..., Any]:
    def resolve_missing(kwargs: dict[str, Any]) -> dict[str, Any]:
        for parameter in injected_parameters:
            if parameter.name not in kwargs:
                kwargs[parameter.name] = registry.make(parameter.dependency)
        return kwargs

    if inspect.iscoroutinefunction(original):

        @functools.wraps(original)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            return await original(*args, **resolve_missing(kwargs))

        return async_wrapper

    @functools.wraps(original)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return original(*args, **resolve_missing(kwargs))

    return wrapper
