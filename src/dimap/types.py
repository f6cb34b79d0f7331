from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Generic, TypeAlias, TypeVar

if TYPE_CHECKING:
    from dimap.registry import Registry

T = TypeVar("T")

TypeKey: TypeAlias = Any
"""A type expression used as a binding key (class, protocol, parametrized generic, ``Ref[T]``)."""

ProviderFactory: TypeAlias = "Callable[[Registry], Any]"
"""A factory that receives the resolving registry and returns a value of the bound type."""


class Ref(Generic[T]):
    """A mutable reference to a value of type ``T``.

    ``Ref[T]`` plays the pointer role during resolution. Registering a
    ``Ref[Foo](foo)`` lets requests for ``Foo`` dereference it, and requesting
    ``Ref[Foo]`` for an unregistered ``Foo`` produces a reference to a freshly
    built ``Foo``. Registering ``foo`` itself never satisfies ``Ref[Foo]``.

    Instantiate through the parametrized form so the reference keeps its type
    parameter, for example ``Ref[Foo](Foo())``; a bare ``Ref(foo)`` is keyed by
    the type of the value it holds.

    Examples:
        .. code-block:: python

            registry.register(Ref[Context](Context(data="abc")))
            context = registry.make(Context)

    """

    def __init__(self, value: T | None = None) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r})"
