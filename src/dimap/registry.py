from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar, overload

from dimap._internal.bindings import AliasBinding, Binding, InstanceBinding, ProviderBinding
from dimap._internal.fields import StructuredFieldsExtractor
from dimap._internal.resolver import Resolver
from dimap._internal.type_checks import (
    is_convertible,
    is_interface,
    is_type_expression,
    normalize_key,
    ref_element,
    type_of,
)
from dimap.defaults import DEFAULT_INJECT_TAG
from dimap.exceptions import IncompatibleBindingError, InvalidCallableError, NotAnInterfaceError
from dimap.markers import strip_annotated
from dimap.types import ProviderFactory, TypeKey

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])

logger = logging.getLogger(__name__)


class Registry:
    """Map types to values and resolve values for requested types.

    Using a registry involves two steps. First, register values, types or
    providers under the types that should support injection. Second, ask for
    values with ``make``, inject marked fields with ``inject``, or call a
    function with resolved arguments with ``call``.

    A type is the only binding key: ``Annotated`` metadata is ignored and
    registering the same type twice replaces the earlier binding. A type with
    no binding is looked up in the parent registry, if any, and otherwise
    degrades to a default: structured classes are built field by field with
    their marked fields injected, collections are created empty, and every
    other type produces its zero value. Resolution never fails because a type
    is missing, so enable ``DEBUG`` logging for ``dimap`` to see defaults being
    used.

    A registry is not thread-safe. Registration and resolution mutate the
    binding map (shared providers are cached in place), so callers must not
    use one registry, or registries linked through ``parent``, from several
    threads at once without their own locking.

    Examples:
        .. code-block:: python

            registry = Registry()
            registry.register_as(Foo("hello"), interface_of(Bar))
            registry.call(lambda bar: ...)  # bar: Bar receives Foo("hello")

    """

    def __init__(
        self,
        parent: Registry | None = None,
        *,
        inject_tag: str = DEFAULT_INJECT_TAG,
    ) -> None:
        """Initialize a registry.

        Args:
            parent: Registry consulted for types without a binding at this level.
            inject_tag: Dataclass field metadata key that marks a field as
                injectable, in addition to ``Injected[...]`` annotations.

        """
        self._parent = parent
        self._bindings: dict[TypeKey, Binding] = {}
        self._resolver = Resolver(
            registry=self,
            bindings=self._bindings,
            fields_extractor=StructuredFieldsExtractor(inject_tag=inject_tag),
        )
        self.inject_tag = inject_tag

    @property
    def parent(self) -> Registry | None:
        """The registry consulted for types without a binding at this level."""
        return self._parent

    @parent.setter
    def parent(self, parent: Registry | None) -> None:
        self.set_parent(parent)

    def get_parent(self) -> Registry | None:
        """Return the parent registry, if any."""
        return self._parent

    def set_parent(self, parent: Registry | None) -> None:
        """Link this registry to ``parent``, or unlink it by passing ``None``."""
        self._parent = parent
        logger.debug("Set parent of %r to %r", self, parent)

    def child(self, *, inject_tag: str | None = None) -> Registry:
        """Create a registry whose parent is this registry."""
        return Registry(
            parent=self,
            inject_tag=self.inject_tag if inject_tag is None else inject_tag,
        )

    def has_registered(self, key: TypeKey) -> bool:
        """Return whether this registry, not its parents, has a binding for ``key``."""
        return normalize_key(key) in self._bindings

    def unregister(self, key: TypeKey) -> None:
        """Remove the binding for ``key`` from this registry only."""
        if self._bindings.pop(normalize_key(key), None) is not None:
            logger.debug("Unregistered %r", key)

    def register(self, value: Any) -> None:
        """Bind ``value`` to its own type.

        Instances of parametrized generics, such as ``Ref[Foo](foo)``, are bound
        to the parametrized type.
        """
        key = type_of(value)
        self._bindings[key] = InstanceBinding(value)
        logger.debug("Registered instance of %r", key)

    def register_as(self, value_or_type: Any, target: TypeKey) -> None:
        """Bind ``target`` to a value or to another type.

        Classes and other type expressions create an alias: resolving ``target``
        resolves that type instead. Any other object is returned as is whenever
        ``target`` is requested.

        Args:
            value_or_type: The value or type that satisfies ``target``.
            target: The type being bound, typically a protocol or an ABC.

        Raises:
            IncompatibleBindingError: If ``value_or_type`` is not convertible to
                ``target``. No binding is installed in that case.

        """
        key = normalize_key(target)
        if is_type_expression(value_or_type):
            source = normalize_key(value_or_type)
            if not is_convertible(source, key, source_is_type=True):
                raise IncompatibleBindingError(source, key)
            self._bindings[key] = AliasBinding(source)
            logger.debug("Registered %r as an alias of %r", key, source)
            return

        if not is_convertible(value_or_type, key, source_is_type=False):
            raise IncompatibleBindingError(value_or_type, key)
        self._bindings[key] = InstanceBinding(value_or_type)
        logger.debug("Registered instance of %r as %r", type_of(value_or_type), key)

    def register_provider(
        self,
        factory: ProviderFactory,
        target: TypeKey,
        shared: bool = False,  # noqa: FBT001,FBT002
    ) -> None:
        """Bind ``target`` to a factory.

        The factory receives this registry and returns the value. A shared
        provider runs once: its first result replaces the provider binding.
        An unshared provider runs on every resolution.

        Raises:
            InvalidCallableError: If ``factory`` is not callable.

        """
        if not callable(factory):
            raise InvalidCallableError(factory, "provider must be callable")
        key = normalize_key(target)
        self._bindings[key] = ProviderBinding(factory=factory, shared=shared)
        logger.debug("Registered %s provider for %r", "shared" if shared else "unshared", key)

    def provider(self, target: TypeKey, *, shared: bool = False) -> Callable[[F], F]:
        """Register the decorated function as a provider for ``target``.

        Examples:
            .. code-block:: python

                @registry.provider(Database, shared=True)
                def make_database(registry: Registry) -> Database:
                    return Database(registry.make(Settings).dsn)

        """

        def decorator(factory: F) -> F:
            self.register_provider(factory, target, shared)
            return factory

        return decorator

    @overload
    def make(self, key: type[T]) -> T: ...

    @overload
    def make(self, key: Any) -> Any: ...

    def make(self, key: Any) -> Any:
        """Return a ready-to-use value of ``key`` with its marked fields injected.

        A bound type returns its registered value, alias target or provider
        result, so the value is not always new.
        """
        return self._resolver.resolve(key)

    def resolve(self, key: Any) -> Any:
        """Return a value for ``key``. Same as ``make``."""
        return self._resolver.resolve(key)

    def inject(self, target: Any) -> None:
        """Set the public fields of ``target`` marked for injection.

        Fields marked with ``Injected[...]`` or with the registry's metadata tag
        receive ``make(field type)``. Non-structured targets are ignored.
        """
        self._resolver.inject(target)

    def call(self, callable_obj: Callable[..., Any]) -> list[Any]:
        """Call a function with a resolved value for each parameter.

        Returns:
            The returned values: empty for a function declared to return
            ``None``, the items of a declared ``tuple[...]`` result, and the
            single result otherwise.

        Raises:
            InvalidCallableError: If ``callable_obj`` is not callable or cannot
                be inspected.

        """
        return self._resolver.call(callable_obj)

    def __contains__(self, key: TypeKey) -> bool:
        return self.has_registered(key)

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} bindings={len(self._bindings)} at {id(self):#x}>"


def interface_of(marker: Any) -> type[Any]:
    """Return the interface type named by ``marker``.

    ``Ref[...]`` and ``Annotated[...]`` layers are unwrapped first, so
    ``interface_of(Ref[Writer])`` returns ``Writer``.

    Raises:
        NotAnInterfaceError: If the unwrapped marker is not a ``Protocol`` or an
            abstract base class.

    """
    candidate = strip_annotated(marker)
    while (element := ref_element(candidate)) is not None:
        candidate = strip_annotated(element)
    if not is_interface(candidate):
        raise NotAnInterfaceError(marker)
    return candidate


__all__ = ["Registry", "interface_of"]
