"""Tests for registering, inspecting and removing bindings."""

import queue
from dataclasses import dataclass
from typing import Annotated, Any, Protocol

import pytest

from dimap import IncompatibleBindingError, InvalidCallableError, Ref, Registry, interface_of


class Bar(Protocol):
    def test(self, value: int) -> str: ...


class Writer(Protocol):
    def write(self, text: str) -> str: ...


@dataclass
class Foo:
    a: str = ""

    def test(self, value: int) -> str:
        return self.a


@pytest.mark.parametrize(
    ("value", "expected_key"),
    [
        (100, int),
        ("abc", str),
        (True, bool),
        (1.5, float),
        (Foo(), Foo),
        (Foo("x"), Foo),
        (Ref[Foo](Foo()), Ref[Foo]),
        (Ref(Foo()), Ref[Foo]),
        ([Foo()], list),
        ({"a": Foo()}, dict),
        (queue.Queue(), queue.Queue),
        (None, type(None)),
    ],
)
def test_register_binds_value_to_its_own_type(
    registry: Registry,
    value: Any,
    expected_key: Any,
) -> None:
    registry.register(value)

    assert registry.has_registered(expected_key)
    assert len(registry) == 1


def test_register_as_binds_only_the_target_type(registry: Registry) -> None:
    foo = Foo()
    bar_type = interface_of(Bar)

    registry.register_as(foo, bar_type)

    assert registry.has_registered(bar_type)
    assert not registry.has_registered(Foo)


def test_register_as_rejects_incompatible_value(registry: Registry) -> None:
    with pytest.raises(IncompatibleBindingError) as exc_info:
        registry.register_as(Foo(), interface_of(Writer))

    assert exc_info.value.target is Writer
    assert not registry.has_registered(Writer)


def test_register_as_rejects_incompatible_type(registry: Registry) -> None:
    with pytest.raises(IncompatibleBindingError):
        registry.register_as(Foo, interface_of(Writer))

    assert not registry.has_registered(Writer)


def test_register_as_rejects_value_of_unrelated_class(registry: Registry) -> None:
    with pytest.raises(IncompatibleBindingError):
        registry.register_as("abc", int)


def test_register_as_accepts_numeric_promotion(registry: Registry) -> None:
    registry.register_as(3, float)

    assert registry.make(float) == 3


def test_register_as_keeps_existing_binding_on_failure(registry: Registry) -> None:
    class Pen:
        def write(self, text: str) -> str:
            return text

    pen = Pen()
    registry.register_as(pen, Writer)

    with pytest.raises(IncompatibleBindingError):
        registry.register_as(Foo(), Writer)

    assert registry.make(Writer) is pen


def test_register_provider_binds_target_not_factory_type(registry: Registry) -> None:
    def factory(_: Registry) -> Foo:
        return Foo()

    registry.register_provider(factory, interface_of(Bar), shared=True)

    assert registry.has_registered(Bar)
    assert not registry.has_registered(type(factory))


def test_register_provider_rejects_non_callable(registry: Registry) -> None:
    with pytest.raises(InvalidCallableError):
        registry.register_provider(Foo(), Foo)  # type: ignore[arg-type]

    assert not registry.has_registered(Foo)


def test_provider_decorator_registers_and_returns_function(registry: Registry) -> None:
    @registry.provider(Foo, shared=True)
    def make_foo(_: Registry) -> Foo:
        return Foo("decorated")

    assert registry.has_registered(Foo)
    assert make_foo(registry).a == "decorated"
    assert registry.make(Foo).a == "decorated"


def test_unregister_removes_binding(registry: Registry) -> None:
    registry.register_as(Foo(), Bar)

    registry.unregister(Bar)

    assert not registry.has_registered(Bar)
    assert Bar not in registry


def test_unregister_missing_type_is_noop(registry: Registry) -> None:
    registry.unregister(Foo)

    assert len(registry) == 0


def test_registration_overwrites_silently(registry: Registry) -> None:
    registry.register(Foo("first"))
    registry.register(Foo("second"))

    assert len(registry) == 1
    assert registry.make(Foo).a == "second"


def test_annotated_metadata_is_not_part_of_the_key(registry: Registry) -> None:
    registry.register(Foo("abc"))

    assert registry.has_registered(Annotated[Foo, "primary"])
    assert registry.make(Annotated[Foo, "replica"]).a == "abc"


def test_has_registered_ignores_parent_bindings(
    parent_registry: Registry,
    child_registry: Registry,
) -> None:
    parent_registry.register(Foo())

    assert parent_registry.has_registered(Foo)
    assert not child_registry.has_registered(Foo)


def test_parent_link_can_be_read_and_reassigned() -> None:
    registry = Registry()
    assert registry.get_parent() is None
    assert registry.parent is None

    parent = Registry()
    registry.set_parent(parent)
    assert registry.get_parent() is parent

    other = Registry()
    registry.parent = other
    assert registry.get_parent() is other

    registry.set_parent(None)
    assert registry.parent is None


def test_child_links_to_creating_registry(registry: Registry) -> None:
    child = registry.child()

    assert child.parent is registry
    assert child.inject_tag == registry.inject_tag


def test_child_can_override_inject_tag() -> None:
    registry = Registry(inject_tag="wire")

    assert registry.child().inject_tag == "wire"
    assert registry.child(inject_tag="inject").inject_tag == "inject"
