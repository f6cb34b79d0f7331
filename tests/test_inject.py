"""Tests for injecting marked fields into existing values."""

from dataclasses import dataclass, field
from typing import Protocol

from dimap import Injected, Ref, Registry


class Bar(Protocol):
    def test(self, value: int) -> str: ...


@dataclass
class Foo:
    a: str = ""

    def test(self, value: int) -> str:
        return self.a


@dataclass
class Embedded:
    foo: Injected[Foo] = None


@dataclass
class Controller(Embedded):
    bar: Injected[Bar] = None
    plain: Foo | None = None
    _hidden: Injected[Bar] = None


@dataclass
class Tagged:
    foo: Foo = field(default=None, metadata={"inject": True})
    wired: Foo = field(default=None, metadata={"wire": True})
    disabled: Foo = field(default=None, metadata={"inject": False})


@dataclass(frozen=True)
class FrozenController:
    foo: Injected[Foo] = None


@dataclass
class Middle:
    foo: Injected[Foo] = None
    count: int = 0


@dataclass
class Outer:
    middle: Injected[Middle] = None
    items: Injected[list[Foo]] = None


class Service:
    bar: Injected[Bar]
    name: str = "service"


def test_only_public_marked_fields_are_injected(registry: Registry) -> None:
    registry.register(Foo("foo"))
    registry.register_as(Foo("bar"), Bar)

    controller = Controller()
    registry.inject(controller)

    assert controller.foo.a == "foo"
    assert controller.bar.a == "bar"
    assert controller.plain is None
    assert controller._hidden is None  # noqa: SLF001


def test_metadata_tag_marks_fields(registry: Registry) -> None:
    registry.register(Foo("tagged"))

    tagged = Tagged()
    registry.inject(tagged)

    assert tagged.foo.a == "tagged"
    assert tagged.wired is None
    assert tagged.disabled is None


def test_custom_inject_tag_replaces_default_tag() -> None:
    registry = Registry(inject_tag="wire")
    registry.register(Foo("wired"))

    tagged = Tagged()
    registry.inject(tagged)

    assert tagged.foo is None
    assert tagged.wired.a == "wired"


def test_injected_annotation_works_with_any_tag() -> None:
    registry = Registry(inject_tag="wire")
    registry.register(Foo("marked"))

    controller = Controller()
    registry.inject(controller)

    assert controller.foo.a == "marked"


def test_reference_target_is_followed(registry: Registry) -> None:
    registry.register(Foo("through ref"))
    controller = Controller()

    registry.inject(Ref[Controller](controller))

    assert controller.foo.a == "through ref"


def test_non_structured_targets_are_ignored(registry: Registry) -> None:
    registry.register(Foo("ignored"))
    values: list[Foo] = []

    registry.inject(values)
    registry.inject(5)
    registry.inject("text")
    registry.inject(None)
    registry.inject(Ref[Foo](None))

    assert values == []


def test_frozen_targets_are_ignored(registry: Registry) -> None:
    registry.register(Foo("frozen"))

    frozen = FrozenController()
    registry.inject(frozen)

    assert frozen.foo is None


def test_unregistered_field_types_are_built_recursively(registry: Registry) -> None:
    registry.register(Foo("deep"))

    outer = Outer()
    registry.inject(outer)

    assert outer.middle.foo.a == "deep"
    assert outer.middle.count == 0
    assert outer.items == []


def test_registered_field_value_is_not_reinjected(registry: Registry) -> None:
    registry.register(Foo("deep"))
    middle = Middle()
    registry.register(middle)

    outer = Outer()
    registry.inject(outer)

    assert outer.middle is middle
    assert middle.foo is None


def test_existing_field_values_are_overwritten(registry: Registry) -> None:
    registry.register(Foo("new"))

    controller = Controller(foo=Foo("old"))
    registry.inject(controller)

    assert controller.foo.a == "new"


def test_plain_class_annotations_are_injected(registry: Registry) -> None:
    registry.register_as(Foo("plain"), Bar)

    service = Service()
    registry.inject(service)

    assert service.bar.test(0) == "plain"
    assert service.name == "service"


def test_make_builds_plain_class_and_keeps_class_defaults(registry: Registry) -> None:
    registry.register_as(Foo("made"), Bar)

    service = registry.make(Service)

    assert isinstance(service, Service)
    assert service.bar.a == "made"
    assert service.name == "service"
    assert "name" not in vars(service)


def test_inject_resolves_through_parent(
    parent_registry: Registry,
    child_registry: Registry,
) -> None:
    parent_registry.register(Foo("parent"))

    controller = Controller()
    child_registry.inject(controller)

    assert controller.foo.a == "parent"
