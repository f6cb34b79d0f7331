from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeAlias

if TYPE_CHECKING:
    from dimap.types import ProviderFactory, TypeKey


@dataclass(frozen=True, slots=True)
class InstanceBinding:
    """Return ``value`` itself whenever the bound type is requested."""

    value: Any


@dataclass(frozen=True, slots=True)
class AliasBinding:
    """Resolve ``target`` instead of the bound type."""

    target: TypeKey


@dataclass(frozen=True, slots=True)
class ProviderBinding:
    """Produce values through ``factory``.

    A shared provider is replaced by an ``InstanceBinding`` holding its first
    result; an unshared provider runs on every resolution.
    """

    factory: ProviderFactory
    shared: bool


Binding: TypeAlias = "InstanceBinding | AliasBinding | ProviderBinding"


__all__ = ["AliasBinding", "Binding", "InstanceBinding", "ProviderBinding"]
