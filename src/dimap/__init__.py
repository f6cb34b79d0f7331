from dimap.exceptions import (
    DimapError,
    FieldExtractionError,
    IncompatibleBindingError,
    InvalidCallableError,
    NotAnInterfaceError,
)
from dimap.markers import Injected
from dimap.registry import Registry, interface_of
from dimap.types import Ref

__all__ = [
    "DimapError",
    "FieldExtractionError",
    "IncompatibleBindingError",
    "Injected",
    "InvalidCallableError",
    "NotAnInterfaceError",
    "Ref",
    "Registry",
    "interface_of",
]
