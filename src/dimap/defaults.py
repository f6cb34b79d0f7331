import asyncio
import collections
import decimal
import queue
from typing import Any

DEFAULT_INJECT_TAG = "inject"
"""Dataclass field metadata key that marks a field as injectable.

The field is marked when the value stored under the key is truthy, so
``metadata={"inject": True}`` marks a field and ``{"inject": False}`` or
``{"inject": 0}`` leaves it unmarked.
"""

DEFAULT_PRIMITIVE_TYPES: tuple[type[Any], ...] = (
    bool,
    int,
    float,
    complex,
    str,
    bytes,
    bytearray,
    decimal.Decimal,
)
"""Types whose zero value is produced by calling them without arguments."""

DEFAULT_SEQUENCE_TYPES: tuple[type[Any], ...] = (
    list,
    set,
    frozenset,
    collections.deque,
)

DEFAULT_MAPPING_TYPES: tuple[type[Any], ...] = (
    dict,
    collections.OrderedDict,
    collections.defaultdict,
)

DEFAULT_CHANNEL_TYPES: tuple[type[Any], ...] = (
    queue.Queue,
    queue.SimpleQueue,
    asyncio.Queue,
)
"""Channel-like types. ``queue.LifoQueue`` and ``queue.PriorityQueue`` match as subclasses."""

DEFAULT_COLLECTION_TYPES: tuple[type[Any], ...] = (
    *DEFAULT_SEQUENCE_TYPES,
    *DEFAULT_MAPPING_TYPES,
    *DEFAULT_CHANNEL_TYPES,
)

__all__ = [
    "DEFAULT_CHANNEL_TYPES",
    "DEFAULT_COLLECTION_TYPES",
    "DEFAULT_INJECT_TAG",
    "DEFAULT_MAPPING_TYPES",
    "DEFAULT_PRIMITIVE_TYPES",
    "DEFAULT_SEQUENCE_TYPES",
]
