"""percentfmt argument value model and host conversion contract."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
import numbers
from typing import Any, Optional


class ValueKind(Enum):
    """Shape of an argument as far as formatting is concerned"""

    INTEGER = "integer"
    FLOAT = "float"
    TEXT = "text"
    BYTES = "bytes"
    MAPPING = "mapping"
    SEQUENCE = "sequence"
    OTHER = "other"


def classify(value: Any) -> ValueKind:
    """Return the ValueKind of ``value``.

    Only tuples bind positionally; lists and other iterables are single values,
    the same as for the ``%`` operator.
    """
    if isinstance(value, numbers.Integral):
        return ValueKind.INTEGER
    if isinstance(value, numbers.Real):
        return ValueKind.FLOAT
    if isinstance(value, str):
        return ValueKind.TEXT
    if isinstance(value, (bytes, bytearray)):
        return ValueKind.BYTES
    if isinstance(value, tuple):
        return ValueKind.SEQUENCE
    if isinstance(value, Mapping):
        return ValueKind.MAPPING
    return ValueKind.OTHER


def type_name(value: Any) -> str:
    return type(value).__name__


class ValueConverter:
    """Host conversions used by the renderer.

    Subclass and override to change how arbitrary objects become text or
    bytes; the defaults use the Python runtime's own protocols.
    """

    def display(self, value: Any) -> str:
        return str(value)

    def debug(self, value: Any) -> str:
        return repr(value)

    def ascii_debug(self, value: Any) -> str:
        return ascii(value)

    def buffer(self, value: Any) -> Optional[bytes]:
        """Contents of ``value``'s buffer, or None if it exposes none"""
        try:
            view = memoryview(value)
        except TypeError:
            return None
        with view:
            return view.tobytes()

    def to_bytes(self, value: Any) -> Optional[bytes]:
        """Result of ``value.__bytes__()``, or None if it is not implemented"""
        if not hasattr(type(value), "__bytes__"):
            return None
        return bytes(value)

    def to_int(self, value: Any) -> int:
        return int(value)

    def to_float(self, value: Any) -> float:
        return float(value)


DEFAULT_CONVERTER = ValueConverter()
