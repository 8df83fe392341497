"""Decoders for loosely-typed UniFi JSON values.

The controller reports the same counter as a JSON number on one firmware and
as a numeric string on another, and a disabled device may send ``[]`` where
stats would normally be.  :class:`FlexInt` and :class:`FlexBool` keep both a
typed and a textual projection of such values::

    JSON value          FlexInt.val   FlexInt.txt
    ───────────────     ───────────   ───────────
    12                  12.0          "12"
    "12.5"              12.5          "12.5"
    "eth0"              0.0           "eth0"
    []                  0.0           ""
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

_TRUE_TOKENS = frozenset({"true", "1", "yes", "up", "enabled", "on"})


class DecodeError(ValueError):
    """A JSON value does not match any accepted shape for its field."""

    def __init__(self, field: str, kind: str) -> None:
        self.field = field
        self.kind = kind
        where = f" for field {field!r}" if field else ""
        super().__init__(f"cannot decode {kind}{where}")


def json_kind(value: Any) -> str:
    """Return the JSON type name of an already-parsed *value*."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array" if value else "empty array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def format_number(number: float) -> str:
    """Shortest positional decimal that parses back to *number*.

    ``repr`` already gives the shortest round-trip digits; ``Decimal`` turns
    them into plain notation without an exponent or trailing zeros.
    """
    return format(Decimal(repr(float(number))).normalize(), "f")


def parse_number(text: str) -> float:
    """Parse *text* as a float, returning ``0.0`` when it is not numeric."""
    if not text.isascii() or "_" in text or text != text.strip():
        return 0.0
    try:
        return float(text)
    except ValueError:
        return 0.0


@dataclass(frozen=True)
class FlexInt:
    """A number that may arrive as a JSON number, a string, or ``[]``."""

    val: float = 0.0
    txt: str = ""

    @classmethod
    def decode(cls, value: Any, path: str = "") -> "FlexInt":
        if isinstance(value, bool):
            raise DecodeError(path, json_kind(value))
        if isinstance(value, (int, float)):
            return cls(val=float(value), txt=format_number(value))
        if isinstance(value, str):
            return cls(val=parse_number(value), txt=value)
        if isinstance(value, list) and not value:
            # disabled devices report no stats
            return cls()
        raise DecodeError(path, json_kind(value))

    def __str__(self) -> str:
        return self.txt


@dataclass(frozen=True)
class FlexBool:
    """A status flag that may arrive as a boolean, a string, or a number."""

    val: bool = False
    txt: str = ""

    @classmethod
    def decode(cls, value: Any, path: str = "") -> "FlexBool":
        if isinstance(value, bool):
            return cls(val=value, txt="true" if value else "false")
        if isinstance(value, (int, float)):
            return cls(val=value != 0, txt=format_number(value))
        if isinstance(value, str):
            return cls(val=value.strip().lower() in _TRUE_TOKENS, txt=value)
        raise DecodeError(path, json_kind(value))

    def __bool__(self) -> bool:
        return self.val

    def __str__(self) -> str:
        return self.txt
