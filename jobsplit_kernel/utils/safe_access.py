"""
Safe, type-checked extraction from loosely-typed property bags.

Every component that reads caller-supplied options or loose job
descriptors goes through ``safe_get``.  A value that is missing or of the
wrong kind is replaced by the caller's default; nothing here raises for
bad input.

Accepted shapes per kind:

    STRING   -- ``str``
    INTEGER  -- ``int`` (not ``bool``), integral ``float``, or a string
                of digits with optional sign
    NUMBER   -- ``int`` / ``float`` (not ``bool``), or a numeric string
    BOOLEAN  -- ``bool``, ``0`` / ``1``, or one of the strings
                "true"/"false"/"1"/"0"/"yes"/"no"/"on"/"off"
    MAPPING  -- any ``collections.abc.Mapping``
    LIST     -- ``list`` or ``tuple``
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from enum import Enum
from typing import Any

_MISSING = object()

_INTEGER_TEXT = re.compile(r"[+-]?[0-9]+")

_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "off"})


class ValueKind(str, Enum):
    """Expected kind of a property-bag value."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    MAPPING = "mapping"
    LIST = "list"


def lookup(bag: Mapping[str, Any], key: str, default: Any = None) -> Any:
    """Return ``bag[key]`` comparing keys case-insensitively.

    An exact match wins over a case-folded one.
    """
    if key in bag:
        return bag[key]
    folded = key.casefold()
    for candidate, value in bag.items():
        if isinstance(candidate, str) and candidate.casefold() == folded:
            return value
    return default


def coerce(value: Any, kind: ValueKind) -> Any:
    """Coerce ``value`` to ``kind`` or return the ``_MISSING`` sentinel."""
    if kind is ValueKind.STRING:
        return value if isinstance(value, str) else _MISSING

    if kind is ValueKind.INTEGER:
        if isinstance(value, bool):
            return _MISSING
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value) if value.is_integer() else _MISSING
        if isinstance(value, str):
            text = value.strip()
            if _INTEGER_TEXT.fullmatch(text):
                try:
                    return int(text)
                except ValueError:
                    # Past the interpreter's integer string length limit
                    return _MISSING
        return _MISSING

    if kind is ValueKind.NUMBER:
        if isinstance(value, bool):
            return _MISSING
        if isinstance(value, (int, float)):
            try:
                finite = math.isfinite(value)
            except OverflowError:
                return _MISSING
            return value if finite else _MISSING
        if isinstance(value, str):
            try:
                parsed = float(value.strip())
            except ValueError:
                return _MISSING
            return parsed if math.isfinite(parsed) else _MISSING
        return _MISSING

    if kind is ValueKind.BOOLEAN:
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        if isinstance(value, str):
            text = value.strip().casefold()
            if text in _TRUE_STRINGS:
                return True
            if text in _FALSE_STRINGS:
                return False
        return _MISSING

    if kind is ValueKind.MAPPING:
        return value if isinstance(value, Mapping) else _MISSING

    if kind is ValueKind.LIST:
        return list(value) if isinstance(value, (list, tuple)) else _MISSING

    raise ValueError(f"Unknown value kind: {kind!r}")


def safe_get(
    bag: Mapping[str, Any] | None,
    key: str,
    kind: ValueKind,
    default: Any = None,
) -> Any:
    """Extract ``key`` from ``bag`` as ``kind``, falling back to ``default``.

    Args:
        bag: Loosely-typed mapping. ``None`` is treated as empty.
        key: Key to read (case-insensitive).
        kind: Expected kind of the value.
        default: Returned when the key is absent or the value does not
            have the expected kind.

    Returns:
        The coerced value, or ``default``.
    """
    if bag is None:
        return default
    raw = lookup(bag, key, _MISSING)
    if raw is _MISSING:
        return default
    value = coerce(raw, kind)
    return default if value is _MISSING else value


def first_present(
    bag: Mapping[str, Any],
    keys: tuple[str, ...],
    kind: ValueKind,
    default: Any = None,
) -> Any:
    """Return the first of ``keys`` whose value has ``kind``.

    Used where a field is accepted under more than one name.
    """
    for key in keys:
        value = safe_get(bag, key, kind, _MISSING)
        if value is not _MISSING:
            return value
    return default
