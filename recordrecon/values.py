"""Type tags and canonical comparison for JSON-compatible record values."""
from __future__ import annotations

import json
import reprlib
from collections.abc import Mapping
from numbers import Number
from typing import Any

NULL = "null"
BOOLEAN = "boolean"
NUMBER = "number"
STRING = "string"
SEQUENCE = "sequence"
MAPPING = "mapping"
OPAQUE = "opaque"


class _Absent:
    """Marker for a field that is not present in a record at all."""

    _instance: "_Absent | None" = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()


def classify(value: Any) -> str:
    """Return the type tag of ``value``.

    ``None`` has its own tag rather than sharing one with mappings, and
    ``bool`` is checked before numbers because it subclasses ``int``.
    """

    if value is None:
        return NULL
    if isinstance(value, bool):
        return BOOLEAN
    if isinstance(value, Number):
        return NUMBER
    if isinstance(value, str):
        return STRING
    if isinstance(value, Mapping):
        return MAPPING
    if isinstance(value, (list, tuple)):
        return SEQUENCE
    return OPAQUE


def values_equal(left: Any, right: Any) -> bool:
    """Deep equality over tags and contents; mapping key order is ignored.

    Nested containers are walked with an explicit stack, so arbitrarily deep
    JSON values compare without hitting the interpreter's recursion limit.
    """

    pending = [(left, right)]
    seen = set()
    while pending:
        left, right = pending.pop()
        tag = classify(left)
        if tag != classify(right):
            return False
        if tag in (MAPPING, SEQUENCE):
            marker = (id(left), id(right))
            if marker in seen:
                continue
            seen.add(marker)
        if tag == MAPPING:
            if left.keys() != right.keys():
                return False
            pending.extend((left[key], right[key]) for key in left)
        elif tag == SEQUENCE:
            if len(left) != len(right):
                return False
            pending.extend(zip(left, right))
        elif tag != NULL:
            try:
                if not left == right:
                    return False
            except Exception:  # pragma: no cover - opaque objects with broken __eq__
                return False
    return True


def render_value(value: Any) -> str:
    """Render a value as literal text for reports."""

    if value is ABSENT:
        return "(absent)"
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value, ensure_ascii=False, default=str)
    except (TypeError, ValueError, RecursionError):
        return reprlib.repr(value)
