"""Type converters and their application to the reconciliation working copy."""
from __future__ import annotations

import json
import logging
import math
from collections.abc import Mapping as MappingABC
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Iterable, Mapping, MutableMapping

from .models import TYPE_MISMATCH, Difference

LOGGER = logging.getLogger(__name__)

TypeConverter = Callable[[Any], Any]


class NormalizationError(RuntimeError):
    """Raised when a value cannot be coerced to the requested type."""


def to_string(value: Any) -> str:
    if value is None:
        raise NormalizationError("Cannot convert null to string")
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple, MappingABC)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


def to_bool(value: Any) -> bool:
    """Truthiness as JavaScript's ``Boolean()`` defines it.

    Empty containers are truthy; only null, false, zero, NaN and the empty
    string are falsy.
    """

    if value is None or value is False:
        return False
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return not (value == 0 or (isinstance(value, float) and math.isnan(value)))
    if isinstance(value, str):
        return value != ""
    return True


def to_number(value: Any) -> int | float:
    """Parse ``value`` the way JavaScript's ``Number()`` would, minus ``NaN``."""

    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return 0
        try:
            return int(raw)
        except ValueError:
            pass
        try:
            parsed = float(raw)
        except ValueError as exc:
            raise NormalizationError(f"Invalid number: {value!r}") from exc
        if math.isnan(parsed):
            raise NormalizationError(f"Invalid number: {value!r}")
        return parsed
    raise NormalizationError(f"Cannot convert {type(value).__name__} to number")


def to_int(value: Any) -> int:
    if isinstance(value, bool) or value is None:
        raise NormalizationError(f"Cannot convert {value!r} to integer")
    if isinstance(value, str):
        try:
            parsed = Decimal(value.replace(",", "").strip())
        except InvalidOperation as exc:
            raise NormalizationError(f"Invalid integer: {value!r}") from exc
    elif isinstance(value, (int, float, Decimal)):
        parsed = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    else:
        raise NormalizationError(f"Cannot convert {type(value).__name__} to integer")
    if not parsed.is_finite() or parsed != parsed.to_integral_value():
        raise NormalizationError(f"Not an integral value: {value!r}")
    return int(parsed)


def to_float(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        raise NormalizationError(f"Cannot convert {value!r} to float")
    try:
        return float(value.replace(",", "").strip() if isinstance(value, str) else value)
    except (TypeError, ValueError) as exc:
        raise NormalizationError(f"Invalid float: {value!r}") from exc


def to_iso_datetime(value: Any) -> Any:
    """Render dates as ISO 8601 text; any other value passes through."""

    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


BUILTIN_CONVERTERS: Dict[str, TypeConverter] = {
    "str": to_string,
    "bool": to_bool,
    "number": to_number,
    "int": to_int,
    "float": to_float,
    "iso_datetime": to_iso_datetime,
}


def apply_converters(
    working_copy: MutableMapping[str, Any],
    differences: Iterable[Difference],
    converters: Mapping[str, TypeConverter],
) -> None:
    """Run registered converters against type mismatches in place.

    Each converted difference is marked resolved; a converter that raises
    leaves the working copy untouched and marks the difference unresolved.
    """

    for diff in differences:
        if diff.kind != TYPE_MISMATCH:
            continue
        converter = converters.get(diff.field)
        if converter is None:
            continue
        try:
            converted = converter(working_copy[diff.field])
        except Exception as exc:
            LOGGER.warning("Converter for %s failed: %s", diff.field, exc)
            diff.resolved = False
            diff.solution = f"conversion failed: {exc}"
            continue
        working_copy[diff.field] = converted
        diff.resolved = True
        diff.solution = "auto-converted"
