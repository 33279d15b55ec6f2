"""Deterministic checks that classify differences between two records."""
from __future__ import annotations

from typing import Any, Callable, List, Mapping

from .models import (
    EXTRA_IN_TARGET,
    MISSING_IN_TARGET,
    TYPE_MISMATCH,
    VALUE_MISMATCH,
    Difference,
    MappingTables,
)
from .values import ABSENT, classify, values_equal


def compare_field(
    field: str,
    target_key: str,
    source_value: Any,
    target: Mapping[str, Any],
    *,
    has_converter: bool,
) -> Difference | None:
    if target_key not in target:
        return Difference(
            field=field,
            source_value=source_value,
            target_value=ABSENT,
            kind=MISSING_IN_TARGET,
            solution=f"add field `{target_key}` to target",
        )

    target_value = target[target_key]
    if classify(source_value) != classify(target_value):
        if has_converter:
            solution = f"use registered converter for {field}"
        else:
            solution = "needs manual type conversion"
        return Difference(
            field=field,
            source_value=source_value,
            target_value=target_value,
            kind=TYPE_MISMATCH,
            solution=solution,
        )

    if not values_equal(source_value, target_value):
        return Difference(
            field=field,
            source_value=source_value,
            target_value=target_value,
            kind=VALUE_MISMATCH,
            solution="merge or update",
        )
    return None


def find_differences(
    source: Mapping[str, Any],
    target: Mapping[str, Any],
    tables: MappingTables,
    converters: Mapping[str, Callable[[Any], Any]],
) -> list[Difference]:
    """Walk both records and return their differences in report order.

    Source fields come first, in the source's enumeration order, followed by
    target fields that no source field maps onto.
    """

    differences: List[Difference] = []
    for field, source_value in source.items():
        target_key = tables.mapping.get(field, field)
        detail = compare_field(
            field,
            target_key,
            source_value,
            target,
            has_converter=field in converters,
        )
        if detail:
            differences.append(detail)

    for target_key, target_value in target.items():
        if tables.reverse_mapping.get(target_key, target_key) in source:
            continue
        differences.append(
            Difference(
                field=target_key,
                source_value=ABSENT,
                target_value=target_value,
                kind=EXTRA_IN_TARGET,
                solution=f"copy field `{target_key}` from target into source",
            )
        )
    return differences
