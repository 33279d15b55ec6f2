"""Apply the field mapping to the converted working copy."""
from __future__ import annotations

from typing import Any, Dict, Mapping


def merge_record(working_copy: Mapping[str, Any], mapping: Mapping[str, str]) -> dict[str, Any]:
    """Rename mapped fields in declaration order and return the canonical record.

    When two source fields map to the same target field the one applied last
    wins.
    """

    merged: Dict[str, Any] = dict(working_copy)
    for source_key, target_key in mapping.items():
        if source_key not in merged:
            continue
        merged[target_key] = merged[source_key]
        if source_key != target_key:
            del merged[source_key]
    return merged
