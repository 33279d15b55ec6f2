"""Data models used by the reconciliation workflow."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .values import ABSENT, render_value

MISSING_IN_TARGET = "MISSING_IN_TARGET"
TYPE_MISMATCH = "TYPE_MISMATCH"
VALUE_MISMATCH = "VALUE_MISMATCH"
EXTRA_IN_TARGET = "EXTRA_IN_TARGET"

DIFFERENCE_KINDS = (MISSING_IN_TARGET, TYPE_MISMATCH, VALUE_MISMATCH, EXTRA_IN_TARGET)


@dataclass(frozen=True, slots=True)
class MappingTables:
    """Forward and reverse field-name translation tables."""

    mapping: Mapping[str, str]
    reverse_mapping: Mapping[str, str]


@dataclass(slots=True)
class Difference:
    field: str
    source_value: Any
    target_value: Any
    kind: str
    solution: str
    resolved: Optional[bool] = None

    @property
    def is_resolved(self) -> bool:
        return self.resolved is True

    def as_dict(self) -> dict[str, str]:
        return {
            "field": self.field,
            "source_value": render_value(self.source_value),
            "target_value": render_value(self.target_value),
            "kind": self.kind,
            "solution": self.solution,
            "resolved": "Yes" if self.is_resolved else "No",
        }

    def as_json(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "field": self.field,
            "kind": self.kind,
            "solution": self.solution,
            "resolved": self.resolved,
        }
        # Absent values are omitted so they stay distinguishable from null.
        if self.source_value is not ABSENT:
            payload["source_value"] = self.source_value
        if self.target_value is not ABSENT:
            payload["target_value"] = self.target_value
        return payload


@dataclass(slots=True)
class ReconciliationReport:
    differences: List[Difference]
    markdown_table: Optional[str]
    has_unresolved_diffs: bool
    source_record: Mapping[str, Any]
    target_record: Mapping[str, Any]
    canonical_record: Dict[str, Any] = field(default_factory=dict)

    def unresolved(self) -> list[Difference]:
        return [diff for diff in self.differences if not diff.is_resolved]

    def as_json(self) -> dict[str, object]:
        return {
            "differences": [diff.as_json() for diff in self.differences],
            "has_unresolved_diffs": self.has_unresolved_diffs,
            "source_record": dict(self.source_record),
            "target_record": dict(self.target_record),
            "canonical_record": self.canonical_record,
        }
