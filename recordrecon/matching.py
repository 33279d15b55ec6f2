"""Field-name translation between source and target records."""
from __future__ import annotations

from types import MappingProxyType
from typing import Dict, List, Mapping

from .models import MappingTables


def resolve_mapping(field_mapping: Mapping[str, str]) -> MappingTables:
    """Build the forward and reverse tables for ``field_mapping``.

    Collisions are not validated: when two source fields point at the same
    target field, the one declared last owns the reverse entry.
    """

    mapping: Dict[str, str] = dict(field_mapping)
    reverse: Dict[str, str] = {}
    for source_key, target_key in mapping.items():
        reverse[target_key] = source_key
    return MappingTables(
        mapping=MappingProxyType(mapping),
        reverse_mapping=MappingProxyType(reverse),
    )


def find_collisions(field_mapping: Mapping[str, str]) -> dict[str, list[str]]:
    """Return target fields claimed by more than one source field."""

    claims: Dict[str, List[str]] = {}
    for source_key, target_key in field_mapping.items():
        claims.setdefault(target_key, []).append(source_key)
    return {target: sources for target, sources in claims.items() if len(sources) > 1}
