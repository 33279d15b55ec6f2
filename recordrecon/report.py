"""Rendering utilities for machine-readable and human-readable outputs."""
from __future__ import annotations

import re
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

from .models import DIFFERENCE_KINDS, Difference, ReconciliationReport
from .values import render_value

DEFAULT_SOLUTION = "needs manual handling"


def _cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def _code(text: str) -> str:
    """Wrap text in a code span whose fence is longer than any backtick run inside it."""

    longest = max((len(run) for run in re.findall("`+", text)), default=0)
    fence = "`" * (longest + 1)
    if text.startswith("`") or text.endswith("`"):
        text = f" {text} "
    return f"{fence}{_cell(text)}{fence}"


def generate_markdown_table(differences: Sequence[Difference]) -> str | None:
    if not differences:
        return None

    lines = [
        "| Field | Source Value | Target Value | Kind | Solution |",
        "| --- | --- | --- | --- | --- |",
    ]
    for diff in differences:
        lines.append(
            "| {field} | {source} | {target} | {kind} | {solution} |".format(
                field=_cell(diff.field),
                source=_code(render_value(diff.source_value)),
                target=_code(render_value(diff.target_value)),
                kind=diff.kind,
                solution=_cell(diff.solution or DEFAULT_SOLUTION),
            )
        )
    return "\n".join(lines) + "\n"


def build_report(
    differences: list[Difference],
    *,
    source_record: Mapping[str, Any],
    target_record: Mapping[str, Any],
    canonical_record: dict[str, Any],
) -> ReconciliationReport:
    return ReconciliationReport(
        differences=differences,
        markdown_table=generate_markdown_table(differences),
        has_unresolved_diffs=any(not diff.is_resolved for diff in differences),
        source_record=source_record,
        target_record=target_record,
        canonical_record=canonical_record,
    )


def write_csv(path: Path, differences: Iterable[Difference]) -> None:
    import csv

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(
            handle,
            fieldnames=[
                "field",
                "source_value",
                "target_value",
                "kind",
                "solution",
                "resolved",
            ],
        )
        writer.writeheader()
        for diff in differences:
            writer.writerow(diff.as_dict())


def write_json(path: Path, payload: object) -> None:
    import json

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, ensure_ascii=False, default=str)


def generate_markdown_summary(report: ReconciliationReport) -> str:
    counter = Counter(diff.kind for diff in report.differences)
    resolved = sum(1 for diff in report.differences if diff.is_resolved)

    lines = ["# Record Reconciliation Report", ""]
    lines.append(f"Generated: {datetime.now(timezone.utc).isoformat()}")
    lines.append("")
    lines.append("## Overview")
    lines.append("")
    lines.append(f"- Source fields: **{len(report.source_record)}**")
    lines.append(f"- Target fields: **{len(report.target_record)}**")
    lines.append(f"- Differences detected: **{len(report.differences)}**")
    if report.differences:
        lines.append(f"- Auto-converted: **{resolved}**")
        lines.append(f"- Unresolved: **{len(report.differences) - resolved}**")
    lines.append("")

    if counter:
        lines.append("## Differences by kind")
        lines.append("")
        for kind in DIFFERENCE_KINDS:
            if counter[kind]:
                lines.append(f"- {kind}: {counter[kind]}")
        lines.append("")

    if report.markdown_table:
        lines.append("## Details")
        lines.append("")
        lines.append(report.markdown_table)
    else:
        lines.append("No differences detected. Source and target records agree.")

    return "\n".join(lines)


def write_markdown(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        handle.write(content)
