import csv
import json
from pathlib import Path

from recordrecon.models import EXTRA_IN_TARGET, MISSING_IN_TARGET, TYPE_MISMATCH, Difference
from recordrecon.report import (
    build_report,
    generate_markdown_summary,
    generate_markdown_table,
    write_csv,
    write_json,
)
from recordrecon.values import ABSENT


def make_differences():
    return [
        Difference("userName", "alice", ABSENT, MISSING_IN_TARGET, "add field `username` to target"),
        Difference("age", "30", 30, TYPE_MISMATCH, "auto-converted", resolved=True),
        Difference("extra", ABSENT, {"a": 1}, EXTRA_IN_TARGET, ""),
    ]


def test_markdown_table_is_none_without_differences():
    assert generate_markdown_table([]) is None


def test_markdown_table_renders_one_row_per_difference():
    table = generate_markdown_table(make_differences())
    lines = table.strip().splitlines()
    assert lines[0] == "| Field | Source Value | Target Value | Kind | Solution |"
    assert len(lines) == 2 + 3
    assert "| userName | `alice` | `(absent)` | MISSING_IN_TARGET |" in lines[2]
    assert lines[4].endswith("| needs manual handling |")


def test_markdown_table_escapes_pipes():
    table = generate_markdown_table([
        Difference("a|b", "x|y", "z", TYPE_MISMATCH, "merge | update"),
    ])
    row = table.strip().splitlines()[-1]
    assert "a\\|b" in row
    assert "`x\\|y`" in row
    assert "merge \\| update" in row


def test_build_report_flags_unresolved_differences():
    report = build_report(
        make_differences(),
        source_record={"userName": "alice", "age": "30"},
        target_record={"age": 30, "extra": {"a": 1}},
        canonical_record={"username": "alice", "age": 30},
    )
    assert report.has_unresolved_diffs is True
    assert [d.field for d in report.unresolved()] == ["userName", "extra"]


def test_build_report_all_resolved():
    differences = [Difference("age", "30", 30, TYPE_MISMATCH, "auto-converted", resolved=True)]
    report = build_report(differences, source_record={}, target_record={}, canonical_record={})
    assert report.has_unresolved_diffs is False


def test_report_json_omits_absent_values():
    report = build_report(make_differences(), source_record={}, target_record={}, canonical_record={})
    payload = report.as_json()
    first = payload["differences"][0]
    assert "target_value" not in first
    assert first["source_value"] == "alice"
    json.dumps(payload)


def test_writers_produce_files(tmp_path: Path):
    differences = make_differences()
    csv_path = tmp_path / "nested" / "diffs.csv"
    json_path = tmp_path / "report.json"

    write_csv(csv_path, differences)
    write_json(json_path, {"differences": [d.as_json() for d in differences]})

    with csv_path.open(newline="", encoding="utf-8") as handle:
        rows = list(csv.DictReader(handle))
    assert [row["field"] for row in rows] == ["userName", "age", "extra"]
    assert rows[1]["resolved"] == "Yes"
    assert json.loads(json_path.read_text())["differences"][1]["resolved"] is True


def test_markdown_summary_counts_kinds():
    report = build_report(make_differences(), source_record={"a": 1}, target_record={}, canonical_record={})
    summary = generate_markdown_summary(report)
    assert "- Differences detected: **3**" in summary
    assert "- Unresolved: **2**" in summary
    assert "- MISSING_IN_TARGET: 1" in summary
    assert "| Field | Source Value |" in summary


def test_markdown_summary_without_differences():
    report = build_report([], source_record={"a": 1}, target_record={"a": 1}, canonical_record={"a": 1})
    assert "No differences detected" in generate_markdown_summary(report)


def test_markdown_table_fences_values_containing_backticks():
    table = generate_markdown_table([
        Difference("cmd", "run `ls`", "`x`", TYPE_MISMATCH, "merge or update"),
    ])
    row = table.strip().splitlines()[-1]
    assert row == "| cmd | `` run `ls` `` | `` `x` `` | TYPE_MISMATCH | merge or update |"
