from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any

from .config import ConfigError, ReconciliationConfig
from .matching import find_collisions
from .pipeline import reconcile
from .report import generate_markdown_summary, write_csv, write_json, write_markdown

LOGGER = logging.getLogger(__name__)


def load_record(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(path)
    with path.open(encoding="utf-8-sig") as handle:
        try:
            data = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a JSON object record in {path}")
    return data


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Reconcile a source record against a target record")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser(
        "run", help="Execute the reconciliation workflow")
    run_parser.add_argument(
        "--source",
        type=Path,
        required=True,
        help="Path to the source record (JSON object).",
    )
    run_parser.add_argument(
        "--target",
        type=Path,
        required=True,
        help="Path to the target record (JSON object).",
    )
    run_parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Optional JSON file with field_mapping, type_converters and debug.",
    )
    run_parser.add_argument(
        "--out-dir",
        type=Path,
        default=Path("out"),
        help="Directory that will receive the reconciliation artefacts.",
    )
    run_parser.add_argument(
        "--fail-on-unresolved",
        action="store_true",
        help="Exit with status 1 when unresolved differences remain.",
    )

    return parser


def run(args: argparse.Namespace) -> int:
    if args.config is not None:
        config = ReconciliationConfig.from_json_path(args.config)
    else:
        config = ReconciliationConfig.from_env()

    for target_field, sources in find_collisions(config.field_mapping).items():
        LOGGER.warning(
            "Fields %s all map to %s; the last one wins", ", ".join(sources), target_field)

    source = load_record(args.source)
    target = load_record(args.target)
    report = reconcile(source, target, config)

    out_dir: Path = args.out_dir
    out_dir.mkdir(parents=True, exist_ok=True)
    write_json(out_dir / "recon_report.json", report.as_json())
    write_json(out_dir / "canonical_record.json", report.canonical_record)
    write_csv(out_dir / "recon_differences.csv", report.differences)
    write_markdown(out_dir / "recon_report.md", generate_markdown_summary(report))

    if args.fail_on_unresolved and report.has_unresolved_diffs:
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))

    if args.command == "run":
        try:
            return run(args)
        except (ConfigError, FileNotFoundError) as exc:
            parser.error(str(exc))

    parser.error("Unknown command")
    return 1


if __name__ == "__main__":  # pragma: no cover - exercised via CLI entry point
    raise SystemExit(main())
