from __future__ import annotations

import argparse
import os
import sys
from dataclasses import replace
from datetime import date
from pathlib import Path

from dotenv import load_dotenv

from siteprogress.config.loader import ConfigError, load_config
from siteprogress.excel.reader import SpreadsheetDecodeError, read_sheet_table
from siteprogress.ingest.kinds import ROW_KINDS, WORK_ITEMS, WORK_SCHEDULE
from siteprogress.ingest.validator import validate_table
from siteprogress.logging.error_log import DEFAULT_LOGS_DIR, ErrorLogBuffer
from siteprogress.logging.init import log_summary, setup_logging
from siteprogress.models.config_models import SourceConfig
from siteprogress.models.processing_result import RunResult, UploadStatus
from siteprogress.models.serialize import dumps
from siteprogress.services.catalog import work_item_lookup, work_items_from_rows
from siteprogress.services.orchestrator import ProcessingError, build_report, process_uploads
from siteprogress.services.summary import render_summary_line

"""CLI entrypoint.

Commands:
- ``validate KIND FILE...``: validate uploads and print diagnostics
- ``report``: validate the uploads listed in a project config and print the
  aggregated report JSON

Exit codes: 0 every upload clean, 2 at least one upload needs confirmation or
failed to decode, 1 fatal (config, catalog or argument problems).
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

DEFAULT_CONFIG_PATH = Path("config/project.yml")


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env via python-dotenv; process environment wins unless ``override``."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_date(text: str) -> date:
    try:
        return date.fromisoformat(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got '{text}'") from e


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="siteprogress", description="Site progress upload validator and reporter")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    v = sub.add_parser("validate", help="Validate spreadsheet uploads")
    v.add_argument("kind", choices=ROW_KINDS + (WORK_SCHEDULE,), help="Import kind")
    v.add_argument("files", nargs="+", type=Path, help="Spreadsheet files (.xlsx / .csv)")
    v.add_argument("--sheet", help="Sheet name (default: first sheet)")
    v.add_argument("--catalog", type=Path, help="Work item catalog used for budget code lookup")
    v.add_argument("--json", action="store_true", help="Print diagnostics as JSON")

    r = sub.add_parser("report", help="Aggregate the uploads of a project config")
    r.add_argument("--config", type=Path, help="Project config YAML (default: $SITEPROGRESS_CONFIG)")
    r.add_argument("--start", type=_parse_date, help="First day included (YYYY-MM-DD)")
    r.add_argument("--end", type=_parse_date, help="Last day included (YYYY-MM-DD)")
    r.add_argument("--output", type=Path, help="Write report JSON here instead of stdout")
    return p.parse_args(argv)


def _exit_code(run: RunResult) -> int:
    if run.failed_files or run.confirmation_files:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def _catalog_lookup(path: Path, sheet: str | None) -> dict[str, str]:
    table = read_sheet_table(path, sheet)
    result = validate_table(WORK_ITEMS, table)
    return work_item_lookup(work_items_from_rows(result.valid_items))


def _run_validate(args: argparse.Namespace, logger) -> int:
    lookup = None
    if args.kind not in (WORK_ITEMS, WORK_SCHEDULE):
        if args.catalog is None:
            logger.error(f"--catalog is required for kind '{args.kind}'")
            return EXIT_FATAL
        try:
            lookup = _catalog_lookup(args.catalog, None)
        except SpreadsheetDecodeError as e:
            logger.error(f"catalog: {e}")
            return EXIT_FATAL

    log_dir = Path(os.getenv("SITEPROGRESS_LOG_DIR", str(DEFAULT_LOGS_DIR)))
    sources = [SourceConfig(path=f, kind=args.kind, sheet=args.sheet) for f in args.files]
    try:
        run = process_uploads(sources, lookup=lookup, error_log=ErrorLogBuffer(log_dir))
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    if args.json:
        print(dumps([o.to_dict() for o in run.outcomes]))
    else:
        for outcome in run.outcomes:
            if outcome.status is UploadStatus.FAILED:
                continue
            for err in outcome.result.errors:
                logger.error(f"{outcome.path.name} row={err.row} field={err.field}: {err.message}")

    log_summary(render_summary_line(run).removeprefix("SUMMARY "))
    return _exit_code(run)


def _run_report(args: argparse.Namespace, logger) -> int:
    config_path = args.config or Path(os.getenv("SITEPROGRESS_CONFIG", str(DEFAULT_CONFIG_PATH)))
    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL
    env_log_dir = os.getenv("SITEPROGRESS_LOG_DIR")
    if env_log_dir:
        cfg = replace(cfg, error_log_dir=Path(env_log_dir))

    try:
        result = build_report(cfg, start=args.start, end=args.end)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    payload = dumps(result.report.to_dict())
    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(payload + "\n", encoding="utf-8")
        logger.info(f"report written: {args.output}")
    else:
        print(payload)

    log_summary(render_summary_line(result.run).removeprefix("SUMMARY "))
    return _exit_code(result.run)


def main(argv: list[str] | None = None) -> int:
    # None only: an explicit [] from tests must not fall back to sys.argv
    if argv is None:
        argv = sys.argv[1:]
    _load_env_file(Path(".env"))
    args = _parse_args(argv)
    logger = setup_logging(verbose=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    if args.command == "validate":
        return _run_validate(args, logger)
    return _run_report(args, logger)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
