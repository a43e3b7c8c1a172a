from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from sheetsync.config.loader import DEFAULT_CONFIG_PATH, ConfigError, SyncConfig, load_config
from sheetsync.excel.reader import WorkbookReadError, read_workbook
from sheetsync.grid.extractor import (
    extract_translatable_strings,
    find_language_rows,
    find_source_row,
)
from sheetsync.grid.selection import Selection, SelectionError, parse_selection
from sheetsync.logging.init import get_logger, log_summary, setup_logging
from sheetsync.models.sync_result import SyncResult
from sheetsync.services.diagnostics import check_connection, check_endpoints
from sheetsync.services.orchestrator import (
    ProcessingError,
    build_client,
    pull_workbook,
    push_workbook,
)
from sheetsync.services.summary import render_failure_lines, render_summary_line
from sheetsync.tms.locales import LocaleMap, normalize_pull_locale

"""CLI entrypoint.

Commands:
  push             push source cells (all sheets, --sheet, or --range)
  pull             pull translations back into language rows
  inspect          print what push/pull would work on, no network
  test-connection  fetch the project to validate token and project id
  test-endpoints   probe the read endpoints used by push/pull

Exit codes: 0 all items succeeded, 2 partial failure or incomplete run,
1 fatal (config, workbook, branch/index lookup).
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env so TMS_API_TOKEN / TMS_PROJECT_ID win over the YAML file."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _add_target_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--workbook", type=Path, help="Workbook path (default: config 'workbook')")
    p.add_argument("--sheet", action="append", dest="sheets", help="Limit to this sheet (repeatable)")
    p.add_argument("--range", dest="cell_range", help="A1 selection, e.g. D3:F10 or D:F")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="sheetsync", description="Spreadsheet <-> TMS string synchronizer")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config path")
    sub = p.add_subparsers(dest="command", required=True)

    push = sub.add_parser("push", help="Push source cells to the TMS")
    _add_target_args(push)
    push.add_argument("--resume", action="store_true", help="Continue after the last checkpoint")
    push.add_argument("--max-seconds", type=float, help="Stop cleanly after this many seconds")

    pull = sub.add_parser("pull", help="Pull translations into the workbook")
    _add_target_args(pull)
    pull.add_argument("--resume", action="store_true", help="Continue after the last checkpoint")
    pull.add_argument("--max-seconds", type=float, help="Stop cleanly after this many seconds")
    pull.add_argument("--output", type=Path, help="Write to this file instead of the workbook")

    inspect = sub.add_parser("inspect", help="Show source rows, strings and language rows")
    _add_target_args(inspect)

    sub.add_parser("test-connection", help="Validate token and project id")
    sub.add_parser("test-endpoints", help="Probe TMS endpoints")
    return p.parse_args(argv)


def _workbook_path(args: argparse.Namespace, cfg: SyncConfig) -> Path:
    if args.workbook is not None:
        return args.workbook
    if cfg.workbook:
        return Path(cfg.workbook)
    raise ConfigError("no workbook given (--workbook or config 'workbook')")


def _selection(args: argparse.Namespace) -> Selection | None:
    if not args.cell_range:
        return None
    try:
        return parse_selection(args.cell_range)
    except SelectionError as e:
        raise ConfigError(str(e)) from e


def _inspect(cfg: SyncConfig, workbook: Path, sheets: list[str] | None) -> int:
    logger = get_logger()
    try:
        grids = read_workbook(workbook, target_sheets=sheets)
    except WorkbookReadError as e:
        logger.error(f"inspect: {e}")
        return EXIT_FATAL
    locales = LocaleMap(cfg.locale_overrides)
    for name, grid in grids.items():
        print(f"SHEET: {name}")
        source_row = find_source_row(grid, cfg.source_marker)
        if source_row is None:
            print(f"  no source row (marker={cfg.source_marker!r})")
            continue
        strings = extract_translatable_strings(grid, source_row)
        print(f"  source_row={source_row} strings={len(strings)}")
        for s in strings[:5]:
            limit = f" max={s.max_length}" if s.max_length else ""
            print(f"    {s.identifier}: {s.text[:40]!r}{limit}")
        for lr in find_language_rows(grid, source_row):
            code = locales.resolve(lr.label, lr.locale_override)
            pull_id = normalize_pull_locale(code) if code else "-"
            print(f"  row {lr.row}: {lr.label!r} -> {code or 'UNKNOWN'} (pull={pull_id})")
    return EXIT_SUCCESS_ALL


def _report(result: SyncResult) -> int:
    logger = get_logger()
    if result.no_data:
        logger.info("no data: no sheet has translatable cells under a source row")
    for line in render_failure_lines(result):
        logger.warning(line)
    log_summary(render_summary_line(result))
    if result.failed > 0 or result.incomplete:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    # None only: an empty list from tests must not pull in pytest's sys.argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    try:
        if args.command == "test-connection":
            with build_client(cfg) as client:
                return EXIT_SUCCESS_ALL if check_connection(client).ok else EXIT_FATAL

        if args.command == "test-endpoints":
            with build_client(cfg) as client:
                checks = check_endpoints(client)
            for c in checks:
                print(f"{c.name:<13} {'OK' if c.ok else 'FAIL'} status={c.status} {c.path}")
            return EXIT_SUCCESS_ALL if all(c.ok for c in checks) else EXIT_PARTIAL_FAILURE

        workbook = _workbook_path(args, cfg)
        if args.command == "inspect":
            return _inspect(cfg, workbook, args.sheets)

        selection = _selection(args)
        logger.info(f"{args.command} {workbook}")
        if args.command == "push":
            result = push_workbook(
                cfg, workbook,
                sheets=args.sheets, selection=selection,
                resume=args.resume, max_seconds=args.max_seconds,
            )
        else:
            result = pull_workbook(
                cfg, workbook,
                sheets=args.sheets, selection=selection,
                resume=args.resume, max_seconds=args.max_seconds, output=args.output,
            )
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL
    except ProcessingError as e:
        logger.error(f"{args.command}: {e}")
        return EXIT_FATAL

    return _report(result)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
