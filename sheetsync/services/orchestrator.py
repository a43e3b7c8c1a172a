from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from ..config.loader import SyncConfig, require_credentials
from ..excel.reader import WorkbookReadError, read_workbook
from ..excel.writer import copy_workbook, write_changes
from ..grid.extractor import (
    extract_translatable_strings,
    find_language_rows,
    find_source_row,
    translatable_columns,
)
from ..grid.selection import Selection
from ..logging.error_log import ErrorLogBuffer
from ..models.grid import Grid
from ..models.strings import LanguageRow, TranslatableString
from ..models.sync_result import PullResult, PushResult, SyncResult
from ..tms.client import TMSClient
from ..tms.locales import LocaleMap
from ..tms.rate_limit import RateLimiter
from ..tms.remote_index import RemoteStringIndex, resolve_branch_id
from .checkpoint import Checkpoint, CheckpointStore, Deadline
from .progress import ProgressTracker
from .pull import PullEngine
from .push import PushEngine

"""Workbook-level push/pull orchestration.

Covers the command surface: push/pull of all sheets, of named sheets, and of
an A1 selection. Steps, in order:

1. credentials are checked (ConfigError, no network yet)
2. the workbook is read and each sheet's source row located; a targeted
   sheet without one aborts the run, untargeted ones are skipped
3. branch resolution (+ remote string index for push)
4. engines run sheet by sheet with progress, checkpoints and a time budget
5. pull writes changed cells back to the workbook
"""

__all__ = [
    "ProcessingError",
    "NoSourceRowError",
    "SheetPlan",
    "build_client",
    "build_rate_limiter",
    "plan_sheets",
    "push_workbook",
    "pull_workbook",
]

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Fatal run-level error raised before any per-item work starts."""


class NoSourceRowError(ProcessingError):
    """A targeted sheet has no row marked as the source language."""


@dataclass
class SheetPlan:
    grid: Grid
    source_row: int
    strings: list[TranslatableString] = field(default_factory=list)
    language_rows: list[LanguageRow] = field(default_factory=list)
    columns: list[int] = field(default_factory=list)

    @property
    def pull_items(self) -> int:
        return len(self.language_rows) * len(self.columns)


def build_client(config: SyncConfig) -> TMSClient:
    project_id, token = require_credentials(config)
    return TMSClient(project_id, token, base_url=config.base_url, timeout=config.request_timeout)


def build_rate_limiter(config: SyncConfig) -> RateLimiter:
    rl = config.rate_limit
    return RateLimiter(rl.item_delay, rl.group_delay, rl.group_every)


def _read(workbook: Path, sheets: Iterable[str] | None) -> dict[str, Grid]:
    try:
        return read_workbook(workbook, target_sheets=sheets)
    except WorkbookReadError as e:
        raise ProcessingError(str(e)) from e


def plan_sheets(
    grids: dict[str, Grid],
    marker: str,
    *,
    targeted: bool,
) -> tuple[list[SheetPlan], int]:
    """Locate the source row of every sheet.

    Returns (plans, skipped_sheets). With ``targeted`` a sheet lacking a
    source row raises NoSourceRowError; otherwise it is skipped.
    """
    plans: list[SheetPlan] = []
    skipped = 0
    for name, grid in grids.items():
        source_row = find_source_row(grid, marker)
        if source_row is None:
            if targeted:
                raise NoSourceRowError(f"sheet '{name}' has no row containing source marker {marker!r}")
            logger.info("sheet=%s no source row (marker=%r); skipped", name, marker)
            skipped += 1
            continue
        plans.append(SheetPlan(grid=grid, source_row=source_row))
    return plans, skipped


def _resume_point(
    store: CheckpointStore, operation: str, workbook: Path, plans: list[SheetPlan], resume: bool
) -> tuple[int, tuple[int, int] | None]:
    """Index of the sheet to resume in and the position within it."""
    if not resume:
        return 0, None
    cp = store.load(operation, str(workbook))
    if cp is None:
        return 0, None
    names = [p.grid.name for p in plans]
    if cp.sheet not in names:
        logger.warning("checkpoint sheet %r not in this run; starting from the beginning", cp.sheet)
        return 0, None
    logger.info("resuming %s after sheet=%s row=%d column=%d", operation, cp.sheet, cp.row, cp.column)
    return names.index(cp.sheet), cp.position()


def _finish(
    operation: str,
    sheet_results: list,
    skipped: int,
    start_time: datetime,
    error_log: ErrorLogBuffer,
    store: CheckpointStore,
) -> SyncResult:
    path = error_log.flush()
    if path is not None:
        logger.info("error log written: %s", path)
    end_time = datetime.now(UTC)
    result = SyncResult(
        operation=operation,
        sheets=sheet_results,
        skipped_sheets=skipped,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
    )
    if not result.incomplete:
        store.clear()
    return result


def push_workbook(
    config: SyncConfig,
    workbook: Path,
    *,
    sheets: Iterable[str] | None = None,
    selection: Selection | None = None,
    resume: bool = False,
    max_seconds: float | None = None,
    client: TMSClient | None = None,
    rate_limiter: RateLimiter | None = None,
    error_log: ErrorLogBuffer | None = None,
    checkpoint_store: CheckpointStore | None = None,
) -> SyncResult:
    """Push source cells of the workbook to the TMS.

    Raises:
        ConfigError: Missing token / project id
        ProcessingError: Unreadable workbook, targeted sheet without source
            row, or failure to resolve the branch / load existing strings
    """
    start_time = datetime.now(UTC)
    require_credentials(config)
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    store = checkpoint_store or CheckpointStore(Path(config.checkpoint_path))
    target = list(sheets) if sheets else None

    plans, skipped = plan_sheets(
        _read(workbook, target), config.source_marker, targeted=target is not None
    )
    columns = selection.columns() if selection is not None else None
    for plan in plans:
        plan.strings = extract_translatable_strings(plan.grid, plan.source_row, columns)
    if not any(p.strings for p in plans):
        logger.info("no translatable cells found in %s", workbook.name)
        return _finish("push", [], skipped, start_time, error_log, store)

    client = client or build_client(config)
    branch = resolve_branch_id(client, config.branch_id)
    if not branch.ok:
        raise ProcessingError(f"branch lookup failed: {branch.error}")
    index_result = RemoteStringIndex.load(client, branch.value, page_size=config.page_size)
    if not index_result.ok:
        raise ProcessingError(f"loading existing strings failed: {index_result.error}")
    index = index_result.unwrap()
    logger.info("remote strings indexed: %d", len(index))

    start_index, position = _resume_point(store, "push", workbook, plans, resume)
    results: list[PushResult] = []
    total = sum(len(p.strings) for p in plans)

    with ProgressTracker(total, description="Pushing") as progress:

        def on_item_done(sheet: str, row: int, column: int) -> None:
            store.save(Checkpoint("push", str(workbook), sheet, row, column))
            progress.advance()

        engine = PushEngine(
            client,
            index,
            branch_id=branch.value,
            rate_limiter=rate_limiter or build_rate_limiter(config),
            error_log=error_log,
            deadline=Deadline(max_seconds or config.max_seconds),
            on_item_done=on_item_done,
        )
        for i, plan in enumerate(plans):
            if i < start_index:
                results.append(PushResult(plan.grid.name, resumed_skipped=len(plan.strings)))
                progress.advance(len(plan.strings))
                continue
            progress.start_sheet(plan.grid.name)
            sheet_result = engine.push(
                plan.grid.name, plan.strings, resume_after=position if i == start_index else None
            )
            progress.advance(sheet_result.resumed_skipped)
            results.append(sheet_result)
            if sheet_result.incomplete:
                break

    return _finish("push", results, skipped, start_time, error_log, store)


def pull_workbook(
    config: SyncConfig,
    workbook: Path,
    *,
    sheets: Iterable[str] | None = None,
    selection: Selection | None = None,
    resume: bool = False,
    max_seconds: float | None = None,
    output: Path | None = None,
    client: TMSClient | None = None,
    rate_limiter: RateLimiter | None = None,
    error_log: ErrorLogBuffer | None = None,
    checkpoint_store: CheckpointStore | None = None,
) -> SyncResult:
    """Pull translations into the language rows and save the workbook.

    Changed cells are written to ``output`` (default: the workbook itself).
    """
    start_time = datetime.now(UTC)
    require_credentials(config)
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    store = checkpoint_store or CheckpointStore(Path(config.checkpoint_path))
    target = list(sheets) if sheets else None
    destination = output or workbook

    grids = _read(workbook, target)
    plans, skipped = plan_sheets(grids, config.source_marker, targeted=target is not None)
    columns = selection.columns() if selection is not None else None
    for plan in plans:
        plan.columns = translatable_columns(plan.grid, plan.source_row, columns)
        plan.language_rows = [
            r for r in find_language_rows(plan.grid, plan.source_row)
            if selection is None or selection.contains_row(r.row)
        ]
    if not any(p.pull_items for p in plans):
        logger.info("nothing to pull in %s", workbook.name)
        if output is not None and not (resume and destination.exists()):
            copy_workbook(workbook, destination)
        return _finish("pull", [], skipped, start_time, error_log, store)

    client = client or build_client(config)
    branch = resolve_branch_id(client, config.branch_id)
    if not branch.ok:
        raise ProcessingError(f"branch lookup failed: {branch.error}")

    start_index, position = _resume_point(store, "pull", workbook, plans, resume)
    results: list[PullResult] = []
    total = sum(p.pull_items for p in plans)
    # the first save goes to ``destination``; later saves update that copy
    source = {"path": destination if resume and destination.exists() else workbook}

    def flush_changes() -> None:
        written = write_changes(source["path"], [p.grid for p in plans], output=destination)
        if written:
            source["path"] = destination
            logger.debug("saved %d cell(s) to %s", written, destination)

    with ProgressTracker(total, description="Pulling") as progress:

        def on_item_done(sheet: str, row: int, column: int) -> None:
            progress.advance()

        def on_row_done(sheet: str, row: int, column: int) -> None:
            flush_changes()
            store.save(Checkpoint("pull", str(workbook), sheet, row, column))

        engine = PullEngine(
            client,
            LocaleMap(config.locale_overrides),
            branch_id=branch.value,
            rate_limiter=rate_limiter or build_rate_limiter(config),
            error_log=error_log,
            deadline=Deadline(max_seconds or config.max_seconds),
            on_item_done=on_item_done,
            on_row_done=on_row_done,
        )
        for i, plan in enumerate(plans):
            if i < start_index:
                results.append(PullResult(plan.grid.name, resumed_skipped=plan.pull_items))
                progress.advance(plan.pull_items)
                continue
            progress.start_sheet(plan.grid.name)
            sheet_result = engine.pull(
                plan.grid,
                plan.source_row,
                plan.language_rows,
                plan.columns,
                resume_after=position if i == start_index else None,
            )
            progress.advance(sheet_result.resumed_skipped)
            results.append(sheet_result)
            if sheet_result.incomplete:
                break

    flush_changes()
    if output is not None and source["path"] != destination:
        # no cell changed, the output still mirrors the workbook
        copy_workbook(workbook, destination)
    return _finish("pull", results, skipped, start_time, error_log, store)
