from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from ..grid.identifiers import column_to_letter, make_identifier
from ..logging.error_log import ErrorLogBuffer
from ..models.error_record import ErrorRecord
from ..models.grid import Grid
from ..models.strings import LanguageRow
from ..models.sync_result import ItemStatus, PullResult
from ..tms.client import TMSClient
from ..tms.locales import LocaleMap, normalize_pull_locale
from ..tms.rate_limit import RateLimiter
from ..tms.result import TransportError
from .checkpoint import Deadline

"""Pull engine: fetch translations back into the language rows.

Row-major over (language row, translatable column). Each cell costs two round
trips: resolve the string by identifier, then list its translations for the
normalized language id. Nothing is cached between cells or runs.
"""

__all__ = [
    "PullEngine",
]

logger = logging.getLogger(__name__)

ItemCallback = Callable[[str, int, int], None]


class PullEngine:
    def __init__(
        self,
        client: TMSClient,
        locale_map: LocaleMap | None = None,
        *,
        branch_id: int | None = None,
        rate_limiter: RateLimiter | None = None,
        error_log: ErrorLogBuffer | None = None,
        deadline: Deadline | None = None,
        on_item_done: ItemCallback | None = None,
        on_row_done: ItemCallback | None = None,
    ) -> None:
        self.client = client
        self.locale_map = locale_map or LocaleMap()
        self.branch_id = branch_id
        self.rate_limiter = rate_limiter or RateLimiter()
        self.error_log = error_log
        self.deadline = deadline or Deadline()
        self.on_item_done = on_item_done
        self.on_row_done = on_row_done

    def language_id_for(self, language_row: LanguageRow) -> str | None:
        """Locale resolution + pull normalization; None when unknown."""
        code = self.locale_map.resolve(language_row.label, language_row.locale_override)
        if not code:
            return None
        return normalize_pull_locale(code) or None

    def pull_cell(
        self,
        grid: Grid,
        source_row: int,
        language_row: LanguageRow,
        column: int,
        language_id: str,
    ) -> tuple[ItemStatus, TransportError | None]:
        """Resolve one cell's translation and write it into the grid."""
        identifier = make_identifier(grid.name, source_row, column_to_letter(column))

        found = self.client.find_string(identifier, self.branch_id)
        if not found.ok:
            return ItemStatus.FAILED, found.error
        remote = found.value
        if remote is None:
            logger.debug("no remote string for %s", identifier)
            return ItemStatus.MISSING_STRING, None

        translations = self.client.list_translations(remote.id, language_id)
        if not translations.ok:
            return ItemStatus.FAILED, translations.error
        texts = [t.text for t in translations.value or [] if t.text]
        if not texts:
            logger.debug("no %s translation for %s", language_id, identifier)
            return ItemStatus.MISSING_TRANSLATION, None

        if grid.cell(language_row.row, column) != texts[0]:
            grid.set_cell(language_row.row, column, texts[0])
        return ItemStatus.WRITTEN, None

    def pull(
        self,
        grid: Grid,
        source_row: int,
        language_rows: Sequence[LanguageRow],
        columns: Sequence[int],
        *,
        resume_after: tuple[int, int] | None = None,
    ) -> PullResult:
        counts = {status: 0 for status in ItemStatus}
        processed = skipped = 0
        incomplete = False
        failures: list[str] = []

        for language_row in language_rows:
            pending = [
                c for c in columns
                if resume_after is None or (language_row.row, c) > resume_after
            ]
            skipped += len(columns) - len(pending)
            if not pending:
                continue

            language_id = self.language_id_for(language_row)
            if language_id is None:
                logger.warning(
                    "sheet=%s row=%d unknown language %r (override=%r); skipping",
                    grid.name, language_row.row, language_row.label, language_row.locale_override,
                )
                counts[ItemStatus.UNKNOWN_LOCALE] += len(pending)
                processed += len(pending)
                if self.on_item_done is not None:
                    for column in pending:
                        self.on_item_done(grid.name, language_row.row, column)
                if self.on_row_done is not None:
                    self.on_row_done(grid.name, language_row.row, pending[-1])
                continue

            for column in pending:
                if self.deadline.expired():
                    incomplete = True
                    break
                status, error = self.pull_cell(grid, source_row, language_row, column, language_id)
                processed += 1
                counts[status] += 1
                if status is ItemStatus.FAILED:
                    cell = f"{column_to_letter(column)}{language_row.row}"
                    message = f"{cell} ({language_id}): {error}"
                    failures.append(message)
                    logger.error("pull failed sheet=%s %s", grid.name, message)
                    if self.error_log is not None:
                        self.error_log.append(
                            ErrorRecord.create(
                                sheet=grid.name,
                                identifier=make_identifier(grid.name, source_row, column_to_letter(column)),
                                operation="pull",
                                error_type="TRANSPORT_ERROR",
                                message=str(error),
                            )
                        )
                if self.on_item_done is not None:
                    self.on_item_done(grid.name, language_row.row, column)
                self.rate_limiter.after_item()

            if incomplete:
                logger.warning("sheet=%s time budget reached during row %d", grid.name, language_row.row)
                break
            if self.on_row_done is not None:
                self.on_row_done(grid.name, language_row.row, pending[-1])
            self.rate_limiter.after_group()

        result = PullResult(
            sheet_name=grid.name,
            processed=processed,
            written=counts[ItemStatus.WRITTEN],
            missing_string=counts[ItemStatus.MISSING_STRING],
            missing_translation=counts[ItemStatus.MISSING_TRANSLATION],
            unknown_locale=counts[ItemStatus.UNKNOWN_LOCALE],
            failed=counts[ItemStatus.FAILED],
            resumed_skipped=skipped,
            incomplete=incomplete,
            failures=failures,
        )
        logger.info(
            "sheet=%s pull processed=%d written=%d misses=%d unknown_locale=%d failed=%d",
            grid.name, result.processed, result.written, result.misses, result.unknown_locale, result.failed,
        )
        return result
