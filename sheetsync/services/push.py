from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from ..logging.error_log import ErrorLogBuffer
from ..models.error_record import ErrorRecord
from ..models.strings import TranslatableString
from ..models.sync_result import ItemStatus, PushResult
from ..tms.client import TMSClient
from ..tms.rate_limit import RateLimiter
from ..tms.remote_index import RemoteStringIndex
from ..tms.result import TransportError
from .checkpoint import Deadline

"""Push engine: create or update one TMS string per source cell.

For each TranslatableString, in column order:
1. look the identifier up in the RemoteStringIndex
2. present -> PATCH text/context (and maxLength when > 0)
3. absent  -> POST a new string and add it to the index
4. a transport failure is counted, logged and recorded; the loop continues
5. pace with the rate limiter
"""

__all__ = [
    "PushEngine",
]

logger = logging.getLogger(__name__)

ItemCallback = Callable[[str, int, int], None]


class PushEngine:
    def __init__(
        self,
        client: TMSClient,
        index: RemoteStringIndex,
        *,
        branch_id: int | None = None,
        rate_limiter: RateLimiter | None = None,
        error_log: ErrorLogBuffer | None = None,
        deadline: Deadline | None = None,
        on_item_done: ItemCallback | None = None,
    ) -> None:
        self.client = client
        self.index = index
        self.branch_id = branch_id
        self.rate_limiter = rate_limiter or RateLimiter()
        self.error_log = error_log
        self.deadline = deadline or Deadline()
        self.on_item_done = on_item_done

    def push_item(self, item: TranslatableString) -> tuple[ItemStatus, TransportError | None]:
        """Create or update a single string; never raises for transport errors."""
        existing = self.index.get(item.identifier)
        if existing is not None:
            result = self.client.update_string(existing.id, item.text, item.context, item.max_length)
            status = ItemStatus.UPDATED
        else:
            result = self.client.create_string(item, self.branch_id)
            status = ItemStatus.CREATED
        if not result.ok:
            return ItemStatus.FAILED, result.error
        if status is ItemStatus.CREATED and result.value is not None:
            self.index.add(result.value)
        return status, None

    def push(
        self,
        sheet_name: str,
        strings: Sequence[TranslatableString],
        *,
        resume_after: tuple[int, int] | None = None,
    ) -> PushResult:
        """Push every string of one sheet and return the per-sheet counts."""
        processed = created = updated = failed = skipped = 0
        incomplete = False
        failures: list[str] = []

        for item in strings:
            if resume_after is not None and (item.row, item.column) <= resume_after:
                skipped += 1
                continue
            if self.deadline.expired():
                logger.warning("sheet=%s time budget reached; stopping before %s", sheet_name, item.identifier)
                incomplete = True
                break

            status, error = self.push_item(item)
            processed += 1
            if status is ItemStatus.CREATED:
                created += 1
                logger.debug("created %s", item.identifier)
            elif status is ItemStatus.UPDATED:
                updated += 1
                logger.debug("updated %s", item.identifier)
            else:
                failed += 1
                message = f"{item.identifier}: {error}"
                failures.append(message)
                logger.error("push failed %s", message)
                if self.error_log is not None:
                    self.error_log.append(
                        ErrorRecord.create(
                            sheet=sheet_name,
                            identifier=item.identifier,
                            operation="push",
                            error_type="TRANSPORT_ERROR",
                            message=str(error),
                        )
                    )

            if self.on_item_done is not None:
                self.on_item_done(sheet_name, item.row, item.column)
            self.rate_limiter.after_item()

        logger.info(
            "sheet=%s push processed=%d created=%d updated=%d failed=%d",
            sheet_name, processed, created, updated, failed,
        )
        return PushResult(
            sheet_name=sheet_name,
            processed=processed,
            created=created,
            updated=updated,
            failed=failed,
            resumed_skipped=skipped,
            incomplete=incomplete,
            failures=failures,
        )
