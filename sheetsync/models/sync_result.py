from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

"""Result models for push and pull runs.

Engines return one PushResult / PullResult per sheet; the orchestrator folds
them into a SyncResult which feeds the SUMMARY line and the CLI exit code.
"""

__all__ = [
    "ItemStatus",
    "PushResult",
    "PullResult",
    "SyncResult",
    "MAX_REPORTED_FAILURES",
]

# Upper bound on failure messages carried in a summary.
MAX_REPORTED_FAILURES = 5


class ItemStatus(Enum):
    """Outcome of a single push or pull item."""
    CREATED = "created"
    UPDATED = "updated"
    WRITTEN = "written"
    MISSING_STRING = "missing_string"
    MISSING_TRANSLATION = "missing_translation"
    UNKNOWN_LOCALE = "unknown_locale"
    FAILED = "failed"


@dataclass(frozen=True)
class PushResult:
    sheet_name: str
    processed: int = 0
    created: int = 0
    updated: int = 0
    failed: int = 0
    resumed_skipped: int = 0  # items at or before the checkpoint
    incomplete: bool = False  # stopped by the time budget
    failures: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return self.created + self.updated


@dataclass(frozen=True)
class PullResult:
    sheet_name: str
    processed: int = 0
    written: int = 0
    missing_string: int = 0
    missing_translation: int = 0
    unknown_locale: int = 0
    failed: int = 0
    resumed_skipped: int = 0
    incomplete: bool = False
    failures: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return self.written

    @property
    def misses(self) -> int:
        return self.missing_string + self.missing_translation


@dataclass(frozen=True)
class SyncResult:
    """Workbook-level aggregate of one push or pull run."""
    operation: str  # push / pull
    sheets: list[PushResult] | list[PullResult]
    skipped_sheets: int  # sheets without a source row
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float

    @property
    def processed(self) -> int:
        return sum(s.processed for s in self.sheets)

    @property
    def succeeded(self) -> int:
        return sum(s.succeeded for s in self.sheets)

    @property
    def failed(self) -> int:
        return sum(s.failed for s in self.sheets)

    @property
    def misses(self) -> int:
        return sum(getattr(s, "misses", 0) for s in self.sheets)

    @property
    def unknown_locale(self) -> int:
        return sum(getattr(s, "unknown_locale", 0) for s in self.sheets)

    @property
    def incomplete(self) -> bool:
        return any(s.incomplete for s in self.sheets)

    @property
    def no_data(self) -> bool:
        """True when no sheet had a source row to work from."""
        return not self.sheets

    @property
    def failures(self) -> list[str]:
        messages: list[str] = []
        for s in self.sheets:
            messages.extend(s.failures)
        return messages[:MAX_REPORTED_FAILURES]
