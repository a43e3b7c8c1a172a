from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the JSON Lines error log.

One record per failed push/pull item. Sheet-level failures (no source row,
unreadable sheet) use SHEET_LEVEL as the identifier since no single cell is
to blame.
"""

__all__ = [
    "ErrorRecord",
    "SHEET_LEVEL",
]

SHEET_LEVEL = "<SHEET_LEVEL>"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        sheet: Sheet name the item belongs to
        identifier: TMS string identifier, or SHEET_LEVEL
        operation: push / pull
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Transport error detail or description
    """
    timestamp: str
    sheet: str
    identifier: str
    operation: str
    error_type: str
    message: str

    @staticmethod
    def create(sheet: str, identifier: str, operation: str, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            sheet=sheet,
            identifier=identifier,
            operation=operation,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
