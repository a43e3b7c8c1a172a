from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from dataclasses import asdict, dataclass
from pathlib import Path

"""Checkpoint persistence for resumable push/pull runs.

Long runs can be cut off by an external wall-clock limit. After every unit of
work the orchestrator records the last completed (sheet, row, column); a run
started with ``resume`` skips everything up to and including that position.
A run that reaches the end clears its checkpoint.
"""

__all__ = [
    "Checkpoint",
    "CheckpointStore",
    "Deadline",
    "DEFAULT_CHECKPOINT_PATH",
]

logger = logging.getLogger(__name__)

DEFAULT_CHECKPOINT_PATH = Path(".sheetsync/checkpoint.json")


@dataclass(frozen=True)
class Checkpoint:
    operation: str  # push / pull
    workbook: str
    sheet: str
    row: int
    column: int

    def position(self) -> tuple[int, int]:
        return (self.row, self.column)


class CheckpointStore:
    """JSON file holding at most one checkpoint."""

    def __init__(self, path: Path = DEFAULT_CHECKPOINT_PATH) -> None:
        self.path = Path(path)

    def load(self, operation: str, workbook: str) -> Checkpoint | None:
        """Return the stored checkpoint if it belongs to this operation/workbook."""
        if not self.path.exists():
            return None
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            cp = Checkpoint(
                operation=str(raw["operation"]),
                workbook=str(raw["workbook"]),
                sheet=str(raw["sheet"]),
                row=int(raw["row"]),
                column=int(raw["column"]),
            )
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("ignoring unreadable checkpoint %s: %s", self.path, e)
            return None
        if cp.operation != operation or cp.workbook != workbook:
            logger.info(
                "checkpoint is for %s of %s; starting from the beginning", cp.operation, cp.workbook
            )
            return None
        return cp

    def save(self, checkpoint: Checkpoint) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        tmp.write_text(json.dumps(asdict(checkpoint)), encoding="utf-8")
        tmp.replace(self.path)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()


class Deadline:
    """Wall-clock budget for one run (None = unlimited)."""

    def __init__(self, max_seconds: float | None = None, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._expires_at = clock() + max_seconds if max_seconds else None

    def expired(self) -> bool:
        return self._expires_at is not None and self._clock() >= self._expires_at
