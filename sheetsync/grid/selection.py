from __future__ import annotations

import re
from dataclasses import dataclass

from .identifiers import column_to_letter, letter_to_column

"""A1-style range selections used by push/pull --range.

A selection narrows a run to a block of the sheet: columns limit which source
cells are pushed or pulled, rows limit which language rows a pull writes.
Row bounds may be omitted ("D:F") to select whole columns.
"""

__all__ = [
    "Selection",
    "SelectionError",
    "parse_selection",
]

_CELL_RE = re.compile(r"^([A-Za-z]+)(\d*)$")


class SelectionError(ValueError):
    """Raised for a malformed A1 range."""


@dataclass(frozen=True)
class Selection:
    first_column: int
    last_column: int
    first_row: int | None = None
    last_row: int | None = None

    def contains_column(self, column: int) -> bool:
        return self.first_column <= column <= self.last_column

    def contains_row(self, row: int) -> bool:
        if self.first_row is not None and row < self.first_row:
            return False
        if self.last_row is not None and row > self.last_row:
            return False
        return True

    def columns(self) -> list[int]:
        return list(range(self.first_column, self.last_column + 1))

    def __str__(self) -> str:
        start = f"{column_to_letter(self.first_column)}{self.first_row or ''}"
        end = f"{column_to_letter(self.last_column)}{self.last_row or ''}"
        return start if start == end else f"{start}:{end}"


def _parse_cell(text: str) -> tuple[int, int | None]:
    m = _CELL_RE.match(text.strip())
    if not m:
        raise SelectionError(f"invalid cell reference: {text!r}")
    column = letter_to_column(m.group(1))
    row = int(m.group(2)) if m.group(2) else None
    if row is not None and row < 1:
        raise SelectionError(f"row must be >= 1 in {text!r}")
    return column, row


def parse_selection(text: str) -> Selection:
    """Parse "D3:F10", "E5" or "D:F" into a Selection."""
    parts = text.split(":")
    if len(parts) > 2 or not text.strip():
        raise SelectionError(f"invalid range: {text!r}")
    c1, r1 = _parse_cell(parts[0])
    c2, r2 = _parse_cell(parts[-1])
    if (r1 is None) != (r2 is None):
        raise SelectionError(f"range mixes whole-column and cell bounds: {text!r}")
    rows = sorted([r1, r2]) if r1 is not None and r2 is not None else [None, None]
    return Selection(
        first_column=min(c1, c2),
        last_column=max(c1, c2),
        first_row=rows[0],
        last_row=rows[1],
    )
