from __future__ import annotations

import re
from collections.abc import Iterable

from ..models.grid import (
    FIRST_CONTENT_COLUMN,
    LABEL_COLUMN,
    LAST_CONTENT_COLUMN,
    OVERRIDE_COLUMN,
    Grid,
)
from ..models.strings import LanguageRow, TranslatableString
from .identifiers import column_to_letter, make_context, make_identifier

"""Grid scans: source row, translatable cells, language rows, length limits.

Layout:
- column A of the source row contains the source marker (substring match)
- D..Z of the source row hold the source text
- rows directly below the source row are language rows until column A is empty
- any other cell of a content column may carry a "<N> char max" annotation
"""

__all__ = [
    "MAX_LENGTH_RE",
    "find_source_row",
    "find_max_length",
    "extract_translatable_strings",
    "find_language_rows",
    "translatable_columns",
]

MAX_LENGTH_RE = re.compile(r"(\d+)\s*char max", re.IGNORECASE)


def find_source_row(grid: Grid, marker: str) -> int | None:
    """Return the first row whose column-A text contains ``marker``."""
    if not marker:
        return None
    for row in range(1, grid.row_count + 1):
        if marker in grid.cell(row, LABEL_COLUMN):
            return row
    return None


def find_max_length(grid: Grid, column: int, skip_row: int | None = None) -> int:
    """Scan ``column`` top to bottom for a "<N> char max" annotation.

    The first match wins; 0 means no limit.
    """
    for row in range(1, grid.row_count + 1):
        if row == skip_row:
            continue
        m = MAX_LENGTH_RE.search(grid.cell(row, column))
        if m:
            return int(m.group(1))
    return 0


def _content_columns(columns: Iterable[int] | None) -> list[int]:
    if columns is None:
        return list(range(FIRST_CONTENT_COLUMN, LAST_CONTENT_COLUMN + 1))
    return sorted(c for c in set(columns) if FIRST_CONTENT_COLUMN <= c <= LAST_CONTENT_COLUMN)


def extract_translatable_strings(
    grid: Grid,
    source_row: int,
    columns: Iterable[int] | None = None,
) -> list[TranslatableString]:
    """Build TranslatableStrings for the non-empty source cells, left to right.

    Args:
        grid: Sheet to scan
        source_row: Row returned by find_source_row
        columns: Optional subset of column indexes (selection); D..Z by default
    """
    strings: list[TranslatableString] = []
    for column in _content_columns(columns):
        text = grid.cell(source_row, column).strip()
        if not text:
            continue
        letter = column_to_letter(column)
        strings.append(
            TranslatableString(
                identifier=make_identifier(grid.name, source_row, letter),
                text=text,
                context=make_context(grid.name, source_row, letter),
                max_length=find_max_length(grid, column, skip_row=source_row),
                row=source_row,
                column=column,
            )
        )
    return strings


def translatable_columns(grid: Grid, source_row: int, columns: Iterable[int] | None = None) -> list[int]:
    """Content columns whose source cell is non-empty."""
    return [c for c in _content_columns(columns) if grid.cell(source_row, c).strip()]


def find_language_rows(grid: Grid, source_row: int) -> list[LanguageRow]:
    """Rows strictly below the source row, stopping at the first empty label."""
    rows: list[LanguageRow] = []
    for row in range(source_row + 1, grid.row_count + 1):
        label = grid.cell(row, LABEL_COLUMN).strip()
        if not label:
            break
        override = grid.cell(row, OVERRIDE_COLUMN).strip() or None
        rows.append(LanguageRow(row=row, label=label, locale_override=override))
    return rows
