from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

"""Grid domain model.

A Grid is one worksheet held in memory as ordered rows of ordered cells,
addressed 1-based by (row, column). Columns A-C carry row metadata
(language label, locale override, unused); D..Z carry translatable content.
"""

__all__ = [
    "Grid",
    "LABEL_COLUMN",
    "OVERRIDE_COLUMN",
    "FIRST_CONTENT_COLUMN",
    "LAST_CONTENT_COLUMN",
    "cell_to_text",
]

LABEL_COLUMN = 1  # A
OVERRIDE_COLUMN = 2  # B
FIRST_CONTENT_COLUMN = 4  # D
LAST_CONTENT_COLUMN = 26  # Z


def cell_to_text(value: Any) -> str:
    """Render a raw cell value as text (None/NaN -> "", 140.0 -> "140")."""
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value)


@dataclass
class Grid:
    """In-memory worksheet.

    Reads outside the stored area return an empty string. Writes are tracked
    in ``changes`` so that only modified cells are persisted back.
    """
    name: str
    rows: list[list[Any]] = field(default_factory=list)
    changes: dict[tuple[int, int], str] = field(default_factory=dict)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return max((len(r) for r in self.rows), default=0)

    def cell(self, row: int, column: int) -> str:
        if row < 1 or column < 1:
            raise IndexError(f"cell address must be 1-based, got ({row}, {column})")
        if row > len(self.rows):
            return ""
        values = self.rows[row - 1]
        if column > len(values):
            return ""
        return cell_to_text(values[column - 1])

    def set_cell(self, row: int, column: int, value: str) -> None:
        if row < 1 or column < 1:
            raise IndexError(f"cell address must be 1-based, got ({row}, {column})")
        while len(self.rows) < row:
            self.rows.append([])
        values = self.rows[row - 1]
        while len(values) < column:
            values.append(None)
        values[column - 1] = value
        self.changes[(row, column)] = value

    @classmethod
    def from_values(cls, name: str, values: list[list[Any]]) -> Grid:
        return cls(name=name, rows=[list(r) for r in values])
