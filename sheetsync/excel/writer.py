from __future__ import annotations

import shutil
from collections.abc import Iterable
from pathlib import Path

from openpyxl import load_workbook

from ..models.grid import Grid

"""Write pulled translations back into the workbook.

Only cells recorded in ``Grid.changes`` are touched; everything else in the
file (formatting, formulas, other sheets) is preserved by editing the
workbook in place with openpyxl.
"""

__all__ = [
    "copy_workbook",
    "write_changes",
]


def write_changes(path: Path, grids: Iterable[Grid], output: Path | None = None) -> int:
    """Persist grid changes; returns the number of cells written.

    The workbook is not re-saved when nothing changed.
    """
    changed = [g for g in grids if g.changes]
    if not changed:
        return 0
    wb = load_workbook(path)
    written = 0
    try:
        for grid in changed:
            ws = wb[grid.name]
            for (row, column), value in sorted(grid.changes.items()):
                ws.cell(row=row, column=column).value = value
                written += 1
        wb.save(output or path)
    finally:
        wb.close()
    for grid in changed:
        grid.changes.clear()
    return written


def copy_workbook(path: Path, output: Path) -> bool:
    """Copy the workbook unchanged to ``output`` unless both name the same file."""
    if output.exists() and output.resolve() == path.resolve():
        return False
    output.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(path, output)
    return True
