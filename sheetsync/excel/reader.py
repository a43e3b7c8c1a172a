from __future__ import annotations

import zipfile
from collections.abc import Iterable
from pathlib import Path

import pandas as pd

from ..models.grid import Grid

"""Workbook reader.

Each worksheet is parsed without a header row so DataFrame position (i, j)
maps to grid cell (i + 1, j + 1). NA detection is switched off: a cell that
reads "NA" or "null" is text to translate, not a missing value.
"""

__all__ = [
    "WorkbookReadError",
    "read_workbook",
    "dataframe_to_grid",
]


class WorkbookReadError(Exception):
    """Raised when the workbook cannot be opened or a requested sheet is absent."""


def dataframe_to_grid(df: pd.DataFrame, sheet_name: str) -> Grid:
    rows = [[None if pd.isna(v) else v for v in raw] for raw in df.itertuples(index=False, name=None)]
    return Grid.from_values(sheet_name, rows)


def read_workbook(path: Path, target_sheets: Iterable[str] | None = None) -> dict[str, Grid]:
    """Read a workbook returning Grids keyed by sheet name, in workbook order.

    Parameters
    ----------
    path: Excel file path
    target_sheets: Restrict to these sheet names (None = all sheets)
    """
    if not path.exists():
        raise WorkbookReadError(f"workbook not found: {path}")
    try:
        xls = pd.ExcelFile(path)
    except (OSError, ValueError, zipfile.BadZipFile) as e:
        raise WorkbookReadError(f"cannot open workbook {path}: {e}") from e

    wanted = set(target_sheets) if target_sheets is not None else None
    names = [str(n) for n in xls.sheet_names]
    if wanted is not None:
        missing = wanted - set(names)
        if missing:
            raise WorkbookReadError(f"sheet(s) not found in {path.name}: {sorted(missing)}")

    grids: dict[str, Grid] = {}
    with xls:
        for name in names:
            if wanted is not None and name not in wanted:
                continue
            df = xls.parse(name, header=None, dtype=object, keep_default_na=False, na_values=[])
            grids[name] = dataframe_to_grid(df, name)
    return grids
