from __future__ import annotations

import pytest

from sheetsync.grid.selection import Selection, SelectionError, parse_selection


def test_parse_block():
    s = parse_selection("D3:F10")
    assert s == Selection(4, 6, 3, 10)
    assert s.columns() == [4, 5, 6]
    assert s.contains_row(3) and s.contains_row(10)
    assert not s.contains_row(2) and not s.contains_row(11)
    assert str(s) == "D3:F10"


def test_parse_single_cell():
    s = parse_selection("e5")
    assert s == Selection(5, 5, 5, 5)
    assert str(s) == "E5"


def test_parse_whole_columns():
    s = parse_selection("D:F")
    assert s.first_row is None and s.last_row is None
    assert s.contains_row(1000)
    assert s.contains_column(5) and not s.contains_column(7)
    assert str(s) == "D:F"


def test_reversed_bounds_are_normalized():
    assert parse_selection("F10:D3") == Selection(4, 6, 3, 10)


@pytest.mark.parametrize("bad", ["", "D3:F10:G1", "3D", "D0", "D3:F", "D:F10", "D-3"])
def test_invalid_ranges(bad: str):
    with pytest.raises(SelectionError):
        parse_selection(bad)
