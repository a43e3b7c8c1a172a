from __future__ import annotations

from sheetsync.grid.extractor import (
    extract_translatable_strings,
    find_language_rows,
    find_max_length,
    find_source_row,
    translatable_columns,
)
from sheetsync.models.grid import Grid
from sheetsync.models.strings import LanguageRow


def _menu(menu_rows) -> Grid:
    return Grid.from_values("Menu", menu_rows)


def test_find_source_row_substring_match(menu_rows):
    assert find_source_row(_menu(menu_rows), "English") == 2


def test_find_source_row_absent():
    g = Grid.from_values("Readme", [["notes"], ["more notes"]])
    assert find_source_row(g, "English") is None
    assert find_source_row(g, "") is None


def test_find_source_row_is_case_sensitive():
    g = Grid.from_values("S", [["english"], ["English"]])
    assert find_source_row(g, "English") == 2


def test_max_length_annotation(menu_rows):
    g = _menu(menu_rows)
    assert find_max_length(g, 4) == 140
    assert find_max_length(g, 5) == 0
    assert find_max_length(g, 6) == 20  # "20 CHAR MAX"


def test_max_length_first_match_wins_and_skips_source_row():
    g = Grid.from_values(
        "S",
        [
            [None, None, None, "80 char max"],
            ["English", None, None, "300 char max"],
            [None, None, None, "40char max"],
        ],
    )
    assert find_max_length(g, 4) == 80
    assert find_max_length(g, 4, skip_row=1) == 300
    g2 = Grid.from_values("S", [["English", None, None, "Hi"], [None, None, None, "40char max"]])
    assert find_max_length(g2, 4, skip_row=1) == 40


def test_extract_strings_in_column_order(menu_rows):
    strings = extract_translatable_strings(_menu(menu_rows), 2)
    assert [s.identifier for s in strings] == ["Menu_R2D", "Menu_R2E", "Menu_R2F"]
    assert [s.text for s in strings] == ["Hello", "Welcome back", "OK"]
    assert [s.max_length for s in strings] == [140, 0, 20]
    assert strings[0].context == "Sheet: Menu, Cell: D2"
    assert (strings[2].row, strings[2].column) == (2, 6)


def test_extract_skips_blank_cells_and_columns_outside_d_to_z():
    row = ["English", "x", "not content", "  ", "Hi"] + [None] * 21 + ["beyond Z"]
    g = Grid.from_values("S", [row])
    strings = extract_translatable_strings(g, 1)
    assert [s.identifier for s in strings] == ["S_R1E"]


def test_extract_limited_to_columns(menu_rows):
    g = _menu(menu_rows)
    strings = extract_translatable_strings(g, 2, columns=[5, 6, 1, 30])
    assert [s.identifier for s in strings] == ["Menu_R2E", "Menu_R2F"]
    assert translatable_columns(g, 2, columns=[4, 7]) == [4]
    assert translatable_columns(g, 2) == [4, 5, 6]


def test_language_rows_stop_at_first_empty_label(menu_rows):
    rows = find_language_rows(_menu(menu_rows), 2)
    assert rows == [
        LanguageRow(3, "French"),
        LanguageRow(4, "German"),
        LanguageRow(5, "Klingon"),
    ]


def test_language_row_override_from_column_b():
    g = Grid.from_values("S", [["English"], ["Klingon", " tlh-QO "]])
    assert find_language_rows(g, 1) == [LanguageRow(2, "Klingon", "tlh-QO")]


def test_no_language_rows_below_last_row():
    g = Grid.from_values("S", [["x"], ["English", None, None, "Hi"]])
    assert find_language_rows(g, 2) == []
