from __future__ import annotations

"""Cell identifier scheme.

Every grid cell pushed to the TMS is keyed by a string identifier built from
the sheet name, the row number and the column letter. Push, pull-by-sheet and
pull-by-selection all go through ``make_identifier`` so a string pushed by one
path is always found by the others.
"""

__all__ = [
    "column_to_letter",
    "letter_to_column",
    "make_identifier",
    "make_context",
]


def column_to_letter(n: int) -> str:
    """Convert a 1-based column index to its letter form.

    Bijective base-26 (no zero digit): 1 -> "A", 26 -> "Z", 27 -> "AA".

    Raises:
        ValueError: If ``n`` is less than 1
    """
    if n < 1:
        raise ValueError(f"column index must be >= 1, got {n}")
    letters: list[str] = []
    while n > 0:
        n, rem = divmod(n - 1, 26)
        letters.append(chr(ord("A") + rem))
    return "".join(reversed(letters))


def letter_to_column(letters: str) -> int:
    """Inverse of ``column_to_letter`` ("A" -> 1, "AA" -> 27)."""
    text = letters.strip().upper()
    if not text or not text.isalpha() or not text.isascii():
        raise ValueError(f"invalid column letters: {letters!r}")
    n = 0
    for ch in text:
        n = n * 26 + (ord(ch) - ord("A") + 1)
    return n


def make_identifier(sheet_name: str, row: int, column_letter: str) -> str:
    """Compose the TMS string identifier for one cell, e.g. ``Menu_R3D``."""
    return f"{sheet_name}_R{row}{column_letter}"


def make_context(sheet_name: str, row: int, column_letter: str) -> str:
    """Human readable context label shown to translators."""
    return f"Sheet: {sheet_name}, Cell: {column_letter}{row}"
