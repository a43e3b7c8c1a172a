from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""String-level domain models shared by the push and pull engines."""

__all__ = [
    "TranslatableString",
    "RemoteString",
    "LanguageRow",
    "Translation",
]


@dataclass(frozen=True)
class TranslatableString:
    """One non-empty source cell, rebuilt from the grid on every run."""
    identifier: str
    text: str
    context: str
    max_length: int  # 0 = no limit
    row: int
    column: int


@dataclass(frozen=True)
class RemoteString:
    """A string record as the TMS knows it."""
    id: int
    identifier: str
    text: str
    context: str
    max_length: int
    branch_id: int | None

    @staticmethod
    def from_api(data: dict[str, Any]) -> RemoteString:
        """Build from an unwrapped API record; ValueError if it has no id."""
        if not isinstance(data, dict) or data.get("id") is None:
            raise ValueError(f"string record without an id: {data!r}")
        text = data.get("text", "")
        # plural strings come back as a dict of forms
        if isinstance(text, dict):
            text = text.get("one") or text.get("other") or ""
        return RemoteString(
            id=int(data["id"]),
            identifier=str(data.get("identifier", "")),
            text=str(text),
            context=str(data.get("context") or ""),
            max_length=int(data.get("maxLength") or 0),
            branch_id=data.get("branchId"),
        )


@dataclass(frozen=True)
class LanguageRow:
    """A row below the source row holding one target language."""
    row: int
    label: str
    locale_override: str | None = None


@dataclass(frozen=True)
class Translation:
    string_id: int
    language_id: str
    text: str

    @staticmethod
    def from_api(data: dict[str, Any], string_id: int, language_id: str) -> Translation:
        if not isinstance(data, dict):
            raise ValueError(f"translation record is not an object: {data!r}")
        return Translation(
            string_id=int(data.get("stringId", string_id)),
            language_id=str(data.get("languageId", language_id)),
            text=str(data.get("text") or ""),
        )
