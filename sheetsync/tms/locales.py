from __future__ import annotations

from collections.abc import Mapping

"""Language label -> TMS locale code table and pull-locale normalization.

Column A of each language row carries a human label ("French"); column B may
carry an explicit locale code that is used when the label is not in the table.
"""

__all__ = [
    "LOCALE_MAP",
    "PULL_LOCALE_EXEMPT",
    "LocaleMap",
    "normalize_pull_locale",
]

LOCALE_MAP: dict[str, str] = {
    "English (US)": "en",
    "English (UK)": "en-GB",
    "French": "fr-FR",
    "Canadian French": "fr-CA",
    "German": "de-DE",
    "Italian": "it-IT",
    "Spanish": "es-ES",
    "LATAM Spanish": "es-419",
    "Portuguese": "pt-PT",
    "Brazilian Portuguese": "pt-BR",
    "Dutch": "nl-NL",
    "Polish": "pl-PL",
    "Russian": "ru-RU",
    "Turkish": "tr-TR",
    "Swedish": "sv-SE",
    "Danish": "da-DK",
    "Norwegian": "no-NO",
    "Finnish": "fi-FI",
    "Czech": "cs-CZ",
    "Hungarian": "hu-HU",
    "Ukrainian": "uk-UA",
    "Greek": "el-GR",
    "Arabic": "ar-SA",
    "Hebrew": "he-IL",
    "Thai": "th-TH",
    "Vietnamese": "vi-VN",
    "Indonesian": "id-ID",
    "Japanese": "ja-JP",
    "Korean": "ko-KR",
    "Traditional Chinese": "zh-TW",
    "Simplified Chinese": "zh-CN",
}

# Codes the TMS knows by their full form; everything else is queried by
# its language part only.
PULL_LOCALE_EXEMPT = frozenset({"es-419", "zh-CN", "zh-TW"})


def normalize_pull_locale(code: str) -> str:
    """Return the language id used to query translations for ``code``.

    ``es-419``, ``zh-CN`` and ``zh-TW`` are returned verbatim; any other code
    loses its last three characters (``fr-FR`` -> ``fr``).
    """
    if code in PULL_LOCALE_EXEMPT:
        return code
    return code[:-3]


class LocaleMap:
    """Label lookup with optional per-project additions from config."""

    def __init__(self, extra: Mapping[str, str] | None = None) -> None:
        self._table: dict[str, str] = dict(LOCALE_MAP)
        if extra:
            self._table.update({k.strip(): v.strip() for k, v in extra.items()})

    def __contains__(self, label: object) -> bool:
        return isinstance(label, str) and label.strip() in self._table

    def lookup(self, label: str) -> str | None:
        return self._table.get(label.strip())

    def resolve(self, label: str, override: str | None = None) -> str | None:
        """Resolve a language row to a locale code.

        The label wins when known; otherwise the override from column B is
        used. Returns None when neither yields a code.
        """
        code = self.lookup(label)
        if code:
            return code
        if override and override.strip():
            return override.strip()
        return None
