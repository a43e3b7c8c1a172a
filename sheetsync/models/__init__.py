"""Domain models for the spreadsheet <-> TMS synchronizer."""

from .error_record import ErrorRecord
from .grid import Grid
from .strings import LanguageRow, RemoteString, TranslatableString, Translation
from .sync_result import ItemStatus, PullResult, PushResult, SyncResult

__all__ = [
    "ErrorRecord",
    "Grid",
    # Strings
    "LanguageRow",
    "RemoteString",
    "TranslatableString",
    "Translation",
    # Results
    "ItemStatus",
    "PullResult",
    "PushResult",
    "SyncResult",
]
