"""
Search history for rgdesk.

- history_core: the bounded, persisted ledger and the deduplication check
"""

from .history_core import (
    AUTO_CLEAN_INTERVAL,
    HISTORY_FILE_NAME,
    MAX_HISTORY_COUNT,
    MAX_HISTORY_DAYS,
    HistoryLedger,
    is_duplicate,
)

__all__ = [
    "AUTO_CLEAN_INTERVAL",
    "HISTORY_FILE_NAME",
    "MAX_HISTORY_COUNT",
    "MAX_HISTORY_DAYS",
    "HistoryLedger",
    "is_duplicate",
]
