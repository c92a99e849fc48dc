from .base import Ledger
from .local import DEFAULT_HISTORY_MAX, LocalHistoryLedger
from .remote import RemoteQueryLedger, SearchBudgets

__all__ = [
    "Ledger",
    "LocalHistoryLedger",
    "RemoteQueryLedger",
    "SearchBudgets",
    "DEFAULT_HISTORY_MAX",
]
