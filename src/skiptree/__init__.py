from .config import Config, config_from_env
from .engine import DecisionEngine
from .errors import ArtifactError, SkipTreeError
from .fingerprint import compute_fingerprint
from .ledger import LocalHistoryLedger, RemoteQueryLedger, SearchBudgets
from .marker import MarkerStore
from .model import Decision, Fingerprint, LedgerHit, Outcome, parse_watch_set

__all__ = [
    "Config",
    "config_from_env",
    "DecisionEngine",
    "ArtifactError",
    "SkipTreeError",
    "compute_fingerprint",
    "LocalHistoryLedger",
    "RemoteQueryLedger",
    "SearchBudgets",
    "MarkerStore",
    "Decision",
    "Fingerprint",
    "LedgerHit",
    "Outcome",
    "parse_watch_set",
]
