# ledger/local.py
from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

from ..errors import LEDGER, SkipTreeError
from ..model import Fingerprint, LedgerHit
from ..ui.console import get_console
from .base import Ledger

# History file (kept between pipelines by a CI cache):
#   <digest>:<run id>     <- most recent
#   <digest>:<run id>
#   ...                   <- at most history_max lines
#
# Read-modify-write is not locked; two pipelines recording at the same time
# can lose one entry. The CI cache layer is expected to serialize access.

DEFAULT_HISTORY_MAX = 500


class LocalHistoryLedger(Ledger):
    artifact_errors_fatal = False

    def __init__(self, path: str | Path, history_max: int = DEFAULT_HISTORY_MAX):
        self.path = Path(path)
        self.history_max = history_max
        self._entries: Optional[List[Tuple[str, str]]] = None

    @property
    def entries(self) -> List[Tuple[str, str]]:
        if self._entries is None:
            self._entries = self._load()
        return self._entries

    def _load(self) -> List[Tuple[str, str]]:
        if not self.path.exists():
            get_console().print_debug(f"history {self.path} doesn't exist, starting empty")
            return []
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SkipTreeError(LEDGER, "cannot read history file", {"path": str(self.path), "error": e}) from e

        entries: List[Tuple[str, str]] = []
        for lineno, line in enumerate(text.splitlines(), start=1):
            line = line.strip()
            if not line:
                continue
            digest, sep, run_id = line.partition(":")
            if not sep or not digest or not run_id:
                raise SkipTreeError(
                    LEDGER,
                    "corrupt history file",
                    {"path": str(self.path), "line": lineno, "content": line},
                )
            entries.append((digest, run_id))
        return entries

    def lookup(self, fingerprint: Fingerprint) -> Optional[LedgerHit]:
        digest = fingerprint.digest
        for entry_digest, run_id in self.entries:
            if entry_digest == digest:
                get_console().print_debug(f"found line={entry_digest}:{run_id}")
                return LedgerHit(run_id=run_id)
        return None

    def record(self, fingerprint: Fingerprint, run_id: str) -> None:
        entries = [(fingerprint.digest, str(run_id))] + self.entries
        self._entries = entries[: self.history_max]
        content = "".join(f"{d}:{r}\n" for d, r in self._entries)
        try:
            self.path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise SkipTreeError(LEDGER, "cannot write history file", {"path": str(self.path), "error": e}) from e
