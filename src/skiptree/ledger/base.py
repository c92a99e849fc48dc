# ledger/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ..model import Fingerprint, LedgerHit


class Ledger(ABC):
    """History of fingerprints from previously successful runs of one job."""

    # whether a download/extract failure on a hit is fatal unless configured
    artifact_errors_fatal: bool = False

    @abstractmethod
    def lookup(self, fingerprint: Fingerprint) -> Optional[LedgerHit]:
        """Return the most recent matching run, or None on a miss."""

    @abstractmethod
    def record(self, fingerprint: Fingerprint, run_id: str) -> None:
        """Remember that run_id is running with this fingerprint."""
