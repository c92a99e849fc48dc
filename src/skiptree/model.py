# model.py
from __future__ import annotations

import base64
import hashlib
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, List, Optional, Union

from .errors import CONFIG, SkipTreeError


class Decision(Enum):
    SKIP = "skip"
    RUN = "run"
    ERROR = "error"

    @property
    def marker_value(self) -> str:
        # ERROR is persisted as "false" so a retry runs the step
        return "true" if self is Decision.SKIP else "false"


def parse_watch_set(value: Union[str, Iterable[str], None]) -> List[str]:
    """
    Turn the configured paths into a WatchSet.

    Accepts the space separated env var format ("service-A lib-1 .ci.yml")
    or any iterable of paths. Order is kept, duplicates dropped.
    """
    if value is None:
        items: List[str] = []
    elif isinstance(value, str):
        items = value.split()
    else:
        items = [str(v).strip() for v in value]

    seen = set()
    uniq: List[str] = []
    for p in items:
        if p and p not in seen:
            seen.add(p)
            uniq.append(p)

    if not uniq:
        raise SkipTreeError(CONFIG, "watch set is empty", {"value": value})
    return uniq


@dataclass(frozen=True)
class Fingerprint:
    """Canonical "<hash> <path>\\n" listing of the watched paths at one revision."""
    raw: str

    @property
    def digest(self) -> str:
        # compact token for the local history file
        h = hashlib.sha1(self.raw.encode("utf-8")).digest()
        return base64.b64encode(h).decode("ascii")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an API timestamp like 2023-03-12T19:59:33.250Z (None stays None)."""
    if not value:
        return None
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass(frozen=True)
class LedgerHit:
    """A previous successful run whose fingerprint matched."""
    run_id: str
    web_url: Optional[str] = None
    origin_url: Optional[str] = None  # oldest ancestor that really ran the step
    has_artifacts: bool = True
    artifacts_expire_at: Optional[datetime] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.artifacts_expire_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return self.artifacts_expire_at < now


@dataclass
class Outcome:
    """Typed result of one decision; only the CLI turns it into an exit code."""
    decision: Decision
    fingerprint: Optional[Fingerprint] = None
    hit: Optional[LedgerHit] = None
    error: Optional[Exception] = None
    from_marker: bool = False
    forced: bool = False
