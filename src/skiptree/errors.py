# errors.py
from __future__ import annotations

from dataclasses import dataclass, field


CONFIG = "config"
FINGERPRINT = "fingerprint"
LEDGER = "ledger"
ARTIFACT = "artifact"
MARKER = "marker"


@dataclass
class SkipTreeError(Exception):
    """
    Structured error with enough context for:
      - clean CLI output
      - telling a broken setup apart from a plain "must run"
      - debugging without full tracebacks
    """
    kind: str
    message: str
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


@dataclass
class ArtifactError(Exception):
    """Raised by the artifact store. reason is one of: expired, download, extract."""
    reason: str
    run_id: str
    message: str

    def __str__(self) -> str:
        return f"artifact of job {self.run_id} unusable ({self.reason}): {self.message}"
