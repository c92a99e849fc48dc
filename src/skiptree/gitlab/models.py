# gitlab/models.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class RemoteJob:
    """One entry of the project's job history (GET /projects/:id/jobs)."""
    id: int
    name: str
    ref: str
    status: str
    commit_sha: str
    web_url: str
    artifacts_expire_at: Optional[str] = None  # ISO format timestamp, None = no artifacts

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> RemoteJob:
        """Create RemoteJob from an API job dictionary."""
        commit = data.get("commit") or {}
        return cls(
            id=int(data["id"]),
            name=data["name"],
            ref=data.get("ref") or "",
            status=data.get("status") or "",
            commit_sha=commit.get("id") or "",
            web_url=data.get("web_url") or "",
            artifacts_expire_at=data.get("artifacts_expire_at"),
        )
