# fingerprint.py
from __future__ import annotations

from typing import Protocol, Sequence

from .errors import CONFIG, FINGERPRINT, SkipTreeError
from .git_facts.git import RevisionNotFound
from .model import Fingerprint

# ---------------------------------------------------------------------
# Core idea
# ---------------------------------------------------------------------
# fingerprint(revision, watch_set) =
#     "<content hash of path 1> <path 1>\n"
#     "<content hash of path 2> <path 2>\n"
#     ...
#
# The raw string is compared as-is against historical commits (remote
# history). Fingerprint.digest condenses it for the local history file.
# Order matters and nothing is normalized.
# ---------------------------------------------------------------------


class RevisionTree(Protocol):
    def resolve_content_hash(self, revision: str, path: str) -> str: ...


def compute_fingerprint(tree: RevisionTree, revision: str, watch_set: Sequence[str]) -> Fingerprint:
    """
    Build the canonical fingerprint of watch_set at revision.

    Raises SkipTreeError(kind="fingerprint") if any path (or the revision
    itself) cannot be resolved; a partial fingerprint is never returned.
    """
    if not watch_set:
        raise SkipTreeError(CONFIG, "watch set is empty")

    lines = []
    for path in watch_set:
        try:
            content_hash = tree.resolve_content_hash(revision, path)
        except RevisionNotFound as e:
            raise SkipTreeError(
                FINGERPRINT,
                f"cannot fingerprint {revision}",
                {"path": path, "reason": str(e)},
            ) from e
        lines.append(f"{content_hash} {path}\n")
    return Fingerprint("".join(lines))
