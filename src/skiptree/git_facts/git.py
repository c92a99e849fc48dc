# git.py
# Small, focused wrapper around the Git CLI.
# This module centralizes all Git interactions so the rest of the codebase
# never needs to call subprocess("git ...") directly.

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional


class RevisionNotFound(Exception):
    """The revision, or a path inside it, does not exist in the repository."""

    def __init__(self, revision: str, path: Optional[str] = None, reason: str = ""):
        self.revision = revision
        self.path = path
        self.reason = reason
        where = f"'{path}' at {revision}" if path else revision
        super().__init__(f"not found: {where}" + (f" ({reason})" if reason else ""))


def _git(args: list[str], cwd: Optional[str | Path] = None) -> str:
    """
    Execute a git command and return its stdout as a clean string.

    This is the single low-level entry point for all Git operations in this file.

    Args:
        args: List of git arguments (e.g. ["rev-parse", "HEAD"])
        cwd: Optional working directory in which to run the git command.

    Returns:
        Stdout from the git command with surrounding whitespace removed.

    Raises:
        subprocess.CalledProcessError: if git exits with a non-zero status.
    """
    out = subprocess.check_output(
        ["git", *args],
        cwd=str(cwd) if cwd is not None else None,
        text=True,
        stderr=subprocess.PIPE,
    )
    return out.strip()


class GitRevisionTree:
    """
    Revision Tree backed by the git object store of a checkout.

    resolve_content_hash() answers "what is the object id of this path at
    this commit": a blob id for files, a tree id for directories. Two
    commits give the same id for a path iff its content is identical.
    """

    def __init__(self, repo_path: str | Path = "."):
        self.repo_path = Path(repo_path)

    def resolve_content_hash(self, revision: str, path: str) -> str:
        # `dir/` and `dir` name the same tree entry
        lookup = path.rstrip("/") or path
        try:
            return _git(
                ["rev-parse", "--verify", "--quiet", f"{revision}:{lookup}"],
                cwd=self.repo_path,
            )
        except subprocess.CalledProcessError as e:
            raise RevisionNotFound(revision, path, (e.stderr or "").strip()) from e
        except FileNotFoundError as e:
            # git binary missing is not "path absent", let it surface
            raise RuntimeError("git command not found") from e
