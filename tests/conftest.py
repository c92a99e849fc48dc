"""
Shared pytest fixtures for skiptree tests.

Fakes stand in for the external collaborators:
- FakeTree: Revision Tree backed by a dict
- FakeClient: job history API serving canned pages
"""

from __future__ import annotations

import io
import zipfile
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

from skiptree.git_facts.git import RevisionNotFound
from skiptree.gitlab.api_client import APIError
from skiptree.gitlab.models import RemoteJob
from skiptree.ui.console import Console, set_console


class FakeTree:
    def __init__(self, hashes: Dict[Tuple[str, str], str]):
        self.hashes = hashes
        self.calls: List[Tuple[str, str]] = []

    def resolve_content_hash(self, revision: str, path: str) -> str:
        self.calls.append((revision, path))
        try:
            return self.hashes[(revision, path)]
        except KeyError:
            raise RevisionNotFound(revision, path)


class FakeClient:
    def __init__(self, pages: List[List[RemoteJob]], traces: Optional[Dict[int, str]] = None,
                 artifacts: Optional[Dict[str, bytes]] = None):
        self.pages = pages
        self.traces = traces or {}
        self.artifacts = artifacts or {}
        self.pages_fetched: List[int] = []
        self.downloads: List[str] = []

    def list_jobs(self, page: int, per_page: int = 100) -> List[RemoteJob]:
        self.pages_fetched.append(page)
        if page > len(self.pages):
            return []
        return self.pages[page - 1]

    def fetch_trace(self, job_id, limit: int) -> str:
        if job_id not in self.traces:
            raise APIError("API request failed: 404 Not Found.")
        return self.traces[job_id][:limit]

    def download_artifacts(self, job_id, dest) -> Path:
        self.downloads.append(str(job_id))
        if str(job_id) not in self.artifacts:
            raise APIError("API request failed: 404 Not Found.")
        Path(dest).write_bytes(self.artifacts[str(job_id)])
        return Path(dest)


def make_job(id, commit, name="jobA", ref="branch1", status="success", expire_at=None) -> RemoteJob:
    return RemoteJob(
        id=id,
        name=name,
        ref=ref,
        status=status,
        commit_sha=commit,
        web_url=f"https://gitlab.localhost/skip/skip-rs/-/jobs/{id}",
        artifacts_expire_at=expire_at,
    )


def zip_bytes(files: Dict[str, str]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return buf.getvalue()


WATCH_SET = ["service-A", "lib-1", ".ci.yml"]


@pytest.fixture(autouse=True)
def quiet_console():
    """Fresh non-debug console for every test."""
    console = Console(debug=False)
    set_console(console)
    yield console
    set_console(Console())


@pytest.fixture
def tree() -> FakeTree:
    hashes = {}
    for rev, values in {
        "R1": ("h1", "h2", "h3"),
        "R0": ("h1", "h2", "h3"),
        "R2": ("h1", "hX", "h3"),
    }.items():
        for path, h in zip(WATCH_SET, values):
            hashes[(rev, path)] = h
    return FakeTree(hashes)


def _run_git(repo: Path, *args: str) -> str:
    import subprocess

    return subprocess.check_output(
        ["git", "-c", "user.name=skiptree", "-c", "user.email=skiptree@localhost", *args],
        cwd=repo,
        text=True,
    ).strip()


@pytest.fixture
def git_repo(tmp_path):
    """
    Repository with three commits:
      c0: service-A/a.txt, lib-1/b.txt, .ci.yml
      c1: README changed only (watched paths identical to c0)
      c2: lib-1/b.txt changed
    Returns (path, [c0, c1, c2]).
    """
    import shutil

    if shutil.which("git") is None:
        pytest.skip("git not available")

    repo = tmp_path / "repo"
    (repo / "service-A").mkdir(parents=True)
    (repo / "lib-1").mkdir()
    _run_git(repo, "init", "-q")
    (repo / "service-A" / "a.txt").write_text("service\n")
    (repo / "lib-1" / "b.txt").write_text("lib v1\n")
    (repo / ".ci.yml").write_text("stages: [test]\n")
    (repo / "README").write_text("one\n")
    _run_git(repo, "add", "-A")
    _run_git(repo, "commit", "-q", "-m", "c0")
    c0 = _run_git(repo, "rev-parse", "HEAD")

    (repo / "README").write_text("two\n")
    _run_git(repo, "commit", "-q", "-am", "c1")
    c1 = _run_git(repo, "rev-parse", "HEAD")

    (repo / "lib-1" / "b.txt").write_text("lib v2\n")
    _run_git(repo, "commit", "-q", "-am", "c2")
    c2 = _run_git(repo, "rev-parse", "HEAD")
    return repo, [c0, c1, c2]
