# ledger/remote.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ..errors import LEDGER, SkipTreeError
from ..fingerprint import RevisionTree, compute_fingerprint
from ..gitlab.api_client import APIClient, APIError
from ..gitlab.models import RemoteJob
from ..gitlab.trace import MAX_TRACE_SIZE, parse_oldest_ancestor
from ..model import Fingerprint, LedgerHit, parse_timestamp
from ..ui.console import get_console
from .base import Ledger

DEFAULT_MAX_JOBS = 1000
DEFAULT_MAX_PAGES = 5
DEFAULT_MAX_SAME_REF = 2


@dataclass(frozen=True)
class SearchBudgets:
    max_jobs: int = DEFAULT_MAX_JOBS          # candidates inspected, all pages
    max_pages: int = DEFAULT_MAX_PAGES        # pages fetched
    max_same_ref: int = DEFAULT_MAX_SAME_REF  # mismatches tolerated on the current ref


class RemoteQueryLedger(Ledger):
    """
    Walks the remote job history, newest first, and recomputes the watch
    set fingerprint at each candidate's commit.

    Only jobs with the same name are compared. The walk gives up as soon
    as one of the SearchBudgets is exceeded.
    """

    artifact_errors_fatal = True

    def __init__(
        self,
        client: APIClient,
        tree: RevisionTree,
        watch_set: List[str],
        job_name: str,
        ref: Optional[str] = None,
        budgets: Optional[SearchBudgets] = None,
    ):
        self.client = client
        self.tree = tree
        self.watch_set = list(watch_set)
        self.job_name = job_name
        self.ref = ref
        self.budgets = budgets or SearchBudgets()

    def _fetch_page(self, page: int) -> List[RemoteJob]:
        get_console().print_debug(f"GET jobs?scope=success&per_page=100&page={page}")
        try:
            jobs = self.client.list_jobs(page)
        except APIError as e:
            raise SkipTreeError(LEDGER, "cannot list project jobs", {"page": page, "error": e}) from e
        get_console().print_debug(f" -> {len(jobs)} jobs fetched")
        return jobs

    def _matches(self, job: RemoteJob, current_raw: str) -> bool:
        if not job.commit_sha:
            return False
        try:
            candidate = compute_fingerprint(self.tree, job.commit_sha, self.watch_set)
        except SkipTreeError:
            # commit gone (force push, shallow clone) or path absent back then
            return False
        return candidate.raw == current_raw

    def lookup(self, fingerprint: Fingerprint) -> Optional[LedgerHit]:
        console = get_console()
        budgets = self.budgets
        inspected = 0
        same_ref_mismatches = 0

        for page in range(1, budgets.max_pages + 1):
            jobs = self._fetch_page(page)
            if not jobs:
                console.print_debug(f"history exhausted at page {page}")
                return None

            for job in jobs:
                if job.name != self.job_name:
                    continue
                if job.status and job.status != "success":
                    continue
                if inspected >= budgets.max_jobs:
                    console.print_debug(f"max_jobs reached: {inspected} jobs checked")
                    return None

                inspected += 1
                console.print_debug(f"check job {job.id} ({job.ref} @ {job.commit_sha})")
                if self._matches(job, fingerprint.raw):
                    console.print_debug(f"job found in page {page} !")
                    return self._hit(job)

                if self.ref is not None and job.ref == self.ref:
                    same_ref_mismatches += 1
                    if same_ref_mismatches > budgets.max_same_ref:
                        console.print_debug(
                            f"max_same_ref: {same_ref_mismatches} > {budgets.max_same_ref}"
                        )
                        return None

            console.print_debug(
                f"job not found in page {page}: {inspected} jobs checked, "
                f"{same_ref_mismatches} with the same ref"
            )

        console.print_debug(f"max_pages reached ({budgets.max_pages})")
        return None

    def _hit(self, job: RemoteJob) -> LedgerHit:
        try:
            expire_at = parse_timestamp(job.artifacts_expire_at)
        except ValueError:
            get_console().print_warning(f"cannot parse artifacts_expire_at={job.artifacts_expire_at!r}")
            expire_at = None
        return LedgerHit(
            run_id=str(job.id),
            web_url=job.web_url,
            origin_url=self._oldest_ancestor(job),
            has_artifacts=job.artifacts_expire_at is not None,
            artifacts_expire_at=expire_at,
        )

    def _oldest_ancestor(self, job: RemoteJob) -> str:
        # best effort: a skipped job points at the one it skipped to
        try:
            trace = self.client.fetch_trace(job.id, MAX_TRACE_SIZE)
        except APIError as e:
            get_console().print_debug(f"trace of job {job.id} unavailable: {e}")
            return job.web_url
        return parse_oldest_ancestor(trace) or job.web_url

    def record(self, fingerprint: Fingerprint, run_id: str) -> None:
        # the job list is the history: a successful job records itself
        get_console().print_debug(f"job {run_id} will be found in the job history once successful")
