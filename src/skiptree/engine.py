# engine.py
from __future__ import annotations

from typing import Optional

from .artifacts import ArtifactStore
from .config import Config
from .errors import ARTIFACT, CONFIG, ArtifactError, SkipTreeError
from .fingerprint import RevisionTree, compute_fingerprint
from .gitlab.trace import SKIP_CI_DONE_KEY, SKIP_CI_OLDEST_ANCESTOR_KEY
from .ledger.base import Ledger
from .marker import MarkerStore
from .model import Decision, LedgerHit, Outcome
from .ui.console import get_console

# Unchecked --> Skip | Run, persisted in the marker file:
#
#   1. marker already written in this job  -> return it, nothing else
#   2. SKIP_CI_VALUE set                   -> forced decision
#   3. fingerprint the watch set at the current revision
#   4. ledger hit  -> restore artifacts, Skip
#      ledger miss -> record fingerprint, Run
#   5. write the marker
#
# Any error after this point still writes "false" so a retried job runs
# the step instead of failing on a half-made decision.


class DecisionEngine:
    def __init__(
        self,
        config: Config,
        *,
        tree: RevisionTree,
        ledger: Ledger,
        markers: MarkerStore,
        artifacts: Optional[ArtifactStore] = None,
    ):
        self.config = config
        self.tree = tree
        self.ledger = ledger
        self.markers = markers
        self.artifacts = artifacts

    @property
    def fail_on_artifact_error(self) -> bool:
        if self.config.fail_on_artifact_error is not None:
            return self.config.fail_on_artifact_error
        return self.ledger.artifact_errors_fatal

    def decide(self) -> Outcome:
        """
        Raises:
            SkipTreeError(kind="config") when the watch set is empty; no
            marker is read or written in that case
        """
        console = get_console()
        if not self.config.watch_set:
            raise SkipTreeError(CONFIG, "SKIP_IF_TREE_OK_IN_PAST is empty")

        existing = self.markers.read()
        if existing is not None:
            console.print_marker(existing is Decision.SKIP)
            return Outcome(existing, from_marker=True)

        try:
            outcome = self._decide()
            self.markers.write(outcome.decision)
        except SkipTreeError as e:
            self._write_run_marker()
            return Outcome(Decision.ERROR, error=e)
        except Exception:
            self._write_run_marker()
            raise

        if outcome.hit is not None and outcome.hit.origin_url:
            # read back by the next job that skips to this one
            console.print_info(f"{SKIP_CI_OLDEST_ANCESTOR_KEY}={outcome.hit.origin_url}")
        console.print_info(SKIP_CI_DONE_KEY)
        return outcome

    def _decide(self) -> Outcome:
        console = get_console()
        config = self.config

        if config.force is not None:
            console.print_forced(config.force)
            return Outcome(Decision.SKIP if config.force else Decision.RUN, forced=True)

        revision = config.revision or "HEAD"
        fingerprint = compute_fingerprint(self.tree, revision, config.watch_set)
        console.print_debug(f"{'-' * 80}\n{fingerprint.raw}{'-' * 80}")
        console.print_debug(f"digest={fingerprint.digest}")

        hit = self.ledger.lookup(fingerprint)
        if hit is None:
            self.ledger.record(fingerprint, config.job_id)
            console.print_tree_not_found(config.strategy + " history")
            return Outcome(Decision.RUN, fingerprint=fingerprint)

        console.print_tree_found(hit.web_url or hit.run_id, hit.origin_url)
        self._restore(hit)
        return Outcome(Decision.SKIP, fingerprint=fingerprint, hit=hit)

    def _restore(self, hit: LedgerHit) -> None:
        console = get_console()
        if self.config.no_artifact or self.artifacts is None:
            console.print_debug("artifact restore disabled")
            return
        if not hit.has_artifacts:
            console.print_debug(f"job {hit.run_id} has no artifacts, skip their download")
            return
        if hit.is_expired():
            if self.config.fail_on_expired_artifact:
                raise SkipTreeError(
                    ARTIFACT,
                    "artifact is expired",
                    {"job": hit.run_id, "expired_at": hit.artifacts_expire_at},
                )
            console.print_warning(f"artifact of job {hit.run_id} is expired, we ignore it")
            return

        try:
            self.artifacts.restore(hit.run_id)
        except ArtifactError as e:
            if self.fail_on_artifact_error:
                raise SkipTreeError(ARTIFACT, str(e), {"job": hit.run_id, "reason": e.reason}) from e
            console.print_warning(str(e))

    def _write_run_marker(self) -> None:
        try:
            self.markers.write(Decision.RUN)
        except SkipTreeError as e:
            get_console().print_debug(f"could not persist run marker: {e}")
