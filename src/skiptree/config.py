# config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import List, Mapping, Optional

from .errors import CONFIG, SkipTreeError
from .ledger.local import DEFAULT_HISTORY_MAX
from .ledger.remote import DEFAULT_MAX_JOBS, DEFAULT_MAX_PAGES, DEFAULT_MAX_SAME_REF, SearchBudgets
from .model import parse_watch_set

STRATEGY_API = "api"
STRATEGY_CACHE = "cache"
STRATEGIES = (STRATEGY_API, STRATEGY_CACHE)

HISTORY_FILE_NAME = "ci_ok_history"


@dataclass
class Config:
    """Everything one decision needs, resolved once at startup."""
    watch_set: List[str]
    job_name: str
    job_id: str
    project_id: str
    project_path: str
    strategy: str = STRATEGY_API
    api_url: str = ""
    api_read_token: str = ""
    job_token: Optional[str] = None
    ref: Optional[str] = None
    revision: Optional[str] = None  # None -> HEAD of project_path
    budgets: SearchBudgets = field(default_factory=SearchBudgets)
    history_max: int = DEFAULT_HISTORY_MAX
    force: Optional[bool] = None
    fail_on_expired_artifact: bool = False
    fail_on_artifact_error: Optional[bool] = None  # None -> ledger default
    no_artifact: bool = False
    verbose: bool = False

    @property
    def marker_path(self) -> str:
        return os.path.join(self.project_path, f"ci-skip-{self.project_id}-{self.job_id}")

    @property
    def history_path(self) -> str:
        return os.path.join(self.project_path, HISTORY_FILE_NAME)

    def describe(self) -> List[str]:
        """key = value lines for verbose output; credentials are masked."""
        def mask(v: Optional[str]) -> str:
            return "*" * 10 if v else ""

        return [
            f"strategy          = {self.strategy}",
            f"watch_set         = {' '.join(self.watch_set)}",
            f"job_name          = {self.job_name}",
            f"job_id            = {self.job_id}",
            f"project_id        = {self.project_id}",
            f"project_path      = {self.project_path}",
            f"ref               = {self.ref or ''}",
            f"revision          = {self.revision or 'HEAD'}",
            f"api_url           = {self.api_url}",
            f"api_read_token    = {mask(self.api_read_token)}",
            f"job_token         = {mask(self.job_token)}",
            f"max_pages         = {self.budgets.max_pages}",
            f"max_jobs          = {self.budgets.max_jobs}",
            f"max_same_ref      = {self.budgets.max_same_ref}",
            f"history_max       = {self.history_max}",
            f"marker_path       = {self.marker_path}",
        ]


def get_project_path(ci_builds_dir: str, ci_project_dir: str) -> str:
    """
    Where the checkout really is.

    CI_PROJECT_DIR is reported relative to the runner's builds dir mapping;
    when it is not under CI_BUILDS_DIR, its first component is replaced by
    the parent of CI_BUILDS_DIR.
    """
    if not ci_builds_dir or ci_project_dir.startswith(ci_builds_dir):
        return ci_project_dir
    parent = PurePosixPath(ci_builds_dir).parent
    return str(parent / ci_project_dir.lstrip("/"))


def _require(env: Mapping[str, str], name: str) -> str:
    value = env.get(name)
    if not value:
        raise SkipTreeError(CONFIG, f"{name} is not defined")
    return value


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    # unparseable or negative -> default, like an unset variable
    try:
        value = int(env.get(name, ""))
    except ValueError:
        return default
    return value if value >= 0 else default


def _flag(env: Mapping[str, str], name: str) -> bool:
    return env.get(name, "") == "true"


def _optional_flag(env: Mapping[str, str], name: str) -> Optional[bool]:
    value = env.get(name)
    if value in ("true", "false"):
        return value == "true"
    return None


def config_from_env(
    environ: Optional[Mapping[str, str]] = None,
    *,
    strategy: Optional[str] = None,
    require_credentials: bool = True,
) -> Config:
    """
    Build a Config from CI variables.

    strategy overrides SKIP_CI_STRATEGY. With require_credentials=False the
    api settings are read but not enforced, for commands that never query
    the job history.

    Raises:
        SkipTreeError(kind="config") on missing or invalid required values
    """
    env = os.environ if environ is None else environ

    strategy = strategy or env.get("SKIP_CI_STRATEGY") or STRATEGY_API
    if strategy not in STRATEGIES:
        raise SkipTreeError(CONFIG, f"SKIP_CI_STRATEGY must be one of {', '.join(STRATEGIES)}", {"value": strategy})

    project_path = get_project_path(env.get("CI_BUILDS_DIR", ""), _require(env, "CI_PROJECT_DIR"))
    project_id = _require(env, "CI_PROJECT_ID")
    job_id = _require(env, "CI_JOB_ID")

    api_url = env.get("CI_API_V4_URL", "")
    api_read_token = env.get("API_READ_TOKEN", "")
    if strategy == STRATEGY_API and require_credentials:
        api_url = _require(env, "CI_API_V4_URL")
        api_read_token = _require(env, "API_READ_TOKEN")

    job_name = _require(env, "CI_JOB_NAME")
    watch_set = parse_watch_set(_require(env, "SKIP_IF_TREE_OK_IN_PAST"))

    return Config(
        watch_set=watch_set,
        job_name=job_name,
        job_id=job_id,
        project_id=project_id,
        project_path=project_path,
        strategy=strategy,
        api_url=api_url,
        api_read_token=api_read_token,
        job_token=env.get("CI_JOB_TOKEN") or None,
        ref=env.get("CI_COMMIT_REF_NAME") or None,
        revision=env.get("CI_COMMIT_SHA") or None,
        budgets=SearchBudgets(
            max_jobs=_int(env, "SKIP_CI_COMMIT_TO_CHECK_SAME_JOB_MAX", DEFAULT_MAX_JOBS),
            max_pages=_int(env, "SKIP_CI_PAGE_TO_FETCH_MAX", DEFAULT_MAX_PAGES),
            max_same_ref=_int(env, "SKIP_CI_COMMIT_TO_CHECK_SAME_REF_MAX", DEFAULT_MAX_SAME_REF),
        ),
        history_max=_int(env, "SKIP_CI_HISTORY_MAX", DEFAULT_HISTORY_MAX),
        force=_optional_flag(env, "SKIP_CI_VALUE"),
        fail_on_expired_artifact=_flag(env, "FAIL_IF_ARTIFACTS_EXPIRED"),
        fail_on_artifact_error=_optional_flag(env, "SKIP_CI_FAIL_ON_ARTIFACT_ERROR"),
        no_artifact=_flag(env, "SKIP_CI_NO_ARTIFACT"),
        verbose=_flag(env, "SKIP_CI_VERBOSE"),
    )
