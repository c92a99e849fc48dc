# cli.py
from __future__ import annotations

import sys

import click

from .artifacts import ArtifactStore
from .config import STRATEGIES, STRATEGY_API, Config, config_from_env
from .engine import DecisionEngine
from .errors import SkipTreeError
from .fingerprint import compute_fingerprint
from .git_facts.git import GitRevisionTree
from .gitlab.api_client import APIClient
from .ledger.base import Ledger
from .ledger.local import LocalHistoryLedger
from .ledger.remote import RemoteQueryLedger
from .marker import MarkerStore
from .model import Decision, Outcome, parse_watch_set
from .ui.console import Console, get_console, set_console

# Exit contract with the pipeline:
#   ./skiptree check || ./run-the-step.sh
EXIT_SKIP = 0
EXIT_RUN = 1
EXIT_ERROR = 2
EXIT_CONFIG_ERROR = 6


def exit_code_for(outcome: Outcome) -> int:
    if outcome.decision is Decision.SKIP:
        return EXIT_SKIP
    if outcome.decision is Decision.RUN:
        return EXIT_RUN
    return EXIT_ERROR


def build_ledger(config: Config, tree: GitRevisionTree, client: APIClient | None) -> Ledger:
    if config.strategy == STRATEGY_API:
        return RemoteQueryLedger(
            client,
            tree,
            config.watch_set,
            job_name=config.job_name,
            ref=config.ref,
            budgets=config.budgets,
        )
    return LocalHistoryLedger(config.history_path, history_max=config.history_max)


def build_engine(config: Config) -> DecisionEngine:
    tree = GitRevisionTree(config.project_path)
    client = None
    if config.api_url:
        client = APIClient(
            config.api_url,
            config.project_id,
            config.api_read_token,
            job_token=config.job_token,
        )
    return DecisionEngine(
        config,
        tree=tree,
        ledger=build_ledger(config, tree, client),
        markers=MarkerStore(config.marker_path),
        artifacts=ArtifactStore(client, config.project_path) if client is not None else None,
    )


def _load_config(**overrides) -> Config:
    console = get_console()
    try:
        config = config_from_env(**overrides)
    except SkipTreeError as e:
        console.print_error(
            "Configuration error",
            e.message,
            details=[f"{k}={v}" for k, v in e.details.items()] or None,
            suggestion="Set the CI variables listed in `skiptree --help`.",
        )
        sys.exit(EXIT_CONFIG_ERROR)
    if config.verbose and not console.debug:
        console.debug = True
    console.print_debug("config:\n  " + "\n  ".join(config.describe()))
    return config


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (verbose decision trace and stack traces)",
)
@click.pass_context
def cli(ctx, debug):
    """
    skiptree: skip a CI step when its watched paths match a past successful job.

    \b
    Required variables: SKIP_IF_TREE_OK_IN_PAST, CI_JOB_NAME, CI_JOB_ID,
    CI_PROJECT_ID, CI_PROJECT_DIR; with the api strategy also
    CI_API_V4_URL and API_READ_TOKEN.
    """
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.option(
    "--strategy",
    type=click.Choice(STRATEGIES),
    default=None,
    help="History to search: remote job list (api) or cached history file (cache)",
)
@click.option("--force", type=click.Choice(["true", "false"]), default=None, help="Force the decision")
@click.pass_context
def check(ctx, strategy, force):
    """Decide skip (exit 0) or run (exit 1) for the current job."""
    console = get_console()
    config = _load_config(strategy=strategy)
    if force is not None:
        config.force = force == "true"

    try:
        outcome = build_engine(config).decide()
    except SkipTreeError as e:
        # only raised for configuration problems, before any state is written
        console.print_error("Configuration error", e.message)
        sys.exit(EXIT_CONFIG_ERROR)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        console.print_exception(e)
        sys.exit(EXIT_ERROR)

    if outcome.decision is Decision.ERROR:
        console.print_error("Process error", "no skip decision could be made", details=[str(outcome.error)])
        if outcome.error is not None and ctx.obj.get("debug", False):
            console.print_exception(outcome.error)
    sys.exit(exit_code_for(outcome))


@cli.command()
@click.option("--revision", default=None, help="Revision to fingerprint (defaults to CI_COMMIT_SHA or HEAD)")
@click.argument("paths", nargs=-1)
def fingerprint(revision, paths):
    """Print the fingerprint of PATHS (or of SKIP_IF_TREE_OK_IN_PAST)."""
    console = get_console()
    try:
        if paths:
            watch_set, repo = parse_watch_set(paths), "."
        else:
            config = _load_config(require_credentials=False)
            watch_set, repo = config.watch_set, config.project_path
            revision = revision or config.revision
        fp = compute_fingerprint(GitRevisionTree(repo), revision or "HEAD", watch_set)
    except SkipTreeError as e:
        console.print_exception(e)
        sys.exit(EXIT_ERROR)
    console.print_fingerprint(fp.raw, fp.digest)


if __name__ == "__main__":
    cli()
