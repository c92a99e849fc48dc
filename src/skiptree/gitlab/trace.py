# gitlab/trace.py
from __future__ import annotations

from typing import Optional

# A job that skipped prints these two lines into its log; the next job
# that matches it can follow the chain back to the job that really ran.
SKIP_CI_DONE_KEY = "[skip-ci-done]"
SKIP_CI_OLDEST_ANCESTOR_KEY = "[skip-ci-oldest-ancestor]"

MAX_TRACE_SIZE = 100_000


def parse_oldest_ancestor(trace: str) -> Optional[str]:
    """
    Find "[skip-ci-oldest-ancestor]=<url>" in a job log.

    Stops at "[skip-ci-done]": anything after it was printed by the step
    itself, not by us.
    """
    done = trace.find(SKIP_CI_DONE_KEY)
    if done >= 0:
        trace = trace[:done]
    start = trace.find(SKIP_CI_OLDEST_ANCESTOR_KEY + "=")
    if start < 0:
        return None
    start += len(SKIP_CI_OLDEST_ANCESTOR_KEY) + 1
    end = trace.find("\n", start)
    if end < 0:
        # truncated line, the url may be cut
        return None
    url = trace[start:end].strip()
    return url or None
