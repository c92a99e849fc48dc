from skiptree.gitlab.trace import parse_oldest_ancestor


def test_found():
    trace = "step 1\n[skip-ci-oldest-ancestor]=https://gitlab.localhost/a/b/-/jobs/12\n[skip-ci-done]\n"
    assert parse_oldest_ancestor(trace) == "https://gitlab.localhost/a/b/-/jobs/12"


def test_windows_line_endings():
    trace = "[skip-ci-oldest-ancestor]=https://gitlab.localhost/a/b/-/jobs/12\r\n"
    assert parse_oldest_ancestor(trace) == "https://gitlab.localhost/a/b/-/jobs/12"


def test_not_found():
    assert parse_oldest_ancestor("nothing to see\n") is None


def test_stops_at_done_key():
    trace = "[skip-ci-done]\n[skip-ci-oldest-ancestor]=https://elsewhere\n"
    assert parse_oldest_ancestor(trace) is None


def test_truncated_line():
    assert parse_oldest_ancestor("[skip-ci-oldest-ancestor]=https://gitlab.loc") is None
