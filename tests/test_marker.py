import pytest

from skiptree.errors import SkipTreeError
from skiptree.marker import MarkerStore
from skiptree.model import Decision


def test_missing_marker_is_unset(tmp_path):
    assert MarkerStore(tmp_path / "ci-skip-1-2").read() is None


@pytest.mark.parametrize(
    "content, expected",
    [("true", Decision.SKIP), ("false", Decision.RUN), ("", Decision.RUN), ("yes", Decision.RUN)],
)
def test_read_marker(tmp_path, content, expected):
    path = tmp_path / "ci-skip-1-2"
    path.write_text(content)
    assert MarkerStore(path).read() is expected


def test_write_marker(tmp_path):
    path = tmp_path / "ci-skip-1-2"
    store = MarkerStore(path)
    store.write(Decision.SKIP)
    assert path.read_text() == "true"
    store.write(Decision.RUN)
    assert path.read_text() == "false"
    assert store.read() is Decision.RUN


def test_error_is_persisted_as_run(tmp_path):
    path = tmp_path / "ci-skip-1-2"
    MarkerStore(path).write(Decision.ERROR)
    assert path.read_text() == "false"


def test_write_error(tmp_path):
    store = MarkerStore(tmp_path / "missing-dir" / "ci-skip-1-2")
    with pytest.raises(SkipTreeError) as exc:
        store.write(Decision.RUN)
    assert exc.value.kind == "marker"
