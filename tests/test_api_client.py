import io
import json
import urllib.error

import pytest

from skiptree.gitlab.api_client import APIClient, APIError


class Recorder:
    def __init__(self, body=b"", error=None):
        self.body = body
        self.error = error
        self.requests = []

    def __call__(self, req, timeout=None):
        self.requests.append(req)
        if self.error is not None:
            raise self.error
        return io.BytesIO(self.body)


JOBS = [
    {
        "artifacts_expire_at": "2023-03-12T19:59:33.250Z",
        "commit": {"id": "2121212121212121212121212121212121212121"},
        "id": 12345678,
        "name": "jobA",
        "ref": "branch1",
        "status": "success",
        "web_url": "https://gitlab.localhost/skip/skip-rs/-/jobs/12345678",
    },
    {
        "artifacts_expire_at": None,
        "commit": {"id": "3333333333333333333333333333333333333333"},
        "id": 12345679,
        "name": "jobA",
        "ref": "branch2",
        "status": "success",
        "web_url": "https://gitlab.localhost/skip/skip-rs/-/jobs/12345679",
    },
]


@pytest.fixture
def client():
    return APIClient("http://localhost/api/v4/", "123", "__TOKEN__", job_token="__JOB_TOKEN__")


def test_list_jobs(monkeypatch, client):
    rec = Recorder(json.dumps(JOBS).encode())
    monkeypatch.setattr("urllib.request.urlopen", rec)
    jobs = client.list_jobs(2)

    req = rec.requests[0]
    assert req.full_url == "http://localhost/api/v4/projects/123/jobs?scope=success&per_page=100&page=2"
    assert req.get_header("Private-token") == "__TOKEN__"
    assert [j.id for j in jobs] == [12345678, 12345679]
    assert jobs[0].commit_sha == "2121212121212121212121212121212121212121"
    assert jobs[0].ref == "branch1"
    assert jobs[0].artifacts_expire_at == "2023-03-12T19:59:33.250Z"
    assert jobs[1].artifacts_expire_at is None


def test_list_jobs_empty_page(monkeypatch, client):
    monkeypatch.setattr("urllib.request.urlopen", Recorder(b"[]"))
    assert client.list_jobs(9) == []


def test_list_jobs_invalid_json(monkeypatch, client):
    monkeypatch.setattr("urllib.request.urlopen", Recorder(b"<html>"))
    with pytest.raises(APIError, match="Invalid JSON"):
        client.list_jobs(1)


def test_list_jobs_unexpected_payload(monkeypatch, client):
    monkeypatch.setattr("urllib.request.urlopen", Recorder(b'{"message": "401 Unauthorized"}'))
    with pytest.raises(APIError):
        client.list_jobs(1)


def test_http_error(monkeypatch, client):
    err = urllib.error.HTTPError("http://x", 401, "Unauthorized", {}, io.BytesIO(b"bad token"))
    monkeypatch.setattr("urllib.request.urlopen", Recorder(error=err))
    with pytest.raises(APIError, match="401 Unauthorized"):
        client.list_jobs(1)


def test_network_error(monkeypatch, client):
    monkeypatch.setattr("urllib.request.urlopen", Recorder(error=urllib.error.URLError("refused")))
    with pytest.raises(APIError, match="Network error"):
        client.list_jobs(1)


def test_fetch_trace_is_limited(monkeypatch, client):
    rec = Recorder(b"0123456789")
    monkeypatch.setattr("urllib.request.urlopen", rec)
    assert client.fetch_trace(5, limit=4) == "0123"
    assert rec.requests[0].full_url == "http://localhost/api/v4/projects/123/jobs/5/trace"


def test_download_artifacts(monkeypatch, client, tmp_path):
    rec = Recorder(b"PK-archive")
    monkeypatch.setattr("urllib.request.urlopen", rec)
    dest = client.download_artifacts("42", tmp_path / "a.zip")
    assert dest.read_bytes() == b"PK-archive"
    assert rec.requests[0].full_url == "http://localhost/api/v4/projects/123/jobs/42/artifacts"
    assert rec.requests[0].get_header("Job-token") == "__JOB_TOKEN__"


def test_download_artifacts_without_job_token(tmp_path):
    client = APIClient("http://localhost/api/v4", "123", "__TOKEN__")
    with pytest.raises(APIError, match="CI_JOB_TOKEN"):
        client.download_artifacts("42", tmp_path / "a.zip")
