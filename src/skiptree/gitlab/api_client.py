# gitlab/api_client.py
from __future__ import annotations

import json
import shutil
import urllib.error
import urllib.request
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlencode

from .models import RemoteJob


class APIError(Exception):
    """Raised when API requests fail."""
    pass


class APIClient:
    """HTTP client for the project's job history."""

    def __init__(
        self,
        api_url: str,
        project_id: str,
        token: str,
        job_token: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize API client.

        Args:
            api_url: Base URL of the API (e.g., "https://gitlab.example.com/api/v4")
            project_id: Project whose jobs are listed
            token: Read credential for the job list and traces
            job_token: Credential of the current job, used to download artifacts
            timeout: Optional socket timeout in seconds
        """
        self.api_url = api_url.rstrip("/")
        self.project_id = project_id
        self.token = token
        self.job_token = job_token
        self.timeout = timeout

    @property
    def jobs_url(self) -> str:
        return f"{self.api_url}/projects/{self.project_id}/jobs"

    def _open(self, url: str, headers: dict):
        req = urllib.request.Request(url, headers=headers, method="GET")
        try:
            if self.timeout is None:
                return urllib.request.urlopen(req)
            return urllib.request.urlopen(req, timeout=self.timeout)
        except urllib.error.HTTPError as e:
            error_body = e.read().decode("utf-8", errors="replace") if e.fp else ""
            raise APIError(f"API request failed: {e.code} {e.reason}. {error_body}".strip())
        except urllib.error.URLError as e:
            raise APIError(f"Network error: {e.reason}")
        except ValueError as e:
            # malformed URL
            raise APIError(f"Invalid request URL {url!r}: {e}")

    def _get_json(self, path: str, params: Optional[dict] = None):
        url = f"{self.api_url}/{path.lstrip('/')}"
        if params:
            url = f"{url}?{urlencode(params)}"
        with self._open(url, {"PRIVATE-TOKEN": self.token, "Accept": "application/json"}) as response:
            body = response.read().decode("utf-8")
        try:
            return json.loads(body) if body else None
        except json.JSONDecodeError as e:
            raise APIError(f"Invalid JSON response: {e}")

    def list_jobs(self, page: int, per_page: int = 100) -> List[RemoteJob]:
        """
        Fetch one page of successful jobs, most recent first.

        Returns:
            List of RemoteJob; empty once the history is exhausted
        """
        data = self._get_json(
            f"projects/{self.project_id}/jobs",
            {"scope": "success", "per_page": per_page, "page": page},
        )
        if data is None:
            return []
        if not isinstance(data, list):
            raise APIError(f"Unexpected jobs payload: {type(data).__name__}")
        try:
            return [RemoteJob.from_dict(item) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            raise APIError(f"Invalid job in response: {e}")

    def fetch_trace(self, job_id: int | str, limit: int) -> str:
        """Return at most `limit` bytes of the job log, decoded leniently."""
        url = f"{self.jobs_url}/{job_id}/trace"
        with self._open(url, {"PRIVATE-TOKEN": self.token}) as response:
            data = response.read(limit)
        return data.decode("utf-8", errors="replace")

    def download_artifacts(self, job_id: int | str, dest: str | Path) -> Path:
        """
        Stream the artifact archive of a job to dest.

        Raises:
            APIError: on missing job token or any HTTP/network failure
        """
        if not self.job_token:
            raise APIError("CI_JOB_TOKEN undefined, cannot download artifacts")
        url = f"{self.jobs_url}/{job_id}/artifacts"
        dest = Path(dest)
        with self._open(url, {"JOB-TOKEN": self.job_token}) as response:
            with dest.open("wb") as f:
                shutil.copyfileobj(response, f)
        return dest
