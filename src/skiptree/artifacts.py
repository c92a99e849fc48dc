# artifacts.py
from __future__ import annotations

import tempfile
import zipfile
from pathlib import Path

from .errors import ArtifactError
from .gitlab.api_client import APIClient, APIError
from .ui.console import get_console


class ArtifactStore:
    """
    Materializes the output files of a previous job into the checkout.

    restore is "overwrite by extraction": files already present in the
    project directory are replaced by the archived ones.
    """

    def __init__(self, client: APIClient, project_path: str | Path = "."):
        self.client = client
        self.project_path = Path(project_path)

    def restore(self, run_id: str) -> None:
        console = get_console()
        with tempfile.TemporaryDirectory(prefix="skiptree-") as tmp:
            archive = Path(tmp) / "artifacts.zip"
            console.print_debug(f"download artifacts of job {run_id} to {archive}")
            try:
                self.client.download_artifacts(run_id, archive)
            except (APIError, OSError) as e:
                raise ArtifactError("download", run_id, str(e)) from e

            console.print_debug(f"extract {archive} to {self.project_path}")
            try:
                with zipfile.ZipFile(archive) as zf:
                    names = zf.namelist()
                    zf.extractall(path=self.project_path)
            except (zipfile.BadZipFile, OSError) as e:
                raise ArtifactError("extract", run_id, str(e)) from e

        console.print_info(f"artifacts of job {run_id} restored ({len(names)} entries)")
