# marker.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

from .errors import MARKER, SkipTreeError
from .model import Decision
from .ui.console import get_console


class MarkerStore:
    """
    Per-run decision file ("true" = skip, "false" = run).

    The first invocation in a job writes it; every later invocation of the
    same guarded step reads it back instead of searching again.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def read(self) -> Optional[Decision]:
        console = get_console()
        if not self.path.exists():
            console.print_debug(f"marker {self.path} doesn't exist")
            return None
        try:
            content = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            console.print_debug(f"marker {self.path} read error: {e}")
            return None
        console.print_debug(f"marker {self.path} exists with content: {content!r}")
        return Decision.SKIP if content == "true" else Decision.RUN

    def write(self, decision: Decision) -> None:
        value = decision.marker_value
        get_console().print_debug(f"write {value} to marker {self.path}")
        try:
            self.path.write_text(value, encoding="utf-8")
        except OSError as e:
            raise SkipTreeError(MARKER, "write marker error", {"path": str(self.path), "error": e}) from e
