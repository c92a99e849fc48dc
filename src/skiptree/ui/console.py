"""Console output formatting utilities for skiptree."""

from __future__ import annotations

import sys
from typing import Optional


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show verbose output including stack traces
        """
        self.debug = debug

    def print_header(self, title: str) -> None:
        """Print a section header."""
        print(f"\n{title}")
        print("-" * len(title))

    def print_fingerprint(self, raw: str, digest: str) -> None:
        """Print the canonical listing and its digest."""
        self.print_header("FINGERPRINT")
        print(raw, end="" if raw.endswith("\n") else "\n")
        print(f"Digest: {digest}")

    def print_tree_found(self, where: str, origin: Optional[str] = None) -> None:
        """Print the skip decision."""
        print(f"SKIP: tree found in job {where}")
        if origin and origin != where:
            print(f"Oldest ancestor: {origin}")

    def print_tree_not_found(self, source: str) -> None:
        """Print the run decision."""
        print(f"RUN: tree not found in {source}")

    def print_forced(self, skip: bool) -> None:
        """Print forced decision message."""
        print(f"FORCED: {'skip' if skip else 'run'} (SKIP_CI_VALUE)")

    def print_marker(self, skip: bool) -> None:
        """Print decision already taken in this job."""
        print(f"ALREADY DECIDED: {'skip' if skip else 'run'}")

    def print_warning(self, message: str) -> None:
        """Print warning message."""
        print(f"WARNING: {message}")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: BaseException) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exception(type(exc), exc, exc.__traceback__)
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
