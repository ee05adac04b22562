"""
External collaborators: ripgrep for text search and the local filesystem.

Both degrade to ``None`` when nothing is available so callers can render
an in-band "not found" note instead of failing the request.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from typing import List, Optional


logger = logging.getLogger(__name__)


class SearchBackend(ABC):
    """Line-oriented text search over a directory."""

    @abstractmethod
    def search(self, query: str, path: str) -> Optional[str]:
        """Return ``path:line:text`` output, or None when nothing matched."""
        pass


class RipgrepSearch(SearchBackend):
    """Search by shelling out to ``rg``.

    The query is handed to rg verbatim through ``--regexp`` so a leading
    dash is never read as a flag. Output is decoded as UTF-8 with
    replacement characters for bytes that do not decode. No timeout is
    applied: a hung rg process blocks the request until it exits.
    """

    def __init__(self, executable: str = "rg"):
        self.executable = executable

    def build_command(self, query: str, path: str) -> List[str]:
        return [
            self.executable,
            "--no-heading",
            "--line-number",
            "--color", "never",
            "--regexp", query,
            "--",
            path,
        ]

    def search(self, query: str, path: str) -> Optional[str]:
        command = self.build_command(query, path)
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
            )
        except (OSError, ValueError) as e:
            logger.warning(f"Could not run {self.executable}: {e}")
            return None

        # rg exits 1 for "no matches" and 2 for errors; both mean nothing to show
        if result.returncode != 0:
            if result.stderr:
                logger.debug(f"{self.executable} exited {result.returncode}: {result.stderr.strip()}")
            return None

        return result.stdout


def read_source_file(path: str) -> Optional[str]:
    """Read a UTF-8 text file, or return None if it is missing or unreadable."""
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return f.read()
    except OSError as e:
        logger.debug(f"Could not read {path}: {e}")
        return None
