"""
Scratch files — transient files the run creates, removed in cleanup.

Only files this run created are ever registered: a path that already
existed before the run is left alone, even if the run touches it.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


class ScratchFiles:
    """Registry of files to delete when the run ends."""

    def __init__(self) -> None:
        self._paths: list[Path] = []

    @property
    def paths(self) -> list[Path]:
        return list(self._paths)

    def register(self, path: Path) -> bool:
        """Track ``path`` for cleanup if it does not exist yet.

        Returns:
            True if the path is now tracked (the run will create it).
        """
        path = Path(path)
        if path.exists():
            logger.debug("Not tracking pre-existing file %s", path)
            return False
        if path not in self._paths:
            self._paths.append(path)
        return True

    def touch(self, path: Path) -> bool:
        """Create an empty marker file owned by this run."""
        path = Path(path)
        if not self.register(path):
            return False
        path.touch()
        logger.debug("Created scratch file %s", path)
        return True

    def new_file(self, suffix: str = "", prefix: str = "bdb_") -> Path:
        """Create a fresh temporary file and track it."""
        fd, name = tempfile.mkstemp(suffix=suffix, prefix=prefix)
        # Only the name is needed; writers reopen it
        with open(fd, "wb"):
            pass
        path = Path(name)
        self._paths.append(path)
        logger.debug("Created scratch file %s", path)
        return path

    def cleanup(self) -> list[Path]:
        """Remove every tracked file. Failures are logged, never raised.

        Returns:
            Paths actually removed.
        """
        removed: list[Path] = []
        while self._paths:
            path = self._paths.pop()
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning("Could not remove scratch file %s: %s", path, e)
                continue
            removed.append(path)
            logger.debug("Removed scratch file %s", path)
        return removed
