"""
Log sink — the two output channels of a run.

    user channel  terse, colored status lines (the terminal)
    log file      timestamped audit trail: every status line, every
                  command, its full stdout/stderr and exit code

The two are separate objects; nothing is redirected at the file
descriptor level. The sink is opened at process start and closed at
process exit on every path, so the log file is never silently lost.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TextIO

from dotbdb.core.models.result import RunResult
from dotbdb.core.observability.logging_config import file_handler

# Records written by the sink itself (module loggers share the same file)
RUN_LOGGER = "dotbdb.run"

# Fixed-width section boundary
SEPARATOR = "=" * 80

_OUTPUT_PREFIX = "    │ "


class LogSink:
    """Owns the audit log file and the user-facing stream."""

    def __init__(
        self,
        destination_path: Path,
        user_channel: TextIO | None = None,
        level: int = logging.DEBUG,
    ):
        self._path = Path(destination_path)
        self._user = user_channel if user_channel is not None else sys.stdout
        self._level = level
        self._handler: logging.Handler | None = None
        self._logger = logging.getLogger(RUN_LOGGER)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def user_channel(self) -> TextIO:
        return self._user

    @property
    def is_open(self) -> bool:
        return self._handler is not None

    # ── Lifecycle ───────────────────────────────────────────────

    def open(self) -> LogSink:
        """Create the log file and attach it to the root logger."""
        if self._handler is not None:
            return self
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._handler = file_handler(self._path, self._level)
        logging.getLogger().addHandler(self._handler)
        self._logger.setLevel(logging.DEBUG)
        self.separator()
        self.log(f"Log opened: {self._path}")
        return self

    def close(self) -> None:
        """Detach and close the log file. Safe to call more than once."""
        if self._handler is None:
            return
        self.log("Log closed")
        self.separator()
        logging.getLogger().removeHandler(self._handler)
        self._handler.close()
        self._handler = None
        try:
            self._user.flush()
        except (OSError, ValueError):
            pass

    def __enter__(self) -> LogSink:
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ── Writers ─────────────────────────────────────────────────

    def log(self, message: str, level: int = logging.INFO) -> None:
        self._logger.log(level, message)

    def separator(self) -> None:
        self._logger.info(SEPARATOR)

    def log_block(self, title: str, text: str, level: int = logging.INFO) -> None:
        """Log a multi-line block (command output) as one indented record."""
        lines = text.rstrip("\n").splitlines()
        if not lines:
            return
        body = "\n".join(f"{_OUTPUT_PREFIX}{line}" for line in lines)
        self._logger.log(level, "%s\n%s", title, body)

    def log_result(self, result: RunResult) -> None:
        """Record a finished command: literal command, output, exit code."""
        self.log(f"COMMAND {result.command}")
        if result.interactive:
            self.log("(interactive: output went to the terminal, not captured)")
        self.log_block("STDOUT", result.output)
        self.log_block("STDERR", result.error_output)
        if result.succeeded:
            self.log(f"EXIT 0 ({result.duration_ms}ms) {result.description}")
        else:
            self.log(
                f"FAILED description={result.description!r} "
                f"command={result.command!r} exit_code={result.exit_code}",
                level=logging.ERROR,
            )
