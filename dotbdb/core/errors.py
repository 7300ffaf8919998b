"""
Error taxonomy — every fatal condition carries the exit code the run ends with.

External commands never raise (their failures are ``RunResult`` values).
Exceptions are reserved for conditions that end the run; each one is
defined next to the code that raises it and derives from ``BootstrapError``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dotbdb.core.models.result import RunResult

# ── Exit codes ──────────────────────────────────────────────────

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_UNSUPPORTED_PLATFORM = 69   # sysexits EX_UNAVAILABLE
EXIT_INTERRUPTED = 130           # 128 + SIGINT
EXIT_TERMINATED = 143            # 128 + SIGTERM


class BootstrapError(Exception):
    """Base class for every error that aborts a run."""

    exit_code: int = EXIT_FAILURE

    def __init__(self, message: str, *, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class CommandFailedError(BootstrapError):
    """A fatal external command returned non-zero.

    The run ends with the command's own exit code.
    """

    def __init__(self, result: RunResult):
        self.result = result
        super().__init__(
            f"{result.description} failed (exit {result.exit_code}): {result.command}",
            exit_code=result.exit_code or EXIT_FAILURE,
        )


class RunInterrupted(BootstrapError):
    """The operator (or the system) stopped the run."""

    def __init__(self, message: str = "Interrupted", *, exit_code: int = EXIT_INTERRUPTED):
        super().__init__(message, exit_code=exit_code)
