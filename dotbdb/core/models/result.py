"""
RunResult — the outcome of one external command.

Commands never raise: the runner captures the exit code and output here
and the caller decides whether a failure aborts the run. Results are
written to the audit log and never persisted beyond it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current local time, second precision (matches the log layout)."""
    return datetime.now().isoformat(timespec="seconds")


class RunResult(BaseModel):
    """Result of a single external command invocation."""

    description: str
    command: str                    # literal command string, shell-quoted
    exit_code: int = 0

    output: str = ""                # captured stdout
    error_output: str = ""          # captured stderr
    interactive: bool = False       # output went straight to the terminal

    started_at: str = Field(default_factory=_now_iso)
    ended_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    @property
    def succeeded(self) -> bool:
        """Whether the command exited with status 0."""
        return self.exit_code == 0

    @classmethod
    def success(
        cls,
        description: str,
        command: str,
        output: str = "",
        **kwargs: Any,
    ) -> RunResult:
        """Create a successful result."""
        return cls(
            description=description,
            command=command,
            exit_code=0,
            output=output,
            **kwargs,
        )

    @classmethod
    def failure(
        cls,
        description: str,
        command: str,
        exit_code: int = 1,
        error_output: str = "",
        **kwargs: Any,
    ) -> RunResult:
        """Create a failed result. ``exit_code`` must be non-zero."""
        return cls(
            description=description,
            command=command,
            exit_code=exit_code or 1,
            error_output=error_output,
            **kwargs,
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON-serializable view, including ``succeeded``."""
        data = self.model_dump(mode="json")
        data["succeeded"] = self.succeeded
        return data
