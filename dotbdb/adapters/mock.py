"""
Mock adapter — test double for every command the bootstrapper runs.

Used by the test suite and by ``bdb --mock`` to walk through a bootstrap
without touching the host. Configurable per command prefix; records every
call so tests can prove that no mutating command was issued.
"""

from __future__ import annotations

import shlex
from typing import Iterable, Mapping, Sequence

from dotbdb.adapters.base import CommandAdapter
from dotbdb.core.models.result import RunResult


class MockCommandAdapter(CommandAdapter):
    """Universal mock command runner.

    By default every command succeeds. ``present`` lists the executables
    ``which`` should find; ``None`` means "everything is installed".
    """

    def __init__(
        self,
        present: Iterable[str] | None = (),
        available: bool = True,
        default_output: str = "[mock] executed",
    ):
        self._present: set[str] | None = None if present is None else set(present)
        self._available = available
        self._default_output = default_output
        self._responses: dict[tuple[str, ...], RunResult] = {}
        self._call_log: list[dict] = []

    @property
    def name(self) -> str:
        return "mock"

    @property
    def call_log(self) -> list[dict]:
        """Every call received: ``{"command", "needs_sudo", "env", "interactive"}``."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    @property
    def commands(self) -> list[list[str]]:
        """Argument vectors of every call, in order."""
        return [entry["command"] for entry in self._call_log]

    def is_available(self) -> bool:
        return self._available

    def which(self, executable: str) -> str | None:
        if self._present is None or executable in self._present:
            return f"/mock/bin/{executable}"
        return None

    def set_present(self, executable: str, present: bool = True) -> None:
        """Mark an executable as installed (or not)."""
        if self._present is None:
            self._present = set()
        if present:
            self._present.add(executable)
        else:
            self._present.discard(executable)

    def set_response(
        self,
        prefix: Sequence[str],
        exit_code: int = 0,
        output: str = "",
        error_output: str = "",
    ) -> None:
        """Answer every command starting with ``prefix`` with this outcome."""
        self._responses[tuple(prefix)] = RunResult(
            description="",
            command=shlex.join(prefix),
            exit_code=exit_code,
            output=output,
            error_output=error_output,
        )

    def set_failure(self, prefix: Sequence[str], exit_code: int = 1, error: str = "Mock failure") -> None:
        """Configure commands starting with ``prefix`` to fail."""
        self.set_response(prefix, exit_code=exit_code, error_output=error)

    def ran(self, prefix: Sequence[str]) -> bool:
        """Whether any recorded call starts with ``prefix``."""
        return any(self._matches(prefix, cmd) for cmd in self.commands)

    def run(
        self,
        command: Sequence[str],
        *,
        description: str = "",
        needs_sudo: bool = False,
        env: Mapping[str, str] | None = None,
        interactive: bool = False,
        timeout: float | None = None,
    ) -> RunResult:
        argv = list(command)
        self._call_log.append({
            "command": argv,
            "needs_sudo": needs_sudo,
            "env": dict(env or {}),
            "interactive": interactive,
        })
        command_line = shlex.join(["sudo", *argv] if needs_sudo else argv)
        description = description or command_line

        response = self._lookup(argv)
        if response is None:
            return RunResult.success(
                description, command_line,
                output=self._default_output,
                interactive=interactive,
            )
        return response.model_copy(update={
            "description": description,
            "command": command_line,
            "interactive": interactive,
        })

    def reset(self) -> None:
        """Clear call log and custom responses."""
        self._call_log.clear()
        self._responses.clear()

    # ── Internals ───────────────────────────────────────────────

    @staticmethod
    def _matches(prefix: Sequence[str], argv: Sequence[str]) -> bool:
        return list(argv[: len(prefix)]) == list(prefix)

    def _lookup(self, argv: list[str]) -> RunResult | None:
        # Longest matching prefix wins
        best: tuple[str, ...] | None = None
        for prefix in self._responses:
            if self._matches(prefix, argv) and (best is None or len(prefix) > len(best)):
                best = prefix
        return self._responses[best] if best is not None else None
