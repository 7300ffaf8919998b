"""
Adapter base — the contract between the bootstrapper and the host system.

Every external command goes through a ``CommandAdapter``. Nothing else in
the codebase calls ``subprocess`` for install work, which keeps execution
swappable (real shell vs. mock) and every invocation loggable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping, Sequence

from dotbdb.core.models.result import RunResult


class CommandAdapter(ABC):
    """Abstract base class for command runners.

    Adapters perform external side effects and return a ``RunResult``.
    They NEVER raise for a failing command: the exit code is captured in
    the result and the caller decides whether to abort.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g. 'shell', 'mock')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether commands can be executed at all. Fast, never raises."""

    @abstractmethod
    def which(self, executable: str) -> str | None:
        """Resolve ``executable`` on PATH, or None when it is missing."""

    @abstractmethod
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
        """Run ``command`` and return its result.

        Args:
            command: Argument vector, no shell interpolation.
            description: Human label recorded in the result.
            needs_sudo: Prefix with ``sudo`` unless already root.
            env: Extra environment variables for this command only.
            interactive: Let the command talk to the terminal directly
                (no output capture), e.g. for a sudo password prompt.
            timeout: Seconds before the command is abandoned.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
