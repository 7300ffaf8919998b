"""
Shell command adapter — run host commands and capture their output.

This is the SINGLE PLACE where ``subprocess.run`` is called for
bootstrap operations. Privilege prefixing, environment overrides,
timing and failure capture are all centralised here.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
import time
from typing import Mapping, Sequence

from dotbdb.adapters.base import CommandAdapter
from dotbdb.core.models.result import RunResult

logger = logging.getLogger(__name__)

# Conventional shell exit codes for failures that never reach the command
EXIT_TIMEOUT = 124
EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127


def is_root() -> bool:
    """Whether the current process already runs with uid 0."""
    geteuid = getattr(os, "geteuid", None)
    return bool(geteuid and geteuid() == 0)


def elevate(command: Sequence[str], needs_sudo: bool) -> list[str]:
    """Prefix ``command`` with sudo when it needs root and we are not root."""
    argv = list(command)
    if needs_sudo and not is_root():
        return ["sudo", *argv]
    return argv


class ShellCommandAdapter(CommandAdapter):
    """Execute host commands through ``subprocess.run``.

    Output is captured as text unless ``interactive`` is set, in which case
    the child inherits the terminal (used for ``sudo -v``).
    """

    def __init__(self, default_timeout: float | None = None):
        self._default_timeout = default_timeout

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return shutil.which("sh") is not None

    def which(self, executable: str) -> str | None:
        return shutil.which(executable)

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
        argv = elevate(command, needs_sudo)
        command_line = shlex.join(argv)
        description = description or command_line
        timeout = timeout if timeout is not None else self._default_timeout

        run_env = os.environ.copy()
        if env:
            run_env.update(env)

        logger.debug("Executing: %s", command_line)
        start = time.monotonic()

        try:
            if interactive:
                result = subprocess.run(argv, env=run_env, timeout=timeout, check=False)
                stdout, stderr = "", ""
            else:
                result = subprocess.run(
                    argv,
                    env=run_env,
                    timeout=timeout,
                    capture_output=True,
                    text=True,
                    errors="replace",
                    stdin=subprocess.DEVNULL,
                    check=False,
                )
                stdout, stderr = result.stdout or "", result.stderr or ""
        except FileNotFoundError:
            return RunResult.failure(
                description, command_line,
                exit_code=EXIT_NOT_FOUND,
                error_output=f"command not found: {argv[0]}",
                interactive=interactive,
            )
        except PermissionError as e:
            return RunResult.failure(
                description, command_line,
                exit_code=EXIT_NOT_EXECUTABLE,
                error_output=str(e),
                interactive=interactive,
            )
        except subprocess.TimeoutExpired:
            return RunResult.failure(
                description, command_line,
                exit_code=EXIT_TIMEOUT,
                error_output=f"Command timed out after {timeout}s",
                interactive=interactive,
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        exit_code = result.returncode
        if exit_code < 0:
            # Killed by a signal: report it the way a shell would
            exit_code = 128 - exit_code
        return RunResult(
            description=description,
            command=command_line,
            exit_code=exit_code,
            output=stdout,
            error_output=stderr,
            interactive=interactive,
            duration_ms=elapsed_ms,
        )
