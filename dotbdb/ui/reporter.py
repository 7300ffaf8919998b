"""
Dual-channel reporter — what the operator sees vs. what the log records.

Every status line goes to both channels: a short colored line on the
user channel and a timestamped record in the audit log. External commands
run through ``exec``: their full output lands in the log only, and the
user channel gets a single status line. Colors and icons are
presentation only; nothing branches on them.

    success  green    [✓]
    error    red      [✗]
    warn     yellow   [!]
    info     white    [i]
    ask      magenta  [?]
    action   cyan     [→]
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Protocol, Sequence

import click

from dotbdb.adapters.base import CommandAdapter
from dotbdb.core.models.result import RunResult
from dotbdb.core.observability.log_sink import LogSink
from dotbdb.ui.terminal import Terminal

_STYLES: dict[str, tuple[str, str]] = {
    "success": ("✓", "green"),
    "error": ("✗", "red"),
    "warn": ("!", "yellow"),
    "info": ("i", "white"),
    "ask": ("?", "magenta"),
    "action": ("→", "cyan"),
}

_LOG_LEVELS: dict[str, int] = {
    "success": logging.INFO,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "ask": logging.INFO,
    "action": logging.INFO,
}

_BOX_WIDTH = 80


class AnswerSource(Protocol):
    """Where prompt answers come from (the tty, or a script in tests)."""

    def read_char(self) -> str: ...

    def read_line(self) -> str: ...


def is_affirmative(answer: str) -> bool:
    """Default-no policy: only an explicit y/Y confirms."""
    return answer in ("y", "Y")


def is_negative(answer: str) -> bool:
    """Default-yes policy: only an explicit n/N declines."""
    return answer in ("n", "N")


def supports_color(stream: object) -> bool:
    if "NO_COLOR" in os.environ:
        return False
    isatty = getattr(stream, "isatty", None)
    try:
        return bool(isatty and isatty())
    except (OSError, ValueError):
        return False


class Reporter:
    """Emits status lines, asks questions and runs commands for a run."""

    def __init__(
        self,
        sink: LogSink,
        runner: CommandAdapter,
        *,
        terminal: AnswerSource | None = None,
        assume_yes: bool = False,
        color: bool | None = None,
    ):
        self._sink = sink
        self._runner = runner
        self._terminal = terminal if terminal is not None else Terminal()
        self._assume_yes = assume_yes
        self._color = supports_color(sink.user_channel) if color is None else color

    @property
    def sink(self) -> LogSink:
        return self._sink

    @property
    def runner(self) -> CommandAdapter:
        return self._runner

    @property
    def assume_yes(self) -> bool:
        return self._assume_yes

    # ── Status lines ────────────────────────────────────────────

    def action(self, message: str) -> None:
        self._emit("action", message)

    def success(self, message: str) -> None:
        self._emit("success", message)

    def error(self, message: str) -> None:
        self._emit("error", message)

    def warn(self, message: str) -> None:
        self._emit("warn", message)

    def info(self, message: str) -> None:
        self._emit("info", message)

    def progress(self, message: str) -> None:
        """Start an ``[→] message...`` line, completed by ``outcome``."""
        icon, color = _STYLES["action"]
        self._echo(f"[{icon}] {message}...", fg=color, nl=False)
        self._sink.log(f"ACTION: {message}")

    def outcome(self, message: str, ok: bool = True) -> None:
        """Finish a ``progress`` line with a short result."""
        self._echo(f" {message}", fg="cyan" if ok else "red")
        self._sink.log(f"OUTCOME: {message}", level=logging.INFO if ok else logging.ERROR)

    def var(self, name: str, value: object) -> None:
        """Show a labelled value, e.g. ``Platform: Linux``."""
        self.info(f"{name}: {value}")

    def begin_section(self, title: str) -> None:
        self._echo("")
        self._echo("╔" + "═" * (_BOX_WIDTH - 2) + "╗", fg="white")
        self._echo(f"║ {title}", fg="white")
        self._sink.separator()
        self._sink.log(f"SECTION {title}")

    def end_section(self) -> None:
        self._echo("╚" + "═" * (_BOX_WIDTH - 2) + "╝", fg="white")
        self._sink.separator()

    # ── Prompts ─────────────────────────────────────────────────

    def ask(self, prompt: str) -> bool:
        """Yes/no question, default no. True only for ``y``/``Y``."""
        answer = self._read_answer(prompt, "[y/N]")
        return is_affirmative(answer)

    def ask_default_yes(self, prompt: str) -> bool:
        """Yes/no question, default yes. False only for ``n``/``N``."""
        answer = self._read_answer(prompt, "[Y/n]")
        return not is_negative(answer)

    def input(self, prompt: str) -> str:
        """Free-text answer read from the controlling terminal."""
        icon, color = _STYLES["ask"]
        self._echo(f"[{icon}] {prompt} > ", fg=color, nl=False)
        if self._assume_yes:
            self._echo("")
            self._sink.log(f"INPUT {prompt!r} -> '' (--yes)")
            return ""
        answer = self._terminal.read_line()
        self._sink.log(f"INPUT {prompt!r} -> {answer!r}")
        return answer

    # ── Commands ────────────────────────────────────────────────

    def exec(
        self,
        description: str,
        command: Sequence[str],
        *,
        needs_sudo: bool = False,
        env: Mapping[str, str] | None = None,
        interactive: bool = False,
        timeout: float | None = None,
    ) -> RunResult:
        """Run a command: full detail to the log, one status line to the user.

        Never raises for a failing command; the caller decides whether a
        non-zero exit aborts the run.
        """
        if interactive:
            # The command may prompt, so finish the line first
            self.action(f"{description}...")
        else:
            self.progress(description)

        result = self._runner.run(
            command,
            description=description,
            needs_sudo=needs_sudo,
            env=env,
            interactive=interactive,
            timeout=timeout,
        )
        self._sink.log_result(result)

        if result.succeeded:
            if interactive:
                self.success(description)
            else:
                self.outcome("done")
        else:
            if not interactive:
                self.outcome("failed", ok=False)
            self.error(f"{description} (exit code {result.exit_code})")
        return result

    def query(self, command: Sequence[str], description: str = "") -> RunResult:
        """Run a read-only query. Logged, never shown to the user."""
        result = self._runner.run(command, description=description)
        self._sink.log_result(result)
        return result

    # ── Internals ───────────────────────────────────────────────

    def _emit(self, kind: str, message: str) -> None:
        icon, color = _STYLES[kind]
        self._echo(f"[{icon}] {message}", fg=color)
        self._sink.log(f"{kind.upper()}: {message}", level=_LOG_LEVELS[kind])

    def _echo(self, text: str, fg: str | None = None, nl: bool = True) -> None:
        click.secho(
            text,
            file=self._sink.user_channel,
            fg=fg,
            bold=fg is not None,
            nl=nl,
            color=self._color,
        )

    def _read_answer(self, prompt: str, hint: str) -> str:
        icon, color = _STYLES["ask"]
        self._echo(f"[{icon}] {prompt}? {hint} > ", fg=color, nl=False)
        if self._assume_yes:
            self._echo("y (--yes)")
            self._sink.log(f"ASK {prompt!r} {hint} -> auto-confirmed (--yes)")
            return "y"
        answer = self._terminal.read_char()
        self._echo(answer if answer.isprintable() else "")
        self._sink.log(f"ASK {prompt!r} {hint} -> {answer!r}")
        return answer
