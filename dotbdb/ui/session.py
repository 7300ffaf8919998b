"""
Run session — the log sink, command runner and reporter of one command.

Opened by every mutating CLI command. The sink is closed on every exit
path (success, fatal error, Ctrl-C, SIGTERM) so the audit log is always
flushed and its path can be reported.
"""

from __future__ import annotations

import logging
import signal
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

import click

from dotbdb.adapters.base import CommandAdapter
from dotbdb.adapters.mock import MockCommandAdapter
from dotbdb.adapters.shell.command import ShellCommandAdapter
from dotbdb.core.context import BootstrapContext
from dotbdb.core.errors import EXIT_FAILURE, EXIT_INTERRUPTED, EXIT_TERMINATED, RunInterrupted
from dotbdb.core.observability.log_sink import LogSink
from dotbdb.ui.reporter import Reporter

logger = logging.getLogger(__name__)


@dataclass
class Session:
    sink: LogSink
    runner: CommandAdapter
    reporter: Reporter


def build_runner(obj: dict[str, Any]) -> CommandAdapter:
    """Runner for this invocation: injected, simulated (--mock) or real."""
    if obj.get("runner") is not None:
        return obj["runner"]
    if obj.get("mock"):
        return MockCommandAdapter(present=None, default_output="")
    return ShellCommandAdapter()


def _raise_terminated(signum: int, frame: object) -> None:
    raise RunInterrupted("Terminated", exit_code=EXIT_TERMINATED)


@contextmanager
def open_session(obj: dict[str, Any]) -> Iterator[Session]:
    """Open the audit log and build the reporter for one command.

    Exits the process with 1 when the log file cannot be created, and
    with 130 when interrupted outside the bootstrap's own handling.
    """
    ctx: BootstrapContext = obj["context"]
    runner = build_runner(obj)
    sink = LogSink(ctx.log_path, user_channel=obj.get("user_channel"))

    try:
        sink.open()
    except OSError as e:
        click.secho(f"❌ Cannot create log file {ctx.log_path}: {e}", fg="red", err=True)
        sys.exit(EXIT_FAILURE)

    reporter = Reporter(
        sink, runner,
        terminal=obj.get("terminal"),
        assume_yes=ctx.assume_yes,
    )
    if obj.get("mock"):
        reporter.warn("Mock mode: commands are simulated, nothing is changed")

    previous = None
    try:
        previous = signal.signal(signal.SIGTERM, _raise_terminated)
    except ValueError:
        # Not the main thread; SIGTERM keeps its default action
        logger.debug("SIGTERM handler not installed (not in main thread)")

    try:
        yield Session(sink=sink, runner=runner, reporter=reporter)
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        reporter.error("Interrupted")
        reporter.var("Log file", sink.path)
        sink.close()
        sys.exit(EXIT_INTERRUPTED)
    finally:
        if previous is not None:
            signal.signal(signal.SIGTERM, previous)
        sink.close()
