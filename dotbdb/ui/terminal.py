"""
Terminal input — read answers from the controlling terminal.

Prompts never read the process's standard input: when bdb runs as
``curl … | bash``-style pipelines, stdin is the script itself. Answers come
from ``/dev/tty`` instead (``click.getchar`` falls back to it whenever
stdin is not a terminal).
"""

from __future__ import annotations

import logging

import click

logger = logging.getLogger(__name__)

TTY_PATH = "/dev/tty"


class Terminal:
    """Reads single keystrokes and whole lines from the controlling tty.

    An unreadable terminal yields ``""`` (the prompt's default answer)
    instead of crashing the run; Ctrl-C still raises ``KeyboardInterrupt``.
    """

    def __init__(self, tty_path: str = TTY_PATH):
        self._tty_path = tty_path

    def read_char(self) -> str:
        try:
            return click.getchar(echo=False)
        except EOFError:
            return ""
        except OSError as e:
            logger.warning("No controlling terminal, using default answer: %s", e)
            return ""

    def read_line(self) -> str:
        try:
            with open(self._tty_path, encoding="utf-8") as tty:
                return tty.readline().rstrip("\r\n")
        except OSError as e:
            logger.warning("No controlling terminal, using empty answer: %s", e)
            return ""
