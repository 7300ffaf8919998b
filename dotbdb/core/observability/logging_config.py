"""
Logging configuration — central setup for the CLI entrypoint.

Called once at startup by main.py. Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

Two destinations:
    - the audit log file (always; attached by ``LogSink.open``)
    - stderr, only in verbose mode, mirroring everything the file gets

File level is resolved in precedence order:
    BDB_LOG_LEVEL env var  >  DEBUG (default)
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

# ── Format strings ──────────────────────────────────────────────

# Audit log: one event per line, grep-able timestamp prefix
_FMT_FILE = "[%(asctime)s] %(levelname)-7s %(name)s — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

# Verbose console mirror: same content, shorter clock
_FMT_VERBOSE = "%(asctime)s [%(name)s] %(message)s"
_DATEFMT_VERBOSE = "%H:%M:%S"


def setup_logging(
    level: str = "DEBUG",
    verbose: bool = False,
) -> None:
    """Configure Python logging for the entire process.

    Args:
        level: Level name for the audit log (DEBUG, INFO, WARNING, ...).
        verbose: If True, mirror log records on stderr.
    """
    numeric_level = _parse_level(level)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(numeric_level)

    # ── Console mirror (stderr, verbose only) ───────────────────
    if verbose:
        console = logging.StreamHandler(sys.stderr)
        console.setLevel(numeric_level)
        console.setFormatter(logging.Formatter(_FMT_VERBOSE, datefmt=_DATEFMT_VERBOSE))
        root.addHandler(console)

    # Don't propagate exceptions from logging itself
    logging.raiseExceptions = False


def file_handler(path: Path, level: str | int = logging.DEBUG) -> logging.FileHandler:
    """Build the audit log handler (appends, UTF-8, timestamped lines)."""
    handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    handler.setLevel(level if isinstance(level, int) else _parse_level(level))
    handler.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
    return handler


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.DEBUG
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.DEBUG
    return numeric
