"""
Download helper — fetch a URL to a file with curl or wget.

Whichever tool is on PATH is used (curl preferred). The download is a
regular reported command, so its failure is a RunResult like any other.
"""

from __future__ import annotations

import logging
from pathlib import Path

from dotbdb.adapters.shell.command import EXIT_NOT_FOUND
from dotbdb.core.models.result import RunResult
from dotbdb.ui.reporter import Reporter

logger = logging.getLogger(__name__)


def download_command(url: str, dest: Path, *, have_curl: bool, have_wget: bool) -> list[str] | None:
    """Argument vector for downloading ``url`` to ``dest``, or None."""
    if have_curl:
        return ["curl", "-fsSL", url, "-o", str(dest)]
    if have_wget:
        return ["wget", "-qO", str(dest), url]
    return None


def download(reporter: Reporter, url: str, dest: Path, description: str = "") -> RunResult:
    """Download ``url`` into ``dest`` through the reporter.

    Returns:
        The RunResult of the transfer; exit code 127 when neither curl
        nor wget is installed.
    """
    description = description or f"Downloading {url}"
    runner = reporter.runner
    argv = download_command(
        url, dest,
        have_curl=runner.which("curl") is not None,
        have_wget=runner.which("wget") is not None,
    )
    if argv is None:
        reporter.error("Neither curl nor wget is available, cannot download")
        result = RunResult.failure(
            description, f"download {url}",
            exit_code=EXIT_NOT_FOUND,
            error_output="neither curl nor wget found on PATH",
        )
        reporter.sink.log_result(result)
        return result
    return reporter.exec(description, argv)
