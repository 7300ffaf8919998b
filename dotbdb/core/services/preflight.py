"""
macOS preflight — Xcode Command Line Tools and Homebrew.

Both must exist before ``brew install`` can run:

    xcode-clt  ``xcode-select -p`` must succeed; otherwise install the
               tools headless through softwareupdate (falling back to the
               GUI prompt of ``xcode-select --install``) and wait.
    homebrew   ``brew`` must be on PATH; otherwise run the official
               installer non-interactively and put its prefix on PATH.
               An existing brew is refreshed with ``brew update``.
"""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Callable, Iterable, MutableMapping, Sequence

from dotbdb.core.data.managers import HOMEBREW_INSTALL_URL, HOMEBREW_PREFIXES
from dotbdb.core.errors import BootstrapError, CommandFailedError
from dotbdb.core.models.plan import Preflight
from dotbdb.core.services.download import download
from dotbdb.core.services.scratch import ScratchFiles
from dotbdb.ui.reporter import Reporter

logger = logging.getLogger(__name__)

# softwareupdate only lists the CLT package while this file exists
CLT_MARKER = Path("/tmp/.com.apple.dt.CommandLineTools.installondemand.in-progress")
CLT_POLL_INTERVAL = 5.0
DEFAULT_CLT_TIMEOUT = 1800.0


class DependencyVerificationError(BootstrapError):
    """A dependency is still unusable after its install step ran."""


# ── Xcode Command Line Tools ────────────────────────────────────


def clt_installed(reporter: Reporter) -> bool:
    return reporter.query(["xcode-select", "-p"], "Checking Xcode CLT path").succeeded


def find_clt_label(listing: str) -> str | None:
    """Pick the newest Command Line Tools label from ``softwareupdate -l``.

    Handles both layouts::

        * Label: Command Line Tools for Xcode-15.3
           * Command Line Tools (macOS Mojave version 10.14) for Xcode-10.3
    """
    labels = []
    for raw in listing.splitlines():
        line = raw.strip()
        if not line.startswith("*"):
            continue
        line = line.lstrip("* ").strip()
        if line.startswith("Label:"):
            line = line[len("Label:"):].strip()
        if "Command Line Tools" in line:
            labels.append(line)
    return labels[-1] if labels else None


def ensure_clt(
    reporter: Reporter,
    scratch: ScratchFiles,
    *,
    timeout: float = DEFAULT_CLT_TIMEOUT,
    marker: Path | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> None:
    """Make sure the Xcode Command Line Tools are installed.

    Raises:
        CommandFailedError: The install command itself failed.
        DependencyVerificationError: The tools did not appear within
            ``timeout`` seconds.
    """
    reporter.progress("Checking Xcode Command Line Tools")
    if clt_installed(reporter):
        reporter.outcome("installed")
        return
    reporter.outcome("missing")

    scratch.touch(marker if marker is not None else CLT_MARKER)
    listing = reporter.exec("Searching for Command Line Tools updates", ["softwareupdate", "-l"])
    label = find_clt_label(listing.output) if listing.succeeded else None

    if label:
        result = reporter.exec(
            "Installing Xcode Command Line Tools",
            ["softwareupdate", "-i", label],
            needs_sudo=True,
        )
    else:
        logger.info("No CLT label in softwareupdate listing, using xcode-select --install")
        result = reporter.exec(
            "Requesting Xcode Command Line Tools install",
            ["xcode-select", "--install"],
        )
    if not result.succeeded:
        raise CommandFailedError(result)

    reporter.action("Waiting for Xcode Command Line Tools installation to complete")
    deadline = clock() + timeout
    while not clt_installed(reporter):
        if clock() >= deadline:
            raise DependencyVerificationError(
                f"Xcode Command Line Tools not installed after {int(timeout)}s"
            )
        sleep(CLT_POLL_INTERVAL)
    reporter.success("Xcode Command Line Tools installed")


# ── Homebrew ────────────────────────────────────────────────────


def find_brew_prefix(prefixes: Iterable[str] = HOMEBREW_PREFIXES) -> str | None:
    """First prefix holding an executable ``brew``."""
    for prefix in prefixes:
        candidate = Path(prefix) / "brew"
        if candidate.is_file() and os.access(candidate, os.X_OK):
            return prefix
    return None


def add_to_path(prefix: str, environ: MutableMapping[str, str]) -> bool:
    """Prepend ``prefix`` to PATH unless it is already there."""
    entries = environ.get("PATH", "").split(os.pathsep)
    if prefix in entries:
        return False
    environ["PATH"] = os.pathsep.join([prefix, *filter(None, entries)])
    return True


def ensure_homebrew(
    reporter: Reporter,
    scratch: ScratchFiles,
    *,
    prefixes: Sequence[str] = HOMEBREW_PREFIXES,
    environ: MutableMapping[str, str] | None = None,
) -> None:
    """Install Homebrew when missing, refresh it otherwise.

    Raises:
        CommandFailedError: Download, install or update failed.
    """
    environ = os.environ if environ is None else environ

    reporter.progress("Checking Homebrew")
    if reporter.runner.which("brew"):
        reporter.outcome("installed")
        result = reporter.exec("Updating Homebrew", ["brew", "update"])
        if not result.succeeded:
            raise CommandFailedError(result)
        return
    reporter.outcome("missing")

    script = scratch.new_file(suffix=".sh", prefix="homebrew_install_")
    result = download(reporter, HOMEBREW_INSTALL_URL, script, "Downloading Homebrew installer")
    if not result.succeeded:
        raise CommandFailedError(result)

    result = reporter.exec(
        "Installing Homebrew",
        ["/bin/bash", str(script)],
        env={"NONINTERACTIVE": "1"},
    )
    if not result.succeeded:
        raise CommandFailedError(result)

    prefix = find_brew_prefix(prefixes)
    if prefix is None:
        logger.warning("brew not found under %s after install", ", ".join(prefixes))
        return
    if add_to_path(prefix, environ):
        reporter.info(f"Added {prefix} to PATH for this run")


# ── Dispatch ────────────────────────────────────────────────────


def run_preflight(
    checks: Iterable[Preflight],
    reporter: Reporter,
    scratch: ScratchFiles,
    *,
    clt_timeout: float = DEFAULT_CLT_TIMEOUT,
) -> None:
    """Run the platform checks a plan requires, in order."""
    for check in checks:
        logger.debug("Preflight: %s", check.value)
        if check is Preflight.XCODE_CLT:
            ensure_clt(reporter, scratch, timeout=clt_timeout)
        elif check is Preflight.HOMEBREW:
            ensure_homebrew(reporter, scratch)
