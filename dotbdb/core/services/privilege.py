"""
Privilege acquisition — ask for the sudo password once, keep it warm.

``sudo -v`` runs interactively at the start of the run. While the
bootstrap works through long package operations, a daemon thread
refreshes the credential cache with ``sudo -n true`` so later sudo calls
never stop to prompt again. Missing or refused sudo is a warning, not an
error: individual commands fail later if they really need root.
"""

from __future__ import annotations

import logging
import threading

from dotbdb.adapters.base import CommandAdapter
from dotbdb.adapters.shell.command import is_root
from dotbdb.ui.reporter import Reporter

logger = logging.getLogger(__name__)

DEFAULT_KEEPALIVE_INTERVAL = 60.0


class SudoKeepAlive:
    """Background refresher for the sudo timestamp.

    Runs ``sudo -n true`` every ``interval`` seconds until ``stop()``.
    Never prompts; a failed refresh is logged and the thread exits.
    """

    def __init__(self, runner: CommandAdapter, interval: float = DEFAULT_KEEPALIVE_INTERVAL):
        self._runner = runner
        self._interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> SudoKeepAlive:
        if self._thread is None:
            self._thread = threading.Thread(
                target=self._loop, name="sudo-keepalive", daemon=True,
            )
            self._thread.start()
            logger.debug("sudo keep-alive started (every %ss)", self._interval)
        return self

    def stop(self, timeout: float = 2.0) -> None:
        """Signal the thread and wait briefly for it. Safe to call twice."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
            logger.debug("sudo keep-alive stopped")

    def _loop(self) -> None:
        while not self._stop.wait(self._interval):
            result = self._runner.run(["sudo", "-n", "true"], description="sudo keep-alive")
            if not result.succeeded:
                logger.warning("sudo keep-alive refresh failed (exit %d)", result.exit_code)
                return


def acquire_privileges(
    reporter: Reporter,
    interval: float = DEFAULT_KEEPALIVE_INTERVAL,
) -> SudoKeepAlive | None:
    """Validate sudo once and start the keep-alive.

    Returns:
        The running keep-alive, or None when running as root or without
        usable sudo. The caller stops it in its cleanup.
    """
    if is_root():
        reporter.success("Running as root, sudo not needed")
        return None

    if reporter.runner.which("sudo") is None:
        reporter.warn("sudo not found, privileged steps may fail")
        return None

    result = reporter.exec("Requesting administrator privileges", ["sudo", "-v"], interactive=True)
    if not result.succeeded:
        reporter.warn("sudo not acquired, continuing without cached credentials")
        return None

    return SudoKeepAlive(reporter.runner, interval).start()
