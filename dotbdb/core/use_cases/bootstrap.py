"""
Bootstrap use case — take a fresh machine to the chezmoi handoff.

    Init → PrivilegeAcquired → PlatformDetected → SystemUpdated (optional)
         → DependenciesInstalled → HandoffComplete (optional) → Done

Strictly sequential. Any fatal error ends the run with its exit code;
the cleanup (keep-alive thread, scratch files) runs on every path,
interrupts included. There are no automatic retries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from dotbdb.core.context import BootstrapContext
from dotbdb.core.errors import (
    EXIT_INTERRUPTED,
    EXIT_OK,
    BootstrapError,
    CommandFailedError,
)
from dotbdb.core.models.plan import PackagePlan, Preflight
from dotbdb.core.models.platform import PlatformInfo
from dotbdb.core.services.installer import ensure_installed, first_failure, verify_invocable
from dotbdb.core.services.package_managers import lookup, plan_for
from dotbdb.core.services.platform_detect import PlatformDetector
from dotbdb.core.services.preflight import DependencyVerificationError, run_preflight
from dotbdb.core.services.privilege import SudoKeepAlive, acquire_privileges
from dotbdb.core.services.scratch import ScratchFiles
from dotbdb.core.services.system_update import update_system
from dotbdb.ui.reporter import Reporter

logger = logging.getLogger(__name__)

__all__ = [
    "BootstrapOrchestrator",
    "BootstrapResult",
    "BootstrapState",
    "DependencyVerificationError",
    "run_bootstrap",
]

SSH_REMINDERS = (
    "Before cloning, remember to set up your SSH identities:",
    "1. upload/generate keys (e.g.: ssh-keygen -t ed25519 [-N 'passphrase'] "
    "[-C 'comment'] -f ~/.ssh/<id_file>)",
    "2. copy identities (e.g.: ssh-copy-id [-p <port_num>] -i <id_file> [user@]host)",
)


class BootstrapState(str, Enum):
    """Milestones of a bootstrap run, in order."""

    INIT = "init"
    PRIVILEGE_ACQUIRED = "privilege_acquired"
    PLATFORM_DETECTED = "platform_detected"
    SYSTEM_UPDATED = "system_updated"
    DEPENDENCIES_INSTALLED = "dependencies_installed"
    HANDOFF_COMPLETE = "handoff_complete"
    DONE = "done"


@dataclass
class BootstrapResult:
    """Outcome of a bootstrap run."""

    state: BootstrapState = BootstrapState.INIT
    reached: list[BootstrapState] = field(default_factory=list)
    platform: PlatformInfo | None = None
    plan: PackagePlan | None = None
    update_skipped: bool = False
    handoff_skipped: bool = False
    exit_code: int = EXIT_OK
    error: str | None = None
    log_path: Path | None = None

    @property
    def succeeded(self) -> bool:
        return self.exit_code == EXIT_OK

    def advance(self, state: BootstrapState) -> None:
        self.state = state
        self.reached.append(state)
        logger.info("Bootstrap state: %s", state.value)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        result: dict[str, Any] = {
            "state": self.state.value,
            "reached": [s.value for s in self.reached],
            "exit_code": self.exit_code,
            "update_skipped": self.update_skipped,
            "handoff_skipped": self.handoff_skipped,
            "log_path": str(self.log_path) if self.log_path else None,
        }
        if self.platform:
            result["platform"] = self.platform.to_dict()
        if self.plan:
            result["plan"] = self.plan.to_dict()
        if self.error:
            result["error"] = self.error
        return result


class BootstrapOrchestrator:
    """Runs the bootstrap state machine for one context."""

    def __init__(
        self,
        ctx: BootstrapContext,
        reporter: Reporter,
        *,
        detector: PlatformDetector | None = None,
        scratch: ScratchFiles | None = None,
    ):
        self._ctx = ctx
        self._reporter = reporter
        self._detector = detector or PlatformDetector()
        self._scratch = scratch if scratch is not None else ScratchFiles()
        self._keepalive: SudoKeepAlive | None = None

    @property
    def scratch(self) -> ScratchFiles:
        return self._scratch

    def run(self) -> BootstrapResult:
        """Run every step; never raises for an expected failure.

        Returns:
            BootstrapResult with the last state reached and the exit code.
        """
        r = self._reporter
        result = BootstrapResult(log_path=r.sink.path)

        try:
            self._welcome()

            self._keepalive = acquire_privileges(r, self._ctx.settings.keepalive_interval)
            result.advance(BootstrapState.PRIVILEGE_ACQUIRED)

            result.platform = self._detect()
            self._require_manager(result.platform)
            result.advance(BootstrapState.PLATFORM_DETECTED)
            self._check_developer_tools(result.platform)

            if self._update(result.platform):
                result.advance(BootstrapState.SYSTEM_UPDATED)
            else:
                result.update_skipped = True

            result.plan = self._install_dependencies(result.platform)
            result.advance(BootstrapState.DEPENDENCIES_INSTALLED)

            if self._ctx.packages:
                self._install_optional(result.platform)

            if self._handoff():
                result.advance(BootstrapState.HANDOFF_COMPLETE)
            else:
                result.handoff_skipped = True

            self._done()
            result.advance(BootstrapState.DONE)

        except BootstrapError as e:
            result.exit_code = e.exit_code
            result.error = str(e)
            logger.error("Bootstrap aborted in state %s: %s", result.state.value, e)
            r.error(str(e))
            r.var("Log file", r.sink.path)
        except KeyboardInterrupt:
            result.exit_code = EXIT_INTERRUPTED
            result.error = "Interrupted"
            logger.warning("Bootstrap interrupted in state %s", result.state.value)
            r.error("Interrupted")
            r.var("Log file", r.sink.path)
        finally:
            self._cleanup()

        return result

    # ── Steps ───────────────────────────────────────────────────

    def _welcome(self) -> None:
        r = self._reporter
        r.begin_section("Bassa's Dotfiles Bootstrapper (BDB)")
        r.info("This will set up your system with dotfiles from GitHub")
        r.var("Repository", self._ctx.settings.repository_url)
        if self._ctx.includes:
            r.var("Includes", self._ctx.includes)
        r.end_section()

    def _detect(self) -> PlatformInfo:
        r = self._reporter
        r.begin_section("System Detection")
        platform = self._detector.detect()
        r.progress("Detecting manufacturer")
        r.outcome(platform.manufacturer)
        r.progress("Detecting platform")
        r.outcome(platform.label)
        return platform

    def _require_manager(self, platform: PlatformInfo) -> None:
        r = self._reporter
        # Unknown distro ends the run before any package-manager step
        spec = lookup(platform.distro_id)
        r.var("Package manager", spec.manager.value)
        r.end_section()

    def _check_developer_tools(self, platform: PlatformInfo) -> None:
        # The Xcode CLT precede every brew step, update included
        if Preflight.XCODE_CLT not in lookup(platform.distro_id).preflight:
            return
        r = self._reporter
        r.begin_section("Developer Tools")
        run_preflight(
            (Preflight.XCODE_CLT,), r, self._scratch,
            clt_timeout=self._ctx.settings.clt_timeout,
        )
        r.end_section()

    def _update(self, platform: PlatformInfo) -> bool:
        r = self._reporter
        r.begin_section("System Update")
        if not r.ask("Update system packages now"):
            r.warn("System update skipped")
            r.end_section()
            return False

        results = update_system(platform, r)
        failed = first_failure(results)
        if failed is not None:
            raise CommandFailedError(failed)
        r.success("System updated successfully")
        r.end_section()
        return True

    def _install_dependencies(self, platform: PlatformInfo) -> PackagePlan:
        r = self._reporter
        settings = self._ctx.settings
        r.begin_section("Installing Dependencies")

        plan = plan_for(platform, settings.required, is_present=self._is_present)
        results = ensure_installed(
            plan, r,
            fatal=True,
            scratch=self._scratch,
            clt_timeout=settings.clt_timeout,
        )
        failed = first_failure(results)
        if failed is not None:
            raise CommandFailedError(failed)

        missing = [t for t in sorted(plan.required) if not self._is_present(t)]
        if missing:
            raise DependencyVerificationError(
                f"Still missing after installation: {', '.join(missing)}"
            )
        verify_invocable(settings.handoff_tool, r)

        r.success("Dependencies installed successfully")
        r.end_section()
        return plan

    def _install_optional(self, platform: PlatformInfo) -> None:
        r = self._reporter
        r.begin_section("Optional Packages")
        plan = plan_for(platform, self._ctx.packages, is_present=self._is_present)
        results = ensure_installed(plan, r, fatal=False, scratch=self._scratch)
        failed = [res for res in results if not res.succeeded]
        if failed:
            r.warn(f"{len(failed)} optional package(s) failed, see the log")
        r.end_section()

    def _handoff(self) -> bool:
        r = self._reporter
        settings = self._ctx.settings
        command_line = settings.handoff_command_line()

        r.begin_section("Dotfiles Installation")
        r.info("Ready to clone dotfiles and apply configuration")
        r.var("Repository", settings.repository)
        r.var("Branch", settings.branch)
        for line in SSH_REMINDERS:
            r.warn(line)

        if not r.ask(f"Clone dotfiles from {settings.repository} and apply now"):
            r.warn("Dotfile initialization skipped")
            r.info("Run this command when ready:")
            r.info(f"  {command_line}")
            r.end_section()
            return False

        result = r.exec("Initializing chezmoi with dotfiles", settings.handoff_command())
        if not result.succeeded:
            r.info("You can try manually with:")
            r.info(f"  {settings.handoff_tool} init --branch {settings.branch} {settings.github_user}")
            r.info(f"  {settings.handoff_tool} apply")
            raise CommandFailedError(result)

        r.success("Dotfiles cloned and applied successfully")
        r.end_section()
        return True

    def _done(self) -> None:
        r = self._reporter
        r.begin_section("Bootstrap Complete")
        r.success("Bootstrap process completed successfully")
        r.var("Log file", r.sink.path)
        r.info("Please log out and log back in to load your dotfiles")
        r.end_section()

    # ── Helpers ─────────────────────────────────────────────────

    def _is_present(self, executable: str) -> bool:
        return self._reporter.runner.which(executable) is not None

    def _cleanup(self) -> None:
        if self._keepalive is not None:
            self._keepalive.stop()
            self._keepalive = None
        removed = self._scratch.cleanup()
        if removed:
            logger.info("Removed %d scratch file(s)", len(removed))


def run_bootstrap(
    ctx: BootstrapContext,
    reporter: Reporter,
    *,
    detector: PlatformDetector | None = None,
) -> BootstrapResult:
    """Convenience wrapper used by the CLI."""
    return BootstrapOrchestrator(ctx, reporter, detector=detector).run()
