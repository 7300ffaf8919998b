"""
Package use cases — preview a plan, install optional packages, update.

These back the ``bdb packages`` commands. Unlike the bootstrap, optional
installs are forgiving: one package failing does not stop the others,
and an unsupported distribution is a skip, not an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from dotbdb.adapters.base import CommandAdapter
from dotbdb.core.errors import EXIT_FAILURE, EXIT_OK, BootstrapError
from dotbdb.core.models.plan import PackagePlan, Preflight
from dotbdb.core.models.platform import PlatformInfo
from dotbdb.core.models.result import RunResult
from dotbdb.core.services.installer import ensure_installed, first_failure
from dotbdb.core.services.package_managers import UnsupportedDistroError, lookup, plan_for
from dotbdb.core.services.platform_detect import PlatformDetector
from dotbdb.core.services.preflight import DEFAULT_CLT_TIMEOUT, run_preflight
from dotbdb.core.services.privilege import acquire_privileges
from dotbdb.core.services.scratch import ScratchFiles
from dotbdb.core.services.system_update import update_system
from dotbdb.ui.reporter import Reporter

logger = logging.getLogger(__name__)


# ── Results ─────────────────────────────────────────────────────


@dataclass
class PlanResult:
    """A previewed plan (nothing installed)."""

    platform: PlatformInfo | None = None
    plan: PackagePlan | None = None
    exit_code: int = EXIT_OK
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        if self.error:
            return {"error": self.error, "exit_code": self.exit_code}
        return {
            "platform": self.platform.to_dict() if self.platform else None,
            "plan": self.plan.to_dict() if self.plan else None,
        }


@dataclass
class StepResult:
    """Outcome of an install or update run."""

    platform: PlatformInfo | None = None
    results: list[RunResult] = field(default_factory=list)
    skipped: bool = False
    exit_code: int = EXIT_OK
    error: str | None = None

    @property
    def failed(self) -> list[RunResult]:
        return [r for r in self.results if not r.succeeded]

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "platform": self.platform.to_dict() if self.platform else None,
            "skipped": self.skipped,
            "exit_code": self.exit_code,
            "commands": [r.to_dict() for r in self.results],
        }
        if self.error:
            result["error"] = self.error
        return result


# ── Use cases ───────────────────────────────────────────────────


def preview_plan(
    tools: Iterable[str],
    runner: CommandAdapter,
    detector: PlatformDetector | None = None,
) -> PlanResult:
    """Compute the plan for ``tools`` without installing anything."""
    detector = detector or PlatformDetector()
    try:
        platform = detector.detect()
        plan = plan_for(platform, tools, is_present=lambda t: runner.which(t) is not None)
    except BootstrapError as e:
        return PlanResult(exit_code=e.exit_code, error=str(e))
    return PlanResult(platform=platform, plan=plan)


def install_optional(
    packages: Iterable[str],
    reporter: Reporter,
    detector: PlatformDetector | None = None,
    keepalive_interval: float = 60.0,
) -> StepResult:
    """Install optional packages one by one, continuing past failures."""
    detector = detector or PlatformDetector()
    wanted = [p for p in packages if p]
    out = StepResult()
    if not wanted:
        reporter.info("No optional packages requested")
        out.skipped = True
        return out

    scratch = ScratchFiles()
    keepalive = None
    try:
        out.platform = detector.detect()
        try:
            plan = plan_for(
                out.platform, wanted,
                is_present=lambda t: reporter.runner.which(t) is not None,
            )
        except UnsupportedDistroError as e:
            reporter.warn(f"Skipping optional packages: {e}")
            out.skipped = True
            return out

        if not plan.is_satisfied:
            keepalive = acquire_privileges(reporter, keepalive_interval)
        out.results = ensure_installed(plan, reporter, fatal=False, scratch=scratch)
        if out.failed:
            reporter.warn(f"{len(out.failed)} optional package(s) failed, see {reporter.sink.path}")
            out.exit_code = EXIT_FAILURE
        else:
            reporter.success("Optional packages installed")
    except BootstrapError as e:
        reporter.error(str(e))
        out.exit_code = e.exit_code
        out.error = str(e)
    finally:
        if keepalive is not None:
            keepalive.stop()
        scratch.cleanup()
    return out


def update_only(
    reporter: Reporter,
    detector: PlatformDetector | None = None,
    keepalive_interval: float = 60.0,
    clt_timeout: float = DEFAULT_CLT_TIMEOUT,
) -> StepResult:
    """Run just the system-update step (after confirmation)."""
    detector = detector or PlatformDetector()
    out = StepResult()
    scratch = ScratchFiles()
    keepalive = None
    try:
        out.platform = detector.detect()
        spec = lookup(out.platform.distro_id)
        if not reporter.ask("Update system packages now"):
            reporter.warn("System update skipped")
            out.skipped = True
            return out

        keepalive = acquire_privileges(reporter, keepalive_interval)
        if Preflight.XCODE_CLT in spec.preflight:
            run_preflight((Preflight.XCODE_CLT,), reporter, scratch, clt_timeout=clt_timeout)
        out.results = update_system(out.platform, reporter)
        failed = first_failure(out.results)
        if failed is not None:
            out.exit_code = failed.exit_code
            out.error = f"{failed.description} failed (exit {failed.exit_code})"
        else:
            reporter.success("System updated successfully")
    except BootstrapError as e:
        reporter.error(str(e))
        out.exit_code = e.exit_code
        out.error = str(e)
    finally:
        if keepalive is not None:
            keepalive.stop()
        scratch.cleanup()
    return out
