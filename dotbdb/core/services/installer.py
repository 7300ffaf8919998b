"""
Idempotent installer — install what a PackagePlan says is missing.

Two policies:

    fatal      (bootstrap dependencies) one batch call for the primary
               manager, one call per alternate route; the first failure
               stops everything and is returned last
    non-fatal  (optional components) one call per package; failures are
               reported and the loop carries on

Tools already present cost one info line and zero external calls, so a
second run with the same tool list issues no mutating command at all.
"""

from __future__ import annotations

import logging
from typing import Iterable

from dotbdb.core.errors import BootstrapError
from dotbdb.core.models.plan import PackagePlan
from dotbdb.core.models.result import RunResult
from dotbdb.core.services.preflight import (
    DEFAULT_CLT_TIMEOUT,
    DependencyVerificationError,
    run_preflight,
)
from dotbdb.core.services.scratch import ScratchFiles
from dotbdb.ui.reporter import Reporter

logger = logging.getLogger(__name__)


def ensure_installed(
    plan: PackagePlan,
    reporter: Reporter,
    *,
    fatal: bool = True,
    scratch: ScratchFiles | None = None,
    clt_timeout: float = DEFAULT_CLT_TIMEOUT,
) -> list[RunResult]:
    """Install every tool in ``plan.to_install``.

    Args:
        plan: Plan from ``plan_for``.
        reporter: Runs and reports each install command.
        fatal: Stop at the first failure (True) or keep going (False).
        scratch: Registry for transient files created by preflight steps.
        clt_timeout: Max seconds to wait for the Xcode CLT install.

    Returns:
        RunResults of the install calls, in order. Under the fatal policy
        a failure is always the last element.

    Raises:
        BootstrapError: A preflight step failed under the fatal policy.
    """
    for tool in sorted(plan.already_present):
        reporter.info(f"{tool} already present")

    if plan.is_satisfied:
        logger.info("Nothing to install for %s", sorted(plan.required))
        return []

    if plan.preflight:
        try:
            run_preflight(
                plan.preflight, reporter,
                scratch if scratch is not None else ScratchFiles(),
                clt_timeout=clt_timeout,
            )
        except BootstrapError as e:
            if fatal:
                raise
            reporter.warn(f"Skipping installs, preflight failed: {e}")
            return []

    if fatal:
        return _install_fatal(plan, reporter)
    return _install_each(plan, reporter)


def first_failure(results: Iterable[RunResult]) -> RunResult | None:
    return next((r for r in results if not r.succeeded), None)


def verify_invocable(tool: str, reporter: Reporter) -> RunResult:
    """``tool --version`` must exit 0.

    Raises:
        DependencyVerificationError: Tool missing from PATH or not runnable.
    """
    if reporter.runner.which(tool) is None:
        reporter.error(f"{tool} is not on PATH after installation")
        raise DependencyVerificationError(f"{tool} not found on PATH after installation")
    result = reporter.exec(f"Verifying {tool}", [tool, "--version"])
    if not result.succeeded:
        raise DependencyVerificationError(
            f"{tool} --version exited with {result.exit_code}"
        )
    return result


# ── Policies ────────────────────────────────────────────────────


def _install_fatal(plan: PackagePlan, reporter: Reporter) -> list[RunResult]:
    results: list[RunResult] = []

    packages = plan.batch_packages
    if packages:
        result = reporter.exec(
            f"Installing {', '.join(packages)} with {plan.manager.value}",
            plan.batch_command(),
            needs_sudo=plan.needs_sudo,
        )
        results.append(result)
        if not result.succeeded:
            return results

    for tool, route in sorted(plan.routes.items()):
        result = reporter.exec(
            f"Installing {tool} via {route.via}",
            route.command,
            needs_sudo=route.needs_sudo,
        )
        results.append(result)
        if not result.succeeded:
            return results
    return results


def _install_each(plan: PackagePlan, reporter: Reporter) -> list[RunResult]:
    results: list[RunResult] = []

    for package in plan.batch_packages:
        result = reporter.exec(
            f"Installing {package} with {plan.manager.value}",
            plan.batch_command([package]),
            needs_sudo=plan.needs_sudo,
        )
        results.append(result)
        if not result.succeeded:
            reporter.warn(f"{package} not installed, continuing")

    for tool, route in sorted(plan.routes.items()):
        result = reporter.exec(
            f"Installing {tool} via {route.via}",
            route.command,
            needs_sudo=route.needs_sudo,
        )
        results.append(result)
        if not result.succeeded:
            reporter.warn(f"{tool} not installed, continuing")

    failed = [r for r in results if not r.succeeded]
    if failed:
        logger.warning("%d of %d optional installs failed", len(failed), len(results))
    return results
