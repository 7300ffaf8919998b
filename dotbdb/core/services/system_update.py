"""
System update — upgrade packages, drop orphans, clean caches.

The command sequence comes from the dispatch table; this module only
walks it. The first failing step stops the sequence.
"""

from __future__ import annotations

import logging

from dotbdb.core.data.managers import CommandStep, ManagerSpec
from dotbdb.core.models.platform import PlatformInfo
from dotbdb.core.models.result import RunResult
from dotbdb.core.services.package_managers import lookup
from dotbdb.ui.reporter import Reporter

logger = logging.getLogger(__name__)


def update_system(platform: PlatformInfo, reporter: Reporter) -> list[RunResult]:
    """Run the update sequence for ``platform``.

    Returns:
        RunResults of the steps that ran; a failure is always last.

    Raises:
        UnsupportedDistroError: No dispatch entry for the distro.
    """
    spec = lookup(platform.distro_id)
    results: list[RunResult] = []

    for step in spec.upgrade:
        if not _run_step(step, reporter, results):
            return results

    if spec.orphans is not None:
        if not _remove_orphans(spec, reporter, results):
            return results

    for step in spec.clean:
        if not _run_step(step, reporter, results):
            return results

    return results


def _run_step(step: CommandStep, reporter: Reporter, results: list[RunResult]) -> bool:
    if step.requires and reporter.runner.which(step.requires) is None:
        reporter.info(f"Skipping '{step.description}': {step.requires} not installed")
        return True
    result = reporter.exec(step.description, step.command, needs_sudo=step.needs_sudo)
    results.append(result)
    return result.succeeded


def _remove_orphans(spec: ManagerSpec, reporter: Reporter, results: list[RunResult]) -> bool:
    list_cmd, remove = spec.orphans
    # pacman -Qdtq exits 1 when there is nothing to list
    listing = reporter.query(list_cmd, "Listing orphaned packages")
    orphans = listing.output.split() if listing.succeeded else []
    if not orphans:
        reporter.info("No orphaned packages")
        return True
    result = reporter.exec(
        f"Removing {len(orphans)} orphaned package(s)",
        [*remove, *orphans],
        needs_sudo=True,
    )
    results.append(result)
    return result.succeeded
