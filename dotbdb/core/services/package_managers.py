"""
Package manager adapter — turn a platform and a tool list into a plan.

Planning is read-only: the only question asked of the host is "is this
executable on PATH?". Nothing is installed, updated or written here.
"""

from __future__ import annotations

import logging
import shutil
from typing import Callable, Iterable

from dotbdb.core.data.managers import MANAGERS, DistroId, ManagerSpec
from dotbdb.core.errors import EXIT_UNSUPPORTED_PLATFORM, BootstrapError
from dotbdb.core.models.plan import PackagePlan, Prerequisite
from dotbdb.core.models.platform import PlatformInfo

logger = logging.getLogger(__name__)


class UnsupportedDistroError(BootstrapError):
    """The distribution id has no entry in the dispatch table."""

    exit_code = EXIT_UNSUPPORTED_PLATFORM

    def __init__(self, distro_id: str):
        self.distro_id = distro_id
        supported = ", ".join(d.value for d in DistroId)
        super().__init__(
            f"Unsupported distribution: {distro_id!r} (supported: {supported})"
        )


def lookup(distro_id: str) -> ManagerSpec:
    """Dispatch-table entry for a distro id.

    Raises:
        UnsupportedDistroError: No package manager is known for the id.
    """
    try:
        return MANAGERS[DistroId(distro_id)]
    except (ValueError, KeyError):
        raise UnsupportedDistroError(distro_id) from None


def is_supported(distro_id: str) -> bool:
    try:
        lookup(distro_id)
    except UnsupportedDistroError:
        return False
    return True


def _on_path(executable: str) -> bool:
    return shutil.which(executable) is not None


def plan_for(
    platform: PlatformInfo,
    required: Iterable[str],
    *,
    is_present: Callable[[str], bool] | None = None,
) -> PackagePlan:
    """Build the install plan for ``required`` on ``platform``.

    Args:
        platform: Detected platform; only ``distro_id`` is consulted.
        required: Executables that must end up on PATH.
        is_present: Presence check, usually ``runner.which`` as a bool.
            Defaults to "on this process's PATH".

    Returns:
        PackagePlan with the batch command, alternate routes for missing
        tools, and route prerequisites that are themselves missing.

    Raises:
        UnsupportedDistroError: Unknown distro id (no default manager).
    """
    if is_present is None:
        is_present = _on_path
    spec = lookup(platform.distro_id)
    wanted = frozenset(t for t in required if t)

    present = frozenset(t for t in wanted if is_present(t))
    missing = wanted - present

    routes = {t: spec.routes[t] for t in sorted(missing) if t in spec.routes}

    prerequisites: list[Prerequisite] = []
    for route in routes.values():
        for prereq in route.prerequisites:
            if prereq in prerequisites or is_present(prereq.command):
                continue
            prerequisites.append(prereq)

    plan = PackagePlan(
        distro_id=platform.distro_id,
        manager=spec.manager,
        required=wanted,
        already_present=present,
        install_command=spec.install,
        needs_sudo=spec.needs_sudo,
        package_names=dict(spec.package_names),
        routes=routes,
        missing_prerequisites=tuple(prerequisites),
        preflight=spec.preflight,
    )
    logger.debug(
        "Plan for %s via %s: present=%s to_install=%s routes=%s",
        platform.distro_id, spec.manager.value,
        sorted(present), sorted(plan.to_install), sorted(routes),
    )
    return plan
