"""
PackagePlan — what is required, what is already there, what will be installed.

Plans are computed fresh on every run from live system state (is the
executable on PATH?). Nothing is persisted: no lockfile, no manifest.
Building a plan never mutates the system, so a plan can be previewed and
logged before anything is installed.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field


class ManagerName(str, Enum):
    """Package managers the bootstrapper knows how to drive."""

    APT = "apt"
    DNF = "dnf"
    PACMAN = "pacman"
    BREW = "brew"
    SNAP = "snap"


class Preflight(str, Enum):
    """Platform checks that must pass before any package-manager step."""

    XCODE_CLT = "xcode-clt"     # macOS compiler toolchain
    HOMEBREW = "homebrew"       # brew itself must exist before brew install


class Prerequisite(BaseModel):
    """An executable an install route needs, and the package providing it."""

    model_config = ConfigDict(frozen=True)

    command: str
    package: str


class InstallRoute(BaseModel):
    """An install path that bypasses the primary manager's batch call.

    Example: chezmoi on Ubuntu comes from snap, so ``snap`` must exist
    (``snapd`` via apt) before the route can run.
    """

    model_config = ConfigDict(frozen=True)

    tool: str
    via: str
    command: tuple[str, ...]
    needs_sudo: bool = False
    prerequisites: tuple[Prerequisite, ...] = ()


class PackagePlan(BaseModel):
    """The install plan for one run on one platform."""

    distro_id: str
    manager: ManagerName
    required: frozenset[str]
    already_present: frozenset[str] = frozenset()

    install_command: tuple[str, ...] = ()       # batch prefix, packages appended
    needs_sudo: bool = True
    package_names: dict[str, str] = Field(default_factory=dict)
    routes: dict[str, InstallRoute] = Field(default_factory=dict)
    missing_prerequisites: tuple[Prerequisite, ...] = ()
    preflight: tuple[Preflight, ...] = ()

    @property
    def to_install(self) -> frozenset[str]:
        """Required tools that are not present yet."""
        return self.required - self.already_present

    @property
    def is_satisfied(self) -> bool:
        return not self.to_install

    @property
    def batch_tools(self) -> list[str]:
        """Tools installed through the primary manager in one call."""
        return sorted(t for t in self.to_install if t not in self.routes)

    @property
    def batch_packages(self) -> list[str]:
        """Package identifiers for the batch call, prerequisites first."""
        packages: list[str] = []
        names = [p.package for p in self.missing_prerequisites]
        names += [self.package_names.get(t, t) for t in self.batch_tools]
        for name in names:
            if name not in packages:
                packages.append(name)
        return packages

    def batch_command(self, packages: Iterable[str] | None = None) -> list[str]:
        """Install command for ``packages`` (default: the whole batch)."""
        selected = list(self.batch_packages if packages is None else packages)
        return [*self.install_command, *selected]

    def to_dict(self) -> dict[str, Any]:
        return {
            "distro_id": self.distro_id,
            "manager": self.manager.value,
            "required": sorted(self.required),
            "already_present": sorted(self.already_present),
            "to_install": sorted(self.to_install),
            "batch": self.batch_packages,
            "routes": {
                tool: {"via": route.via, "command": list(route.command)}
                for tool, route in sorted(self.routes.items())
            },
            "preflight": [p.value for p in self.preflight],
        }
