"""
Package manager dispatch table.

Pure data. One ``ManagerSpec`` per supported distribution id; a distro id
missing from ``MANAGERS`` is unsupported, full stop. There is no fallback
package manager.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from dotbdb.core.models.plan import InstallRoute, ManagerName, Preflight, Prerequisite


class DistroId(str, Enum):
    """Closed set of supported distribution ids (``ID=`` in os-release)."""

    ARCH = "arch"
    MANJARO = "manjaro"
    DEBIAN = "debian"
    UBUNTU = "ubuntu"
    POP = "pop"
    FEDORA = "fedora"
    RHEL = "rhel"
    CENTOS = "centos"
    MACOS = "macos"


@dataclass(frozen=True)
class CommandStep:
    """One command of a multi-step operation (update, clean)."""

    description: str
    command: tuple[str, ...]
    needs_sudo: bool = True
    requires: str | None = None     # skip the step when this executable is missing


@dataclass(frozen=True)
class ManagerSpec:
    """Everything the bootstrapper needs to drive one package manager."""

    manager: ManagerName
    install: tuple[str, ...]
    needs_sudo: bool = True
    upgrade: tuple[CommandStep, ...] = ()
    clean: tuple[CommandStep, ...] = ()
    # (query, remove) pair; the query prints one orphan per line
    orphans: tuple[tuple[str, ...], tuple[str, ...]] | None = None
    package_names: Mapping[str, str] = field(default_factory=dict)
    routes: Mapping[str, InstallRoute] = field(default_factory=dict)
    preflight: tuple[Preflight, ...] = ()


# ── Upstream installers ─────────────────────────────────────────

HOMEBREW_INSTALL_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"
CHEZMOI_INSTALL_URL = "https://get.chezmoi.io"

# Candidate brew locations after a fresh install (Apple silicon, Intel)
HOMEBREW_PREFIXES = ("/opt/homebrew/bin", "/usr/local/bin")

_CHEZMOI_VIA_SNAP = InstallRoute(
    tool="chezmoi",
    via="snap",
    command=("snap", "install", "chezmoi", "--classic"),
    needs_sudo=True,
    prerequisites=(Prerequisite(command="snap", package="snapd"),),
)

_CHEZMOI_VIA_SCRIPT = InstallRoute(
    tool="chezmoi",
    via="get.chezmoi.io",
    command=(
        "sh", "-c",
        f'sh -c "$(curl -fsLS {CHEZMOI_INSTALL_URL})" -- -b /usr/local/bin',
    ),
    needs_sudo=True,
    prerequisites=(Prerequisite(command="curl", package="curl"),),
)


# ── Per-manager specs ───────────────────────────────────────────

_PACMAN = ManagerSpec(
    manager=ManagerName.PACMAN,
    install=("pacman", "-S", "--needed", "--noconfirm"),
    upgrade=(
        CommandStep("Updating system packages", ("pacman", "-Syu", "--noconfirm")),
    ),
    orphans=(("pacman", "-Qdtq"), ("pacman", "-Rns", "--noconfirm")),
    clean=(
        CommandStep("Cleaning package cache", ("pacman", "-Scc", "--noconfirm")),
    ),
)

_APT_UPGRADE = (
    CommandStep("Updating package lists", ("apt-get", "update")),
    CommandStep("Upgrading packages", ("apt-get", "full-upgrade", "-y")),
)
_APT_CLEAN = (
    CommandStep("Removing unused packages", ("apt-get", "autoremove", "--purge", "-y")),
    CommandStep("Cleaning package cache", ("apt-get", "clean")),
)

_APT_DEBIAN = ManagerSpec(
    manager=ManagerName.APT,
    install=("apt-get", "install", "-y"),
    upgrade=_APT_UPGRADE,
    clean=_APT_CLEAN,
    routes=MappingProxyType({"chezmoi": _CHEZMOI_VIA_SCRIPT}),
)

_APT_UBUNTU = ManagerSpec(
    manager=ManagerName.APT,
    install=("apt-get", "install", "-y"),
    upgrade=_APT_UPGRADE,
    clean=_APT_CLEAN,
    routes=MappingProxyType({"chezmoi": _CHEZMOI_VIA_SNAP}),
)

_DNF = ManagerSpec(
    manager=ManagerName.DNF,
    install=("dnf", "install", "-y"),
    upgrade=(
        CommandStep("Upgrading system packages", ("dnf", "upgrade", "-y")),
    ),
    clean=(
        CommandStep("Removing unused packages", ("dnf", "autoremove", "-y")),
        CommandStep("Cleaning package cache", ("dnf", "clean", "all")),
    ),
    routes=MappingProxyType({"chezmoi": _CHEZMOI_VIA_SCRIPT}),
)

_BREW = ManagerSpec(
    manager=ManagerName.BREW,
    install=("brew", "install"),
    needs_sudo=False,   # brew refuses to run as root
    upgrade=(
        CommandStep(
            "Updating macOS system",
            ("softwareupdate", "--install", "--recommended"),
        ),
        CommandStep("Updating Homebrew", ("brew", "update"), needs_sudo=False, requires="brew"),
        CommandStep(
            "Upgrading Homebrew packages", ("brew", "upgrade"),
            needs_sudo=False, requires="brew",
        ),
    ),
    clean=(
        CommandStep("Cleaning Homebrew", ("brew", "cleanup"), needs_sudo=False, requires="brew"),
    ),
    preflight=(Preflight.XCODE_CLT, Preflight.HOMEBREW),
)


MANAGERS: Mapping[DistroId, ManagerSpec] = MappingProxyType({
    DistroId.ARCH: _PACMAN,
    DistroId.MANJARO: _PACMAN,
    DistroId.DEBIAN: _APT_DEBIAN,
    DistroId.UBUNTU: _APT_UBUNTU,
    DistroId.POP: _APT_UBUNTU,
    DistroId.FEDORA: _DNF,
    DistroId.RHEL: _DNF,
    DistroId.CENTOS: _DNF,
    DistroId.MACOS: _BREW,
})
