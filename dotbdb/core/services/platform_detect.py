"""
Platform detection — kernel family, distribution id and manufacturer.

Read-only inspection, run once per bootstrap:

    Darwin  → macos
    Linux   → ID from /etc/os-release (ID_LIKE first token when ID is empty),
              or the ``linux`` sentinel when the file is absent
    other   → UnsupportedPlatformError

The distribution id is reported raw. Whether a package manager exists for
it is the dispatch table's decision, not ours.
"""

from __future__ import annotations

import logging
import platform
from pathlib import Path
from typing import Callable

import distro

from dotbdb.core.errors import EXIT_UNSUPPORTED_PLATFORM, BootstrapError
from dotbdb.core.models.platform import OSFamily, PlatformInfo

logger = logging.getLogger(__name__)

OS_RELEASE_PATH = Path("/etc/os-release")
SYS_VENDOR_PATH = Path("/sys/devices/virtual/dmi/id/sys_vendor")

# Distro id used when a Linux host has no os-release file
LINUX_SENTINEL = "linux"
MACOS_ID = "macos"
UNKNOWN_MANUFACTURER = "Unknown"

_KERNEL_FAMILIES = {
    "darwin": OSFamily.DARWIN,
    "linux": OSFamily.LINUX,
}


class UnsupportedPlatformError(BootstrapError):
    """The kernel is neither Darwin nor Linux."""

    exit_code = EXIT_UNSUPPORTED_PLATFORM


class PlatformDetector:
    """Detects the running platform and caches the answer.

    All host lookups are injectable so tests can fake any host without
    patching globals.
    """

    def __init__(
        self,
        kernel_name: Callable[[], str] = platform.system,
        os_release_path: Path = OS_RELEASE_PATH,
        vendor_path: Path = SYS_VENDOR_PATH,
    ):
        self._kernel_name = kernel_name
        self._os_release_path = Path(os_release_path)
        self._vendor_path = Path(vendor_path)
        self._cached: PlatformInfo | None = None

    def detect(self) -> PlatformInfo:
        """Return the PlatformInfo for this host (inspected on first call only).

        Raises:
            UnsupportedPlatformError: The kernel is not Darwin or Linux.
        """
        if self._cached is None:
            self._cached = self._inspect()
        return self._cached

    # ── Host lookups ────────────────────────────────────────────

    def _inspect(self) -> PlatformInfo:
        kernel = (self._kernel_name() or "").strip()
        family = _KERNEL_FAMILIES.get(kernel.lower())

        if family is OSFamily.DARWIN:
            info = PlatformInfo(
                os_family=family,
                distro_id=MACOS_ID,
                manufacturer="Apple",
                kernel=kernel,
            )
        elif family is OSFamily.LINUX:
            info = PlatformInfo(
                os_family=family,
                distro_id=self._linux_distro_id(),
                manufacturer=self._manufacturer(),
                kernel=kernel,
            )
        else:
            logger.error("Unsupported kernel: %r", kernel)
            raise UnsupportedPlatformError(
                f"Unsupported platform: {kernel or 'unknown'} "
                "(only macOS and Linux are supported)"
            )

        logger.info(
            "Detected platform: os_family=%s distro_id=%s manufacturer=%s",
            info.os_family.value, info.distro_id, info.manufacturer,
        )
        return info

    def _linux_distro_id(self) -> str:
        if not self._os_release_path.is_file():
            logger.warning(
                "%s not found, reporting distro as %r",
                self._os_release_path, LINUX_SENTINEL,
            )
            return LINUX_SENTINEL

        release = distro.LinuxDistribution(
            include_lsb=False,
            os_release_file=str(self._os_release_path),
            distro_release_file="",
            include_uname=False,
            include_oslevel=False,
        )
        distro_id = release.os_release_attr("id").strip()
        if not distro_id:
            like = release.os_release_attr("id_like").split()
            distro_id = like[0] if like else ""
            logger.debug("os-release has no ID, ID_LIKE gives %r", distro_id)
        return distro_id.lower() or LINUX_SENTINEL

    def _manufacturer(self) -> str:
        try:
            vendor = self._vendor_path.read_text(encoding="utf-8", errors="replace").strip()
        except OSError as e:
            logger.debug("Cannot read %s: %s", self._vendor_path, e)
            return UNKNOWN_MANUFACTURER
        return vendor or UNKNOWN_MANUFACTURER


def detect() -> PlatformInfo:
    """Detect the current host with the default lookups."""
    return PlatformDetector().detect()
