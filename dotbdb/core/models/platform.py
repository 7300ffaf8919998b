"""
Platform model — what machine are we running on.

Built once by the platform detector and passed explicitly to every
component that dispatches on it. Immutable after construction.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class OSFamily(str, Enum):
    """Kernel family as reported by ``uname -s``."""

    DARWIN = "darwin"
    LINUX = "linux"
    WINDOWS = "windows"
    UNKNOWN = "unknown"


class PlatformInfo(BaseModel):
    """Detected platform.

    ``distro_id`` is reported raw (lower-cased); whether it is supported is
    decided by the package manager table, not here.
    """

    model_config = ConfigDict(frozen=True)

    os_family: OSFamily
    distro_id: str
    manufacturer: str = "Unknown"   # informational only
    kernel: str = ""                # raw kernel name, e.g. "Linux"

    @property
    def label(self) -> str:
        """Short ``Kernel/distro`` label for status lines."""
        return f"{self.kernel or self.os_family.value}/{self.distro_id}"

    def to_dict(self) -> dict[str, str]:
        return {
            "os_family": self.os_family.value,
            "distro_id": self.distro_id,
            "manufacturer": self.manufacturer,
            "kernel": self.kernel,
        }
