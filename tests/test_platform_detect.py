"""
Tests for platform detection — kernel family, os-release parsing, vendor.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from dotbdb.core.models.platform import OSFamily
from dotbdb.core.services.platform_detect import (
    LINUX_SENTINEL,
    PlatformDetector,
    UnsupportedPlatformError,
)


def _os_release(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "os-release"
    path.write_text(body)
    return path


def _detector(tmp_path: Path, kernel: str, os_release: Path | None = None, vendor: str | None = None):
    vendor_path = tmp_path / "sys_vendor"
    if vendor is not None:
        vendor_path.write_text(vendor)
    return PlatformDetector(
        kernel_name=lambda: kernel,
        os_release_path=os_release or tmp_path / "missing-os-release",
        vendor_path=vendor_path,
    )


class TestDarwin:
    def test_darwin_is_macos(self, tmp_path: Path):
        info = _detector(tmp_path, "Darwin").detect()
        assert info.os_family == OSFamily.DARWIN
        assert info.distro_id == "macos"
        assert info.manufacturer == "Apple"


class TestLinux:
    def test_reads_id(self, tmp_path: Path):
        path = _os_release(tmp_path, 'NAME="Ubuntu"\nID=ubuntu\nID_LIKE=debian\n')
        info = _detector(tmp_path, "Linux", path).detect()
        assert info.os_family == OSFamily.LINUX
        assert info.distro_id == "ubuntu"

    def test_id_is_lower_cased(self, tmp_path: Path):
        path = _os_release(tmp_path, 'NAME="Fedora Linux"\nID=Fedora\n')
        assert _detector(tmp_path, "Linux", path).detect().distro_id == "fedora"

    def test_empty_id_falls_back_to_id_like(self, tmp_path: Path):
        path = _os_release(tmp_path, 'NAME="Derivative"\nID=""\nID_LIKE="arch linux"\n')
        assert _detector(tmp_path, "Linux", path).detect().distro_id == "arch"

    def test_missing_os_release_is_sentinel(self, tmp_path: Path):
        info = _detector(tmp_path, "Linux").detect()
        assert info.distro_id == LINUX_SENTINEL

    def test_unknown_id_returned_raw(self, tmp_path: Path):
        path = _os_release(tmp_path, "ID=plan9os\n")
        assert _detector(tmp_path, "Linux", path).detect().distro_id == "plan9os"

    def test_manufacturer_from_vendor_file(self, tmp_path: Path):
        path = _os_release(tmp_path, "ID=debian\n")
        info = _detector(tmp_path, "Linux", path, vendor="LENOVO\n").detect()
        assert info.manufacturer == "LENOVO"

    def test_manufacturer_unknown_when_unreadable(self, tmp_path: Path):
        path = _os_release(tmp_path, "ID=debian\n")
        assert _detector(tmp_path, "Linux", path).detect().manufacturer == "Unknown"


class TestUnsupported:
    @pytest.mark.parametrize("kernel", ["Windows", "FreeBSD", ""])
    def test_other_kernels_raise(self, tmp_path: Path, kernel: str):
        with pytest.raises(UnsupportedPlatformError) as exc:
            _detector(tmp_path, kernel).detect()
        assert exc.value.exit_code == 69


class TestCaching:
    def test_detect_runs_once(self, tmp_path: Path):
        calls = []

        def kernel():
            calls.append(1)
            return "Darwin"

        detector = PlatformDetector(kernel_name=kernel, vendor_path=tmp_path / "v")
        first = detector.detect()
        second = detector.detect()
        assert first is second
        assert len(calls) == 1
