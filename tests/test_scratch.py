"""
Tests for scratch file tracking and cleanup.
"""

from pathlib import Path

from dotbdb.core.services.scratch import ScratchFiles


class TestScratchFiles:
    def test_touch_creates_and_tracks(self, tmp_path: Path):
        scratch = ScratchFiles()
        marker = tmp_path / "marker"
        assert scratch.touch(marker)
        assert marker.exists()
        assert scratch.cleanup() == [marker]
        assert not marker.exists()

    def test_pre_existing_file_is_never_removed(self, tmp_path: Path):
        existing = tmp_path / "existing"
        existing.write_text("keep me")
        scratch = ScratchFiles()
        assert not scratch.touch(existing)
        assert not scratch.register(existing)
        scratch.cleanup()
        assert existing.read_text() == "keep me"

    def test_new_file(self):
        scratch = ScratchFiles()
        path = scratch.new_file(suffix=".sh")
        assert path.exists()
        assert path.suffix == ".sh"
        scratch.cleanup()
        assert not path.exists()

    def test_already_gone_is_fine(self, tmp_path: Path):
        scratch = ScratchFiles()
        marker = tmp_path / "marker"
        scratch.touch(marker)
        marker.unlink()
        assert scratch.cleanup() == []

    def test_cleanup_errors_are_swallowed(self, tmp_path: Path, monkeypatch):
        scratch = ScratchFiles()
        marker = tmp_path / "marker"
        scratch.touch(marker)

        def refuse(self, missing_ok=False):
            raise PermissionError("denied")

        monkeypatch.setattr(Path, "unlink", refuse)
        assert scratch.cleanup() == []
        assert scratch.paths == []

    def test_register_twice_tracks_once(self, tmp_path: Path):
        scratch = ScratchFiles()
        target = tmp_path / "download.sh"
        scratch.register(target)
        scratch.register(target)
        assert scratch.paths == [target]
