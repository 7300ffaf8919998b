"""
Tests for the curl/wget download helper.
"""

from pathlib import Path

from dotbdb.core.services.download import download, download_command


class TestDownloadCommand:
    def test_prefers_curl(self):
        argv = download_command("https://x/y.sh", Path("/tmp/y.sh"), have_curl=True, have_wget=True)
        assert argv == ["curl", "-fsSL", "https://x/y.sh", "-o", "/tmp/y.sh"]

    def test_wget_fallback(self):
        argv = download_command("https://x/y.sh", Path("/tmp/y.sh"), have_curl=False, have_wget=True)
        assert argv == ["wget", "-qO", "/tmp/y.sh", "https://x/y.sh"]

    def test_neither(self):
        assert download_command("u", Path("d"), have_curl=False, have_wget=False) is None


class TestDownload:
    def test_runs_through_reporter(self, reporter, mock_runner, tmp_path: Path):
        mock_runner.set_present("wget")
        result = download(reporter, "https://example.org/i.sh", tmp_path / "i.sh")
        assert result.succeeded
        assert mock_runner.commands == [["wget", "-qO", str(tmp_path / "i.sh"), "https://example.org/i.sh"]]

    def test_no_tool_is_reported_failure(self, reporter, mock_runner, user_stream, sink, tmp_path: Path):
        result = download(reporter, "https://example.org/i.sh", tmp_path / "i.sh")
        assert result.exit_code == 127
        assert mock_runner.call_count == 0
        assert "Neither curl nor wget" in user_stream.getvalue()
        assert "FAILED" in sink.path.read_text()
