"""
Tests for the dual-channel reporter — user lines, log mirror, prompts, exec.
"""

import pytest

from dotbdb.adapters.shell.command import ShellCommandAdapter
from dotbdb.ui.reporter import Reporter, is_affirmative, is_negative


def _log(sink) -> str:
    return sink.path.read_text()


class TestStatusLines:
    @pytest.mark.parametrize("method, icon, tag", [
        ("success", "[✓]", "SUCCESS"),
        ("error", "[✗]", "ERROR"),
        ("warn", "[!]", "WARN"),
        ("info", "[i]", "INFO"),
        ("action", "[→]", "ACTION"),
    ])
    def test_line_goes_to_both_channels(self, reporter, sink, user_stream, method, icon, tag):
        getattr(reporter, method)("hello world")
        assert f"{icon} hello world" in user_stream.getvalue()
        assert f"{tag}: hello world" in _log(sink)

    def test_no_color_codes_when_disabled(self, reporter, user_stream):
        reporter.success("plain")
        assert "\x1b[" not in user_stream.getvalue()

    def test_color_codes_when_enabled(self, sink, mock_runner, terminal, user_stream):
        Reporter(sink, mock_runner, terminal=terminal, color=True).error("red")
        assert "\x1b[31" in user_stream.getvalue()

    def test_progress_and_outcome_share_a_line(self, reporter, user_stream):
        reporter.progress("Detecting platform")
        reporter.outcome("Linux/arch")
        assert "[→] Detecting platform... Linux/arch\n" in user_stream.getvalue()

    def test_sections_write_separator_to_log(self, reporter, sink, user_stream):
        reporter.begin_section("System Update")
        reporter.end_section()
        assert "System Update" in user_stream.getvalue()
        log = _log(sink)
        assert "SECTION System Update" in log
        assert "=" * 80 in log

    def test_var(self, reporter, user_stream):
        reporter.var("Branch", "main")
        assert "[i] Branch: main" in user_stream.getvalue()


class TestAnswers:
    @pytest.mark.parametrize("answer, expected", [
        ("y", True), ("Y", True), ("n", False), ("N", False),
        ("", False), ("x", False), ("yes", False),
    ])
    def test_affirmative(self, answer, expected):
        assert is_affirmative(answer) is expected

    @pytest.mark.parametrize("answer, expected", [
        ("n", True), ("N", True), ("y", False), ("", False), ("q", False),
    ])
    def test_negative(self, answer, expected):
        assert is_negative(answer) is expected


class TestPrompts:
    def test_ask_default_no(self, reporter, terminal):
        terminal.queue("")
        assert reporter.ask("Continue") is False

    def test_ask_yes(self, reporter, terminal):
        terminal.queue("Y")
        assert reporter.ask("Continue") is True

    def test_ask_capital_n_is_no(self, reporter, terminal):
        terminal.queue("N")
        assert reporter.ask("Continue") is False

    def test_ask_default_yes_enter(self, reporter, terminal):
        terminal.queue("")
        assert reporter.ask_default_yes("Continue") is True

    def test_ask_default_yes_other_key(self, reporter, terminal):
        terminal.queue("q")
        assert reporter.ask_default_yes("Continue") is True

    def test_ask_default_yes_no(self, reporter, terminal):
        terminal.queue("n")
        assert reporter.ask_default_yes("Continue") is False

    def test_answer_logged(self, reporter, terminal, sink):
        terminal.queue("y")
        reporter.ask("Update system packages now")
        assert "ASK 'Update system packages now' [y/N] -> 'y'" in _log(sink)

    def test_assume_yes_never_reads(self, sink, mock_runner, scripted):
        term = scripted()
        r = Reporter(sink, mock_runner, terminal=term, assume_yes=True, color=False)
        assert r.ask("Continue") is True
        assert r.ask_default_yes("Continue") is True
        assert term.reads == 0
        assert "auto-confirmed (--yes)" in _log(sink)

    def test_input_reads_line(self, reporter, terminal, sink):
        terminal.queue("norville")
        assert reporter.input("GitHub user") == "norville"
        assert "INPUT 'GitHub user' -> 'norville'" in _log(sink)


class TestExec:
    def test_success_single_status_line(self, reporter, mock_runner, user_stream, sink):
        mock_runner.set_response(["apt-get", "update"], output="Hit:1 http://archive\nReading lists")
        result = reporter.exec("Updating package lists", ["apt-get", "update"], needs_sudo=True)
        assert result.succeeded
        out = user_stream.getvalue()
        assert "[→] Updating package lists... done" in out
        assert "Hit:1" not in out
        log = _log(sink)
        assert "COMMAND sudo apt-get update" in log
        assert "Hit:1 http://archive" in log
        assert "EXIT 0" in log

    def test_failure_reports_code_and_returns(self, reporter, mock_runner, user_stream, sink):
        mock_runner.set_failure(["pacman", "-S"], exit_code=7, error="error: target not found: chezmoi")
        result = reporter.exec("Installing chezmoi", ["pacman", "-S", "chezmoi"], needs_sudo=True)
        assert not result.succeeded
        assert result.exit_code == 7
        out = user_stream.getvalue()
        assert "[✗] Installing chezmoi (exit code 7)" in out
        assert "target not found" not in out
        log = _log(sink)
        assert "FAILED description='Installing chezmoi'" in log
        assert "exit_code=7" in log
        assert "error: target not found: chezmoi" in log

    def test_interactive_is_passed_through(self, reporter, mock_runner):
        reporter.exec("Requesting administrator privileges", ["sudo", "-v"], interactive=True)
        assert mock_runner.call_log[-1]["interactive"] is True

    def test_query_is_log_only(self, reporter, mock_runner, user_stream, sink):
        mock_runner.set_response(["xcode-select", "-p"], output="/Library/Developer/CommandLineTools")
        reporter.query(["xcode-select", "-p"], "Checking CLT")
        assert user_stream.getvalue() == ""
        assert "/Library/Developer/CommandLineTools" in _log(sink)

    def test_real_command_output_stays_in_log(self, sink, user_stream, terminal):
        r = Reporter(sink, ShellCommandAdapter(), terminal=terminal, color=False)
        result = r.exec("Noisy command", ["sh", "-c", "echo hidden; echo oops >&2; exit 3"])
        assert result.exit_code == 3
        assert "hidden" not in user_stream.getvalue()
        assert "oops" not in user_stream.getvalue()
        log = _log(sink)
        assert "hidden" in log
        assert "oops" in log
        assert "exit_code=3" in log

    def test_every_user_line_is_in_the_log(self, reporter, terminal, user_stream, sink):
        terminal.queue("n")
        reporter.info("first")
        reporter.warn("second")
        reporter.ask("third")
        reporter.exec("fourth", ["true"])
        log = _log(sink)
        for text in ("first", "second", "third", "fourth"):
            assert text in user_stream.getvalue()
            assert text in log
