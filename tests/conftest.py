"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from dotbdb.adapters.mock import MockCommandAdapter
from dotbdb.core.models.platform import OSFamily, PlatformInfo
from dotbdb.core.observability.log_sink import LogSink
from dotbdb.ui.reporter import Reporter


class ScriptedTerminal:
    """Answers prompts from a queue; an empty queue means "just Enter"."""

    def __init__(self, *answers: str):
        self._answers = list(answers)
        self.reads = 0

    def queue(self, *answers: str) -> "ScriptedTerminal":
        self._answers.extend(answers)
        return self

    def read_char(self) -> str:
        self.reads += 1
        return self._answers.pop(0) if self._answers else ""

    def read_line(self) -> str:
        return self.read_char()


class StaticDetector:
    """Detector stand-in returning a fixed platform."""

    def __init__(self, info: PlatformInfo | BaseException):
        self._info = info
        self.calls = 0

    def detect(self) -> PlatformInfo:
        self.calls += 1
        if isinstance(self._info, BaseException):
            raise self._info
        return self._info


def linux(distro_id: str) -> PlatformInfo:
    return PlatformInfo(os_family=OSFamily.LINUX, distro_id=distro_id, kernel="Linux")


def macos() -> PlatformInfo:
    return PlatformInfo(
        os_family=OSFamily.DARWIN, distro_id="macos", manufacturer="Apple", kernel="Darwin",
    )


@pytest.fixture(autouse=True)
def _not_root(monkeypatch):
    """Tests run as an unprivileged user unless they say otherwise."""
    monkeypatch.setattr("dotbdb.core.services.privilege.is_root", lambda: False)
    monkeypatch.setattr("dotbdb.adapters.shell.command.is_root", lambda: False)


@pytest.fixture
def user_stream() -> io.StringIO:
    """What the operator would see on the terminal."""
    return io.StringIO()


@pytest.fixture
def log_path(tmp_path: Path) -> Path:
    return tmp_path / "logs" / "bdb_test.log"


@pytest.fixture
def sink(log_path: Path, user_stream: io.StringIO):
    s = LogSink(log_path, user_channel=user_stream).open()
    yield s
    s.close()


@pytest.fixture
def mock_runner() -> MockCommandAdapter:
    return MockCommandAdapter()


@pytest.fixture
def terminal() -> ScriptedTerminal:
    return ScriptedTerminal()


@pytest.fixture
def reporter(sink: LogSink, mock_runner: MockCommandAdapter, terminal: ScriptedTerminal) -> Reporter:
    return Reporter(sink, mock_runner, terminal=terminal, color=False)


@pytest.fixture
def scripted():
    """Factory for ScriptedTerminal, for tests that build their own reporter."""
    return ScriptedTerminal


@pytest.fixture
def static_detector():
    """Factory for StaticDetector."""
    return StaticDetector


@pytest.fixture
def platforms():
    """Platform builders: ``platforms.linux("ubuntu")``, ``platforms.macos()``."""

    class _Platforms:
        pass

    p = _Platforms()
    p.linux = linux
    p.macos = macos
    return p
