"""
Tests for bdb.yml loading, environment overlay and log path resolution.
"""

import textwrap
from datetime import datetime
from pathlib import Path

import pytest

from dotbdb.core.config.loader import (
    ConfigError,
    default_log_path,
    find_config_file,
    load_settings,
    parse_packages,
)
from dotbdb.core.context import BootstrapContext
from dotbdb.core.models.settings import Settings


class TestSettings:
    def test_defaults(self):
        s = Settings()
        assert s.repository == "norville/dotfiles"
        assert s.required == ["git", "chezmoi"]
        assert s.handoff_command() == ["chezmoi", "init", "--branch", "main", "--apply", "norville"]

    def test_blank_required_rejected(self):
        with pytest.raises(ValueError):
            Settings(required=["", "  "])

    @pytest.mark.parametrize("field", ["keepalive_interval", "clt_timeout"])
    @pytest.mark.parametrize("value", [0, -5])
    def test_intervals_must_be_positive(self, field, value):
        with pytest.raises(ValueError):
            Settings(**{field: value})

    def test_handoff_command_line_is_quoted(self):
        s = Settings(github_user="some one", branch="dev")
        assert s.handoff_command_line() == "chezmoi init --branch dev --apply 'some one'"


class TestFindConfigFile:
    def test_explicit_wins(self, tmp_path: Path):
        path, required = find_config_file(tmp_path / "x.yml", env={"BDB_CONFIG": "/elsewhere"})
        assert path == tmp_path / "x.yml"
        assert required

    def test_env_var(self, tmp_path: Path):
        path, required = find_config_file(None, env={"BDB_CONFIG": str(tmp_path / "e.yml")})
        assert path == tmp_path / "e.yml"
        assert required

    def test_xdg_default_when_present(self, tmp_path: Path):
        cfg = tmp_path / "bdb" / "bdb.yml"
        cfg.parent.mkdir()
        cfg.write_text("branch: dev\n")
        path, required = find_config_file(None, env={"XDG_CONFIG_HOME": str(tmp_path)})
        assert path == cfg
        assert not required

    def test_nothing_found(self, tmp_path: Path):
        assert find_config_file(None, env={"XDG_CONFIG_HOME": str(tmp_path)}) == (None, False)


class TestLoadSettings:
    def test_none_gives_defaults(self):
        assert load_settings(None) == Settings()

    def test_flat_file(self, tmp_path: Path):
        cfg = tmp_path / "bdb.yml"
        cfg.write_text(textwrap.dedent("""\
            github_user: alice
            branch: dev
            required: [git, chezmoi, curl]
        """))
        s = load_settings(cfg)
        assert s.github_user == "alice"
        assert s.branch == "dev"
        assert s.required == ["git", "chezmoi", "curl"]

    def test_wrapped_file(self, tmp_path: Path):
        cfg = tmp_path / "bdb.yml"
        cfg.write_text("bdb:\n  github_repo: dots\n")
        assert load_settings(cfg).github_repo == "dots"

    def test_empty_file(self, tmp_path: Path):
        cfg = tmp_path / "bdb.yml"
        cfg.write_text("")
        assert load_settings(cfg) == Settings()

    def test_missing_required_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path / "nope.yml", required=True)

    def test_missing_optional_file(self, tmp_path: Path):
        assert load_settings(tmp_path / "nope.yml") == Settings()

    def test_invalid_yaml(self, tmp_path: Path):
        cfg = tmp_path / "bdb.yml"
        cfg.write_text("github_user: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_settings(cfg)

    def test_not_a_mapping(self, tmp_path: Path):
        cfg = tmp_path / "bdb.yml"
        cfg.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_settings(cfg)

    def test_schema_error(self, tmp_path: Path):
        cfg = tmp_path / "bdb.yml"
        cfg.write_text("keepalive_interval: often\n")
        with pytest.raises(ConfigError) as exc:
            load_settings(cfg)
        assert exc.value.exit_code == 1
        assert str(cfg) in str(exc.value)

    def test_zero_keepalive_in_file(self, tmp_path: Path):
        cfg = tmp_path / "bdb.yml"
        cfg.write_text("keepalive_interval: 0\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_settings(cfg)


class TestEnvironment:
    def test_parse_packages(self):
        assert parse_packages("htop  ripgrep htop\ttmux") == ["htop", "ripgrep", "tmux"]
        assert parse_packages(None) == []
        assert parse_packages("") == []

    def test_context_from_env(self):
        ctx = BootstrapContext.from_env(
            Settings(), env={"PACKAGES": "htop tmux", "INCLUDES": "/opt/include.sh"},
        )
        assert ctx.packages == ("htop", "tmux")
        assert ctx.includes == "/opt/include.sh"

    def test_context_without_env(self):
        ctx = BootstrapContext.from_env(Settings(), env={})
        assert ctx.packages == ()
        assert ctx.includes is None


class TestDefaultLogPath:
    NOW = datetime(2026, 1, 2, 3, 4, 5)

    def test_env_override(self, tmp_path: Path):
        path = default_log_path(Settings(), env={"BDB_LOG_FILE": str(tmp_path / "x.log")}, now=self.NOW)
        assert path == tmp_path / "x.log"

    def test_settings_log_dir(self, tmp_path: Path):
        path = default_log_path(Settings(log_dir=tmp_path), env={}, now=self.NOW)
        assert path == tmp_path / "bdb_log_20260102_030405.txt"

    def test_xdg_state_home(self, tmp_path: Path):
        path = default_log_path(Settings(), env={"XDG_STATE_HOME": str(tmp_path)}, now=self.NOW)
        assert path == tmp_path / "bdb" / "bdb_log_20260102_030405.txt"
