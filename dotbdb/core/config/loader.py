"""
Configuration loader — reads bdb.yml into the Settings model.

The file is optional. It is looked up in precedence order:

    --config PATH  >  $BDB_CONFIG  >  ${XDG_CONFIG_HOME:-~/.config}/bdb/bdb.yml

A missing default file yields the built-in defaults; an explicitly named
file that does not exist is an error.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Mapping

import yaml
from pydantic import ValidationError

from dotbdb.core.errors import BootstrapError
from dotbdb.core.models.settings import Settings

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "bdb.yml"

LOG_FILE_PATTERN = "bdb_log_%Y%m%d_%H%M%S.txt"


class ConfigError(BootstrapError):
    """Raised when bdb.yml is unreadable or invalid."""


def config_home(env: Mapping[str, str] | None = None) -> Path:
    env = os.environ if env is None else env
    base = env.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "bdb"


def state_home(env: Mapping[str, str] | None = None) -> Path:
    env = os.environ if env is None else env
    base = env.get("XDG_STATE_HOME") or str(Path.home() / ".local" / "state")
    return Path(base) / "bdb"


def find_config_file(
    explicit: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> tuple[Path | None, bool]:
    """Locate the config file.

    Args:
        explicit: Path given with ``--config``.
        env: Environment to consult (default: ``os.environ``).

    Returns:
        ``(path, required)``. ``required`` is True when the user named
        the file, so a missing file must be reported.
    """
    env = os.environ if env is None else env
    if explicit is not None:
        return Path(explicit).expanduser(), True
    if env.get("BDB_CONFIG"):
        return Path(env["BDB_CONFIG"]).expanduser(), True

    candidate = config_home(env) / CONFIG_FILE
    if candidate.is_file():
        return candidate, False
    return None, False


def load_settings(path: Path | None = None, *, required: bool = False) -> Settings:
    """Load and validate bdb.yml.

    Args:
        path: Config file, or None for defaults.
        required: Fail when ``path`` does not exist.

    Returns:
        Validated Settings.

    Raises:
        ConfigError: If the file is missing (when required) or invalid.
    """
    if path is None:
        logger.debug("No %s found, using defaults", CONFIG_FILE)
        return Settings()

    if not path.is_file():
        if required:
            raise ConfigError(f"Config file not found: {path}")
        return Settings()

    logger.debug("Loading settings from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return Settings()
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The file may wrap everything under a "bdb" key or be flat
    if isinstance(data.get("bdb"), dict):
        data = data["bdb"]

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.info("Loaded settings from %s (repository %s)", path, settings.repository)
    return settings


def parse_packages(value: str | None) -> list[str]:
    """Split the space-separated ``PACKAGES`` value, keeping order, no dupes."""
    seen: list[str] = []
    for name in (value or "").split():
        if name not in seen:
            seen.append(name)
    return seen


def default_log_path(
    settings: Settings,
    env: Mapping[str, str] | None = None,
    now: datetime | None = None,
) -> Path:
    """Where the audit log goes when ``--log-file`` is not given.

    ``$BDB_LOG_FILE`` wins, then ``settings.log_dir``, then the XDG state
    directory. The file name carries the run's start time.
    """
    env = os.environ if env is None else env
    if env.get("BDB_LOG_FILE"):
        return Path(env["BDB_LOG_FILE"]).expanduser()

    directory = settings.log_dir.expanduser() if settings.log_dir else state_home(env)
    return directory / (now or datetime.now()).strftime(LOG_FILE_PATTERN)
