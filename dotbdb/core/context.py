"""
Run context — everything a bootstrap run is configured with.

Built once by the CLI from flags, bdb.yml and the environment, then
passed explicitly to the use cases. There is no module-level state.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from dotbdb.core.config.loader import parse_packages
from dotbdb.core.models.settings import Settings


@dataclass(frozen=True)
class BootstrapContext:
    """Immutable configuration of one run."""

    settings: Settings = field(default_factory=Settings)
    log_path: Path | None = None
    assume_yes: bool = False
    verbose: bool = False
    includes: str | None = None             # $INCLUDES, informational only
    packages: tuple[str, ...] = ()          # $PACKAGES, optional components

    @classmethod
    def from_env(
        cls,
        settings: Settings,
        *,
        log_path: Path | None = None,
        assume_yes: bool = False,
        verbose: bool = False,
        env: Mapping[str, str] | None = None,
    ) -> BootstrapContext:
        env = os.environ if env is None else env
        return cls(
            settings=settings,
            log_path=log_path,
            assume_yes=assume_yes,
            verbose=verbose,
            includes=env.get("INCLUDES") or None,
            packages=tuple(parse_packages(env.get("PACKAGES"))),
        )
