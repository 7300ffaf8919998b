"""
Settings model — bootstrap configuration loaded from bdb.yml.

Every field has a default, so a missing config file is a valid setup:
the bootstrapper works out of the box for the upstream dotfiles repo.
"""

from __future__ import annotations

import shlex
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

DEFAULT_REQUIRED = ["git", "chezmoi"]


class Settings(BaseModel):
    """Bootstrap settings."""

    github_user: str = "norville"
    github_repo: str = "dotfiles"
    branch: str = "main"

    # Minimal toolchain needed before chezmoi can take over
    required: list[str] = Field(default_factory=lambda: list(DEFAULT_REQUIRED))
    # Tool that must be invocable after the dependency step
    handoff_tool: str = "chezmoi"

    keepalive_interval: float = Field(default=60.0, gt=0)   # seconds between sudo refreshes
    clt_timeout: float = Field(default=1800.0, gt=0)        # max wait for Xcode CLT install
    log_dir: Path | None = None

    @field_validator("required")
    @classmethod
    def _no_blank_tools(cls, value: list[str]) -> list[str]:
        cleaned = [v.strip() for v in value if v and v.strip()]
        if not cleaned:
            raise ValueError("required must list at least one tool")
        return cleaned

    @property
    def repository(self) -> str:
        return f"{self.github_user}/{self.github_repo}"

    @property
    def repository_url(self) -> str:
        return f"https://github.com/{self.repository}"

    def handoff_command(self) -> list[str]:
        """The chezmoi entry point that clones and applies the dotfiles."""
        return [
            self.handoff_tool, "init",
            "--branch", self.branch,
            "--apply", self.github_user,
        ]

    def handoff_command_line(self) -> str:
        return shlex.join(self.handoff_command())
