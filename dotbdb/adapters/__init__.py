"""Adapters — how the bootstrapper talks to the host system.

Public re-exports for convenient access.
"""

from dotbdb.adapters.base import CommandAdapter
from dotbdb.adapters.mock import MockCommandAdapter
from dotbdb.adapters.shell.command import ShellCommandAdapter

__all__ = [
    "CommandAdapter",
    "MockCommandAdapter",
    "ShellCommandAdapter",
]
