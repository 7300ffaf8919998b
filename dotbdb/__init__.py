"""bdb — Bassa's Dotfiles Bootstrapper.

Prepares a fresh machine for chezmoi: detects the platform, installs the
minimal toolchain, then hands off to ``chezmoi init --apply``.
"""

__version__ = "0.1.0"
