"""
BDB (Bassa's Dotfiles Bootstrapper) — CLI entrypoint.

Usage:
    bdb                      # same as `bdb bootstrap`
    bdb bootstrap --yes
    bdb detect --json
    bdb packages plan git chezmoi
    python -m dotbdb.main --help
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from dotbdb import __version__
from dotbdb.core.observability.logging_config import setup_logging


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="bdb")
@click.option("--verbose", "-v", is_flag=True, help="Mirror the audit log on stderr.")
@click.option(
    "--log-file",
    "log_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Audit log path (default: $BDB_LOG_FILE or the XDG state dir).",
)
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Answer yes to every question.")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to bdb.yml (default: $BDB_CONFIG or ~/.config/bdb/bdb.yml).",
)
@click.option("--mock", is_flag=True, help="Simulate every command; nothing is changed.")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    log_file: str | None,
    assume_yes: bool,
    config_path: str | None,
    mock: bool,
) -> None:
    """BDB — bootstrap a fresh machine up to the chezmoi handoff."""
    from dotbdb.core.config.loader import (
        ConfigError,
        default_log_path,
        find_config_file,
        load_settings,
    )
    from dotbdb.core.context import BootstrapContext

    ctx.ensure_object(dict)

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(level=os.environ.get("BDB_LOG_LEVEL", "DEBUG"), verbose=verbose)

    path, required = find_config_file(Path(config_path) if config_path else None)
    try:
        settings = load_settings(path, required=required)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(e.exit_code)

    log_path = Path(log_file).expanduser() if log_file else default_log_path(settings)
    ctx.obj["context"] = BootstrapContext.from_env(
        settings,
        log_path=log_path,
        assume_yes=assume_yes,
        verbose=verbose,
    )
    ctx.obj["config_path"] = path
    ctx.obj["mock"] = mock

    if ctx.invoked_subcommand is None:
        ctx.invoke(bootstrap)


@cli.command()
@click.pass_context
def bootstrap(ctx: click.Context) -> None:
    """Run the full bootstrap (the default command)."""
    from dotbdb.core.use_cases.bootstrap import run_bootstrap
    from dotbdb.ui.session import open_session

    with open_session(ctx.obj) as session:
        result = run_bootstrap(
            ctx.obj["context"],
            session.reporter,
            detector=ctx.obj.get("detector"),
        )

    sys.exit(result.exit_code)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def detect(ctx: click.Context, as_json: bool) -> None:
    """Show the detected platform (read-only)."""
    from dotbdb.core.errors import BootstrapError
    from dotbdb.core.services.package_managers import is_supported, lookup
    from dotbdb.core.services.platform_detect import PlatformDetector

    detector = ctx.obj.get("detector") or PlatformDetector()
    try:
        info = detector.detect()
    except BootstrapError as e:
        if as_json:
            click.echo(json.dumps({"error": str(e), "exit_code": e.exit_code}, indent=2))
        else:
            click.secho(f"❌ {e}", fg="red")
        sys.exit(e.exit_code)

    supported = is_supported(info.distro_id)
    if as_json:
        data = info.to_dict()
        data["supported"] = supported
        data["manager"] = lookup(info.distro_id).manager.value if supported else None
        click.echo(json.dumps(data, indent=2))
        return

    click.secho(f"\n🖥️  {info.label}", fg="cyan", bold=True)
    click.echo(f"   OS family:    {info.os_family.value}")
    click.echo(f"   Distribution: {info.distro_id}")
    click.echo(f"   Manufacturer: {info.manufacturer}")
    if supported:
        click.secho(f"   ✅ Package manager: {lookup(info.distro_id).manager.value}", fg="green")
    else:
        click.secho("   ⚠️  No supported package manager for this distribution", fg="yellow")
    click.echo()


# ── Register sub-command groups from dotbdb/ui/cli/ ───────────────────

from dotbdb.ui.cli.packages import packages  # noqa: E402

cli.add_command(packages)


if __name__ == "__main__":
    cli()
