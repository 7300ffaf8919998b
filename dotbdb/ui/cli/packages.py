"""
CLI commands for package management outside the full bootstrap.

Thin wrappers over ``dotbdb.core.use_cases.packages``.
"""

from __future__ import annotations

import json
import sys

import click

from dotbdb.core.context import BootstrapContext


def _context(ctx: click.Context) -> BootstrapContext:
    return ctx.obj["context"]


@click.group()
def packages() -> None:
    """Packages — plan, install, update."""


# ── Preview ─────────────────────────────────────────────────────


@packages.command()
@click.argument("tools", nargs=-1)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def plan(ctx: click.Context, tools: tuple[str, ...], as_json: bool) -> None:
    """Preview what would be installed (default: the required tools)."""
    from dotbdb.core.use_cases.packages import preview_plan
    from dotbdb.ui.session import build_runner

    wanted = list(tools) or _context(ctx).settings.required
    result = preview_plan(wanted, build_runner(ctx.obj), detector=ctx.obj.get("detector"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(result.exit_code)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(result.exit_code)

    p = result.plan
    assert p is not None  # guaranteed after error check above
    click.secho(f"\n📦 {p.distro_id} via {p.manager.value}", fg="cyan", bold=True)
    for tool in sorted(p.already_present):
        click.echo(f"   ✅ {tool}")
    for tool in p.batch_tools:
        click.echo(f"   ⬇️  {tool}  ({p.manager.value})")
    for tool, route in sorted(p.routes.items()):
        click.echo(f"   ⬇️  {tool}  ({route.via})")

    if p.is_satisfied:
        click.secho("\n   Nothing to install", fg="green")
        click.echo()
        return

    click.echo()
    if p.preflight:
        click.echo(f"   Preflight: {', '.join(c.value for c in p.preflight)}")
    if p.batch_packages:
        click.echo(f"   Batch:     {' '.join(p.batch_command())}")
    for tool, route in sorted(p.routes.items()):
        click.echo(f"   {tool}: {' '.join(route.command)}")
    click.echo()


# ── Act ─────────────────────────────────────────────────────────


@packages.command()
@click.argument("names", nargs=-1)
@click.pass_context
def install(ctx: click.Context, names: tuple[str, ...]) -> None:
    """Install optional packages (default: $PACKAGES), continuing on failure."""
    from dotbdb.core.use_cases.packages import install_optional
    from dotbdb.ui.session import open_session

    bctx = _context(ctx)
    wanted = list(names) or list(bctx.packages)

    with open_session(ctx.obj) as session:
        session.reporter.begin_section("Optional Packages")
        result = install_optional(
            wanted, session.reporter,
            detector=ctx.obj.get("detector"),
            keepalive_interval=bctx.settings.keepalive_interval,
        )
        session.reporter.var("Log file", session.sink.path)
        session.reporter.end_section()

    sys.exit(result.exit_code)


@packages.command()
@click.pass_context
def update(ctx: click.Context) -> None:
    """Update system packages only (asks first)."""
    from dotbdb.core.use_cases.packages import update_only
    from dotbdb.ui.session import open_session

    bctx = _context(ctx)
    with open_session(ctx.obj) as session:
        session.reporter.begin_section("System Update")
        result = update_only(
            session.reporter,
            detector=ctx.obj.get("detector"),
            keepalive_interval=bctx.settings.keepalive_interval,
            clt_timeout=bctx.settings.clt_timeout,
        )
        session.reporter.var("Log file", session.sink.path)
        session.reporter.end_section()

    sys.exit(result.exit_code)
