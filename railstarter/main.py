"""
railstarter — CLI entrypoint.

Usage:
    railstarter --help
    railstarter new --template bootstrap
    railstarter status
    railstarter feature apply devise
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from railstarter import __version__
from railstarter.core.observability.logging_config import resolve_level, setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="railstarter")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--project",
    "-C",
    "project_root",
    type=click.Path(file_okay=False),
    default=None,
    help="Rails project root (default: auto-detect from cwd).",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to .railstarter.yml (default: <project>/.railstarter.yml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    project_root: str | None,
    config_path: str | None,
) -> None:
    """railstarter — turn a fresh Rails app into a starter app."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["project_root"] = Path(project_root) if project_root else None
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(level=resolve_level(verbose=verbose, quiet=quiet, debug=debug))


def load_or_exit(ctx: click.Context, template: str | None = None, require_rails: bool = True):
    """Resolve the config from the CLI context; print the error and exit 1 on failure."""
    from railstarter.core.config.loader import ConfigError, load_config

    try:
        return load_config(
            project_root=ctx.obj.get("project_root"),
            config_path=ctx.obj.get("config_path"),
            template=template,
            require_rails=require_rails,
        )
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)


def echo_result_line(feature: str, status: str, reason: str = "") -> None:
    icon, color = {
        "installed": ("✅", "green"),
        "skipped": ("⏭️ ", "yellow"),
        "aborted": ("❌", "red"),
    }.get(status, ("•", "white"))
    click.secho(f"   {icon} {feature}", fg=color, nl=False)
    click.echo(f" — {reason}" if reason else "")


@cli.command()
@click.option(
    "--template",
    "-t",
    type=click.Choice(["custom", "bootstrap", "tailwind"]),
    default=None,
    help="Template preset (default: custom, or the config file's value).",
)
@click.option("--dry-run", is_flag=True, help="Show what would happen without doing it.")
@click.option("--mock", is_flag=True, help="Pretend every command succeeds.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def new(
    ctx: click.Context,
    template: str | None,
    dry_run: bool,
    mock: bool,
    as_json: bool,
) -> None:
    """Set up a freshly generated Rails app (run from its root)."""
    from railstarter.core.use_cases.new_app import run_new_app

    config = load_or_exit(ctx, template=template)
    result = run_new_app(config, dry_run=dry_run, mock_mode=mock)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    quiet = ctx.obj.get("quiet", False)
    if not quiet:
        click.secho(f"\n🚂 {result.project_root} ({result.template})", fg="cyan", bold=True)
        if dry_run:
            click.secho("   (dry run, nothing was changed)", fg="yellow")
        click.echo()

    if result.selection is not None:
        chosen = ", ".join(result.selection.chosen) or "nothing"
        click.echo(f"   Selected: {chosen}")
    for outcome in result.results:
        echo_result_line(outcome.feature, outcome.status, outcome.reason)

    if result.error:
        click.secho(f"\n❌ {result.error}", fg="red")
        sys.exit(1)

    click.echo()
    click.secho(
        f"✅ Done: {len(result.installed)} feature(s) installed, "
        f"{len(result.checkpoints)} checkpoint(s)",
        fg="green",
        bold=True,
    )
    if result.aborted:
        click.secho(f"   ⚠️  Aborted: {', '.join(result.aborted)}", fg="yellow")


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, as_json: bool) -> None:
    """Show which features are installed and which were requested."""
    from railstarter.core.use_cases.status import get_status

    config = load_or_exit(ctx)
    result = get_status(config)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    click.secho(f"\n📋 {result.project_root}", fg="cyan", bold=True)
    if result.rails_version:
        click.echo(f"   Rails {result.rails_version}")
    click.echo(f"   CSS: {result.css_framework or 'none'}")
    click.echo()

    click.secho(
        f"   Features: {result.installed_count}/{len(result.features)} installed",
        fg="white",
        bold=True,
    )
    for feature in result.features:
        if feature.installed:
            click.secho(f"     ✓ {feature.key}", fg="green")
        elif feature.pending:
            click.secho(f"     … {feature.key} (requested)", fg="yellow")
        else:
            click.echo(f"     · {feature.key}")

    if result.recent:
        click.echo()
        click.secho("   Recent:", fg="white", bold=True)
        for entry in result.recent:
            click.echo(f"     {entry.timestamp[:19]} {entry.operation_type} {entry.feature} → {entry.status}")

    click.echo()


# ── Register sub-groups ─────────────────────────────────────────

from railstarter.ui.cli.feature import feature  # noqa: E402

cli.add_command(feature)


if __name__ == "__main__":
    cli()
