"""
CLI commands for individual features.

Thin wrappers over ``railstarter.core.use_cases.apply`` and the
installer catalog.
"""

from __future__ import annotations

import json
import sys

import click


def _load_config(ctx: click.Context):
    """Resolve the config from the CLI context, or exit 1."""
    from railstarter.core.config.loader import ConfigError, load_config

    try:
        return load_config(
            project_root=ctx.obj.get("project_root"),
            config_path=ctx.obj.get("config_path"),
        )
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)


@click.group("feature")
def feature() -> None:
    """Features — list, check and apply to an existing app."""


# ── List ────────────────────────────────────────────────────────


@feature.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def list_features(as_json: bool) -> None:
    """List every feature in install order."""
    from railstarter.core.services.installers import INSTALL_ORDER

    if as_json:
        data = [
            {"key": cls.key, "title": cls.title, "trigger": cls.trigger}
            for cls in INSTALL_ORDER
        ]
        click.echo(json.dumps(data, indent=2))
        return

    click.secho("🧩 Features:", fg="cyan", bold=True)
    for cls in INSTALL_ORDER:
        click.echo(f"   {cls.key:<28} {cls.title}")


# ── Check ───────────────────────────────────────────────────────


@feature.command("check")
@click.argument("name")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def check(ctx: click.Context, name: str, as_json: bool) -> None:
    """Report whether feature NAME is installed. Exit 1 if not."""
    from pathlib import Path

    from railstarter.core.services import markers
    from railstarter.core.services.installers import INSTALLERS, get_installer

    installer_cls = get_installer(name)
    if installer_cls is None:
        click.secho(f"❌ Unknown feature '{name}'. Available: {', '.join(INSTALLERS)}", fg="red")
        sys.exit(1)

    config = _load_config(ctx)
    installed = markers.is_installed(installer_cls.marker, Path(config.project_root))

    if as_json:
        click.echo(json.dumps({"feature": name, "installed": installed}, indent=2))
    elif installed:
        click.secho(f"✅ {installer_cls.title} is installed", fg="green")
    else:
        click.secho(f"⊘ {installer_cls.title} is not installed", fg="yellow")

    sys.exit(0 if installed else 1)


# ── Apply ───────────────────────────────────────────────────────


@feature.command("apply")
@click.argument("name")
@click.option("--dry-run", is_flag=True, help="Show what would happen without doing it.")
@click.option("--mock", is_flag=True, help="Mock shell and git; file edits still happen.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def apply(ctx: click.Context, name: str, dry_run: bool, mock: bool, as_json: bool) -> None:
    """Install feature NAME into the current Rails app."""
    from railstarter.core.engine.toolkit import mock_registry
    from railstarter.core.use_cases.apply import apply_feature

    config = _load_config(ctx)
    result = apply_feature(
        name,
        config,
        registry=mock_registry() if mock else None,
        dry_run=dry_run,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    outcome = result.result
    assert outcome is not None  # guaranteed after error check above

    if outcome.installed:
        click.secho(f"✅ {name} installed", fg="green", bold=True)
    elif outcome.skipped:
        click.secho(f"⏭️  {name} skipped: {outcome.reason}", fg="yellow")
    else:
        click.secho(f"❌ {name} aborted: {outcome.reason}", fg="red")

    if not ctx.obj.get("quiet", False):
        for notice in outcome.notices:
            click.echo(f"   • {notice}")

    if outcome.aborted:
        sys.exit(1)
