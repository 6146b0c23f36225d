"""
pantry — CLI entrypoint.

Usage:
    pantry --help
    eval "$(pantry shellenv --shell zsh)"
    pantry env
    pantry status

Session commands (``hook``, ``env``, ``deactivate``) print shell
statements on stdout for the calling shell to ``eval``; everything meant
for a human goes to stderr.
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from pantry import __version__
from pantry.adapters.shell.exports import SUPPORTED_SHELLS, hook_snippet, render_exports
from pantry.core.errors import ConfigError, ManifestNotFoundError
from pantry.core.observability.logging_config import resolve_level, setup_logging

_STATUS_STYLE: dict[str, tuple[str, str]] = {
    "cached": ("cached    ", "green"),
    "installed": ("installed ", "green"),
    "not_found": ("not found ", "yellow"),
    "no_version": ("no version", "yellow"),
    "download_error": ("failed    ", "yellow"),
    "bad_archive": ("failed    ", "yellow"),
    "extract_error": ("failed    ", "yellow"),
}

_shell_option = click.option(
    "--shell",
    type=click.Choice(SUPPORTED_SHELLS),
    default="bash",
    show_default=True,
    help="Shell dialect of the emitted statements.",
)
_json_option = click.option(
    "--json-output", "--json", "as_json", is_flag=True, help="Output as JSON."
)


@click.group()
@click.version_option(version=__version__, prog_name="pantry")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--settings",
    "settings_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to a settings file (default: $PANTRY_HOME/config.yml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    settings_path: str | None,
) -> None:
    """pantry — directory-scoped package activation."""
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["settings_path"] = Path(settings_path) if settings_path else None

    setup_logging(
        level=resolve_level(debug, verbose, quiet, os.environ.get("PANTRY_LOG_LEVEL")),
        log_file=os.environ.get("PANTRY_LOG_FILE"),
        log_file_level=os.environ.get("PANTRY_LOG_FILE_LEVEL"),
    )


# ── Helpers ─────────────────────────────────────────────────────


def _settings(ctx: click.Context):
    from pantry.core.config.settings import load_settings

    try:
        return load_settings(path=ctx.obj.get("settings_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)


def _activator(ctx: click.Context, environ: dict[str, str]):
    from pantry.core.activation.state_machine import Activator

    return Activator.from_settings(_settings(ctx), environ)


def _say(ctx: click.Context, message: str = "", **style) -> None:
    if not ctx.obj.get("quiet"):
        click.secho(message, err=True, **style)


def _result_printer(ctx: click.Context):
    def _print(result) -> None:
        label, color = _STATUS_STYLE[result.status.value]
        if result.ok:
            target = f"{result.name}@{result.version}"
        elif result.status.value in ("download_error", "bad_archive", "extract_error"):
            target = f"{result.name} ({result.status.value.replace('_', ' ')})"
        else:
            target = result.name
        click.echo("  " + click.style(label, fg=color) + f" {target}", err=True)

    return _print


def _emit_exports(before: dict[str, str], after: dict[str, str], shell: str) -> None:
    from pantry.core.persistence.session_env import env_changes

    script = render_exports(env_changes(before, after), shell)
    if script:
        click.echo(script)


def _print_summary(ctx: click.Context, report) -> None:
    _say(ctx)
    _say(ctx, f"{report.ok_count} packages activated", fg="green")
    if report.fail_count:
        _say(ctx, f"{report.fail_count} packages failed", fg="yellow")


# ── Session commands ────────────────────────────────────────────


@cli.command()
@_shell_option
@click.pass_context
def hook(ctx: click.Context, shell: str) -> None:
    """Process a directory change (called by the shell integration)."""
    from pantry.core.activation.state_machine import ActivationAction

    before = dict(os.environ)
    environ = dict(before)
    activator = _activator(ctx, environ)

    printer = _result_printer(ctx)
    announced = False

    def _on_result(result) -> None:
        nonlocal announced
        if not announced:
            _say(ctx, "📦 pantry ", fg="blue", nl=False)
            _say(ctx, f"Syncing packages from {_manifest_name()}...")
            announced = True
        printer(result)

    result = activator.on_directory_change(Path.cwd(), on_result=_on_result)
    if result.action is ActivationAction.ACTIVATED and result.report and result.report.fail_count:
        _say(ctx, f"{result.report.fail_count} packages failed", fg="yellow")

    _emit_exports(before, environ, shell)


@cli.command()
@_shell_option
@click.option(
    "--json-output", "--json", "as_json", is_flag=True,
    help="Print the install report as JSON instead of shell statements (session unchanged).",
)
@click.pass_context
def env(ctx: click.Context, shell: str, as_json: bool) -> None:
    """Download missing packages and activate them in PATH.

    With --json nothing is exported: the report is for inspection only.
    """
    from pantry.core.activation.path_composer import pantry_entries

    before = dict(os.environ)
    environ = dict(before)
    activator = _activator(ctx, environ)

    try:
        if as_json:
            result = activator.activate(Path.cwd(), always_install=True)
        else:
            manifest_name = _manifest_name()
            _say(ctx, "pantry env ", fg="blue", nl=False)
            _say(ctx, f"Setting up environment from {manifest_name}...")
            _say(ctx)
            result = activator.activate(
                Path.cwd(), always_install=True, on_result=_result_printer(ctx)
            )
    except ManifestNotFoundError as e:
        _fail(as_json, str(e))
        return

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    _print_summary(ctx, result.report)
    _say(ctx)
    _say(ctx, "PATH updated with:")
    for entry in pantry_entries(environ.get("PATH", ""), activator.cache.root):
        _say(ctx, f"  {entry}")

    _emit_exports(before, environ, shell)


@cli.command()
@_shell_option
@click.pass_context
def deactivate(ctx: click.Context, shell: str) -> None:
    """Remove pantry packages from PATH."""
    before = dict(os.environ)
    environ = dict(before)
    _activator(ctx, environ).deactivate()
    _say(ctx, "Pantry deactivated")
    _emit_exports(before, environ, shell)


# ── Install commands ────────────────────────────────────────────


def _install(ctx: click.Context, as_json: bool) -> None:
    from pantry.core.manifest.reader import read_manifest

    try:
        manifest = read_manifest(Path.cwd())
    except ManifestNotFoundError as e:
        _fail(as_json, str(e))
        return

    activator = _activator(ctx, dict(os.environ))
    if as_json:
        report = activator.installer.install(manifest)
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    _say(ctx, "📦 pantry ", fg="blue", nl=False)
    _say(ctx, f"Syncing packages from {manifest.filename}...")
    report = activator.installer.install(manifest, on_result=_result_printer(ctx))
    _print_summary(ctx, report)


@cli.command()
@_json_option
@click.pass_context
def install(ctx: click.Context, as_json: bool) -> None:
    """Download the packages of the current manifest."""
    _install(ctx, as_json)


@cli.command()
@_json_option
@click.pass_context
def sync(ctx: click.Context, as_json: bool) -> None:
    """Same as install."""
    _install(ctx, as_json)


# ── Read-only commands ──────────────────────────────────────────


@cli.command()
@_json_option
@click.pass_context
def status(ctx: click.Context, as_json: bool) -> None:
    """Show current pantry status."""
    from pantry.core.use_cases.status import get_status

    result = get_status(os.environ, _settings(ctx))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    if not result.active:
        click.echo("Pantry not active")
        return

    click.echo(f"Pantry active in: {result.directory}")
    click.echo(f"Config: {result.config_file}")
    click.echo("Packages in PATH:")
    for entry in result.path_entries:
        click.echo(f"  - {entry}")


@cli.command("list")
@_json_option
@click.pass_context
def list_cmd(ctx: click.Context, as_json: bool) -> None:
    """List installed packages."""
    from pantry.core.use_cases.status import list_packages

    packages = list_packages(_settings(ctx))

    if as_json:
        click.echo(json.dumps(packages, indent=2))
        return

    click.echo("Installed packages:")
    for name, versions in packages.items():
        click.echo(f"  - {name}: {', '.join(versions)}")


@cli.command()
@_shell_option
def shellenv(shell: str) -> None:
    """Print the shell integration snippet."""
    click.echo(hook_snippet(shell))


# ── Error paths ─────────────────────────────────────────────────


def _manifest_name() -> str:
    from pantry.core.manifest.reader import find_manifest

    path = find_manifest(Path.cwd())
    if path is None:
        raise ManifestNotFoundError(Path.cwd().resolve())
    return path.name


def _fail(as_json: bool, message: str) -> None:
    if as_json:
        click.echo(json.dumps({"error": message}, indent=2))
    else:
        click.secho(f"❌ {message}", fg="red", err=True)
    sys.exit(1)


if __name__ == "__main__":
    cli()
