"""CLI: Typer app for inspecting and editing a Roadkill settings file."""

from __future__ import annotations

import logging
import sys
from typing import Optional

import typer
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from roadkill_config.application.startup import (
    mark_installed,
    reset_installed_state,
    resolve_startup,
)
from roadkill_config.config.loader import build_store, load_configuration, save_configuration
from roadkill_config.config.schema import (
    SECRET_KEYS,
    SETTING_KEYS,
    RoadkillSettings,
    parse_setting_value,
    resolve_setting,
)
from roadkill_config.domain.errors import RoadkillConfigError, UnknownSettingError
from roadkill_config.infrastructure.stores import JsonFileSettingsStore

app = typer.Typer(help="roadkill-config: inspect and edit Roadkill wiki settings.")

_CONFIG_HELP = "Settings file (default: $ROADKILL_CONFIG_PATH or ./roadkill.json)."


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose (DEBUG) logging to stderr."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _load(config_file: Optional[str], env_overlay: bool = True) -> RoadkillSettings:
    try:
        return load_configuration(build_store(config_file, env_overlay=env_overlay))
    except RoadkillConfigError as e:
        rprint(f"[red]{e}[/red]")
        sys.exit(1)


def _format(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _masked(key: str, value: object, reveal: bool) -> str:
    if key in SECRET_KEYS and value and not reveal:
        return "********"
    return _format(value)


@app.command()
def show(
    config_file: Optional[str] = typer.Option(None, "--config", "-c", help=_CONFIG_HELP),
    reveal: bool = typer.Option(False, "--reveal", help="Show secrets (passwords, keys, connection strings)."),
) -> None:
    """Show every setting with its effective value and where it came from."""
    config = _load(config_file)
    table = Table(title="Roadkill settings", show_header=True, header_style="bold")
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", overflow="fold")
    table.add_column("Source", style="dim")
    for key in SETTING_KEYS:
        source = config.source(key)
        style = "red" if source == "missing" else ""
        value = _masked(key, config.get(key), reveal)
        table.add_row(key, Text(value, style=style), source)
    Console().print(table)


@app.command()
def get(
    name: str = typer.Argument(..., help="Setting name, e.g. UseObjectCache or use_object_cache."),
    config_file: Optional[str] = typer.Option(None, "--config", "-c", help=_CONFIG_HELP),
) -> None:
    """Print the effective value of one setting."""
    config = _load(config_file)
    try:
        value = config.get(name)
    except UnknownSettingError as e:
        rprint(f"[red]{e}[/red]")
        sys.exit(1)
    typer.echo(_format(value))


@app.command("set")
def set_cmd(
    name: str = typer.Argument(..., help="Setting name."),
    value: str = typer.Argument(..., help="New value (true/false for boolean settings)."),
    config_file: Optional[str] = typer.Option(None, "--config", "-c", help=_CONFIG_HELP),
) -> None:
    """Change one setting and save the settings file."""
    try:
        key = resolve_setting(name)
        parsed = parse_setting_value(key, value)
    except UnknownSettingError as e:
        rprint(f"[red]{e}[/red]")
        sys.exit(1)
    except ValueError:
        rprint(f"[red]{name}: expected true or false, got {value!r}[/red]")
        sys.exit(1)
    # Environment overrides are not read here so they never end up in the file.
    store = build_store(config_file, env_overlay=False)
    config = _load(config_file, env_overlay=False)
    config.set(key, parsed)
    try:
        save_configuration(config, store)
    except RoadkillConfigError as e:
        rprint(f"[red]{e}[/red]")
        sys.exit(1)
    rprint(f"[green]{key}[/green] = {_masked(key, parsed, reveal=False)}")


@app.command()
def init(
    config_file: Optional[str] = typer.Option(None, "--config", "-c", help=_CONFIG_HELP),
    connection_string: str = typer.Option("", "--connection-string", help="Database connection string."),
    admin_role: str = typer.Option("Admin", "--admin-role", help="Administrator role name."),
    editor_role: str = typer.Option("Editor", "--editor-role", help="Editor role name."),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing settings file."),
) -> None:
    """Write a starter settings file (not installed, defaults filled in)."""
    store = build_store(config_file, env_overlay=False)
    if isinstance(store, JsonFileSettingsStore) and store.path.exists() and not force:
        rprint(f"[red]{store.path} already exists.[/red] Use --force to overwrite.")
        sys.exit(1)
    config = RoadkillSettings(
        admin_role_name=admin_role,
        editor_role_name=editor_role,
        api_keys="",
        connection_string=connection_string,
        installed=False,
        use_windows_authentication=False,
    ).apply_defaults()
    try:
        save_configuration(config, store)
    except RoadkillConfigError as e:
        rprint(f"[red]{e}[/red]")
        sys.exit(1)
    where = store.path if isinstance(store, JsonFileSettingsStore) else "store"
    rprint(f"[green]Wrote starter settings to {where}.[/green]")


@app.command()
def check(
    config_file: Optional[str] = typer.Option(None, "--config", "-c", help=_CONFIG_HELP),
) -> None:
    """Run the startup gate. Exits 1 when the site must go through setup."""
    config = _load(config_file)
    decision = resolve_startup(config)
    if decision.requires_setup:
        missing = ", ".join(decision.missing) or "-"
        rprint(
            Panel.fit(
                f"[bold]Mode:[/bold] [yellow]{decision.mode.value}[/yellow]\n"
                f"[bold]Reason:[/bold] {decision.reason}\n"
                f"[bold]Missing:[/bold] {missing}",
                title="[bold]Startup[/bold]",
            )
        )
        sys.exit(1)
    rest = "enabled" if config.rest_api_enabled else "disabled"
    rprint(
        Panel.fit(
            f"[bold]Mode:[/bold] [green]{decision.mode.value}[/green]\n"
            f"[bold]Database:[/bold] {config.get('DatabaseName')}\n"
            f"[bold]REST API:[/bold] {rest}",
            title="[bold]Startup[/bold]",
        )
    )


@app.command()
def install(
    config_file: Optional[str] = typer.Option(None, "--config", "-c", help=_CONFIG_HELP),
) -> None:
    """Mark the site as installed."""
    store = build_store(config_file, env_overlay=False)
    try:
        mark_installed(_load(config_file, env_overlay=False), store)
    except RoadkillConfigError as e:
        rprint(f"[red]{e}[/red]")
        sys.exit(1)
    rprint("[green]Installed = true[/green]")


@app.command()
def uninstall(
    config_file: Optional[str] = typer.Option(None, "--config", "-c", help=_CONFIG_HELP),
) -> None:
    """Reset the installed state so the site goes through setup again."""
    store = build_store(config_file, env_overlay=False)
    try:
        reset_installed_state(_load(config_file, env_overlay=False), store)
    except RoadkillConfigError as e:
        rprint(f"[red]{e}[/red]")
        sys.exit(1)
    rprint("[yellow]Installed = false[/yellow]")
