"""Settings inspection command."""

import dataclasses

import click
from rich.console import Console
from rich.table import Table

from ..settings import load_settings, settings_path
from . import cli


@cli.command("config")
@click.option("-c", "--config", "config_path", default=None, help="Settings file path")
def config_show(config_path: str | None) -> None:
    """Show the effective settings (the token is never printed)."""
    resolved = settings_path(config_path)
    try:
        settings = load_settings(resolved)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc

    table = Table(title=str(resolved))
    table.add_column("name")
    table.add_column("value")
    for name, value in dataclasses.asdict(settings).items():
        if name == "token":
            value = "(set)" if value else "(unset)"
        table.add_row(name, str(value))

    Console().print(table)
