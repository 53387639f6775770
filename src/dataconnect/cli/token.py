"""Token management commands."""

import click

from ..auth import TOKEN_ENV_VAR, clear_token, get_token, set_token
from ..errors import InvalidArgumentError
from . import cli


def _mask(token: str) -> str:
    """Show only the last four characters of a token."""
    return "*" * max(len(token) - 4, 0) + token[-4:]


@cli.group()
def token() -> None:
    """Manage the authentication token."""


@token.command("set")
@click.argument("value", envvar=TOKEN_ENV_VAR)
@click.option("-c", "--config", "config_path", default=None, help="Settings file path")
def set_cmd(value: str, config_path: str | None) -> None:
    """Persist VALUE as the token used by future sessions."""
    try:
        set_token(value, permanent=True, config_path=config_path)
    except InvalidArgumentError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"token {_mask(value)} saved")


@token.command("show")
@click.option("-c", "--config", "config_path", default=None, help="Settings file path")
def show_cmd(config_path: str | None) -> None:
    """Print the masked token that requests would use."""
    value = get_token(config_path)
    if not value:
        raise click.ClickException("no token configured")
    click.echo(_mask(value))


@token.command("clear")
@click.option("-c", "--config", "config_path", default=None, help="Settings file path")
def clear_cmd(config_path: str | None) -> None:
    """Remove the persisted token."""
    clear_token(permanent=True, config_path=config_path)
    click.echo("token cleared")
