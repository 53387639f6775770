"""DataConnect command-line interface."""

from importlib.metadata import version

import click

from .logger import configure_logging

_PACKAGE_NAME = "dataconnect"


def _get_version() -> str:
    """Return the installed package version string."""
    return version(_PACKAGE_NAME)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(message="%(version)s", package_name=_PACKAGE_NAME)
@click.option("-v", "--verbose", is_flag=True, help="Run in verbose mode")
@click.option("-q", "--quiet", is_flag=True, help="Only log warnings and errors")
def cli(verbose: bool, quiet: bool) -> None:
    """DataConnect command-line tool."""
    configure_logging(verbose, quiet=quiet)


@cli.command(hidden=True)
def help() -> None:
    """Show usage information."""
    click.echo('Use "dataconnect --help" for usage information.')
    click.echo('Use "dataconnect <command> --help" for help on a specific command.')


@cli.command("version")
def version_cmd() -> None:
    """Print the version number."""
    click.echo(_get_version())


# Register subcommands (must be after cli is defined)
from . import config_show as _config_show  # noqa: E402, F401
from . import token as _token  # noqa: E402, F401
