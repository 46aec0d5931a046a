"""
Command-line interface to synchronize and inspect a jsync data directory.

Each subcommand lives in its own module and registers itself on `cli`.
"""

from importlib.metadata import version

import click

_PACKAGE_NAME = "jsync"


def _get_version() -> str:
    """Return the installed package version string."""
    return version(_PACKAGE_NAME)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(message="%(version)s", package_name=_PACKAGE_NAME)
def cli() -> None:
    """Keep a local copy of remote JSON resources up to date."""


@cli.command(hidden=True)
def help() -> None:
    """Point to the --help options."""
    click.echo('Use "jsync --help" for usage information.')
    click.echo('Use "jsync <command> --help" for help on a specific command.')


@cli.command("version")
def version_cmd() -> None:
    """Print the version number."""
    click.echo(_get_version())


# Subcommand modules import `cli`, so they come last
from . import get as _get  # noqa: E402, F401
from . import status as _status  # noqa: E402, F401
from . import sync as _sync  # noqa: E402, F401
