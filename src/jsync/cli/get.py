"""Get command."""

import json

import click

from ..errors import JSyncError, NotCachedError, SyncError
from ..scripting import jsync_logging
from . import cli
from .common import config_option, data_dir_option, load_cli_config


@cli.command()
@click.argument("name")
@data_dir_option
@config_option
@click.option("--pretty", is_flag=True, help="Pretty-print the JSON document")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Verbose mode.")
def get(
    name: str,
    data_dir: str | None,
    config_file: str | None,
    pretty: bool,
    verbose: bool,
) -> None:
    """Sync the group declaring NAME and print the cached resource.

    NAME is the resource file name (e.g., `airports.json`).
    """
    jsync_logging.configure(verbose=verbose, quiet=not verbose)
    resolved_dir, config = load_cli_config(data_dir, config_file)

    groups = [group for group in config.resource_groups() if name in group]
    if not groups:
        raise click.ClickException(f"No group declares {name}")

    cache = config.new_cache(data_dir=resolved_dir)
    try:
        cache.sync(groups[0])
    except SyncError as exc:
        # Failures of other resources in the group do not concern us.
        if name in exc.failures:
            raise click.ClickException(f"cannot sync {name}: {exc.failures[name]}") from exc
    except JSyncError as exc:
        raise click.ClickException(str(exc)) from exc

    try:
        if pretty:
            click.echo(json.dumps(cache.get_json(name), indent=2, sort_keys=True))
            return
        click.echo(cache.get_raw(name), nl=False)
    except NotCachedError as exc:
        raise click.ClickException(f"{name} is not available remotely") from exc
    except JSyncError as exc:
        raise click.ClickException(str(exc)) from exc
