"""Sync command."""

import click
from rich import get_console
from rich.panel import Panel

from ..scripting import jsync_exception, jsync_logging
from . import cli
from .common import config_option, data_dir_option, load_cli_config


@cli.command()
@data_dir_option
@config_option
@click.option(
    "-g",
    "--group",
    "group_names",
    multiple=True,
    metavar="GROUP",
    help="Only sync the given group (may be repeated; default: all groups)",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Verbose mode.")
def sync(
    data_dir: str | None,
    config_file: str | None,
    group_names: tuple[str, ...],
    verbose: bool,
) -> None:
    """Synchronize the configured groups with the remote store.

    Only resources whose remote ETag changed since the last sync are
    downloaded. Exits with 1 if any group failed to sync.
    """
    console = get_console()
    jsync_logging.configure(verbose=verbose)
    resolved_dir, config = load_cli_config(data_dir, config_file)

    groups = config.resource_groups()
    if group_names:
        known = {group.name for group in groups}
        unknown = [name for name in group_names if name not in known]
        if unknown:
            raise click.ClickException(f"Unknown group(s): {', '.join(unknown)}")
        groups = [group for group in groups if group.name in group_names]
    if not groups:
        click.echo("Nothing to sync.")
        return

    cache = config.new_cache(data_dir=resolved_dir)
    interceptor = jsync_exception.Interceptor()
    for group in groups:
        console.print(Panel(f"Sync {group.name} ({len(group)} resources)"))
        with interceptor:
            report = cache.sync(group)
            click.echo(
                f"{group.name}: fetched {len(report.fetched)}, "
                f"unchanged {len(report.unchanged)}, skipped {len(report.skipped)}."
            )

    raise SystemExit(interceptor.exitcode())
