"""Status command."""

import click
from rich.console import Console
from rich.markup import escape

from ..cache import DiffState
from ..errors import JSyncError
from . import cli
from .common import config_option, data_dir_option, load_cli_config

_STATE_CHARS: dict[DiffState, tuple[str, str]] = {
    DiffState.ONLY_REMOTE: ("D", "red"),
    DiffState.TAG_MISMATCH: ("M", "yellow"),
    DiffState.MISSING_REMOTE: ("?", "magenta"),
    DiffState.MATCHING: (" ", "dim"),
}


@cli.command()
@data_dir_option
@config_option
@click.option("-a", "--all", "show_all", is_flag=True, help="Include matching (unchanged) files")
def status(data_dir: str | None, config_file: str | None, show_all: bool) -> None:
    """Show cache status relative to the remote store.

    Each resource is prefixed with a status letter:

    \b
      'D'  needs download (not on disk or no recorded ETag)
      'M'  modified (remote ETag differs from recorded one)
      '?'  missing (declared but not found remotely)

    Use `-a, --all` to see unmodified resources as well, which are
    printed using the following status letter:

    \b
      ' '  not modified (on disk, same ETag)
    """
    resolved_dir, config = load_cli_config(data_dir, config_file)
    cache = config.new_cache(data_dir=resolved_dir)

    console = Console()
    for group in config.resource_groups():
        try:
            entries = list(cache.status(group))
        except JSyncError as exc:
            raise click.ClickException(f"{group.name}: {exc}") from exc
        for entry in entries:
            if entry.state == DiffState.MATCHING and not show_all:
                continue
            char, color = _STATE_CHARS[entry.state]
            console.print(f"[{color}]{char}[/] {escape(group.name)}/{escape(entry.file_name)}")
