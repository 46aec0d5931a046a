"""Helpers shared by the subcommands."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from ..cache import data_dir_or_default
from ..config import JSyncConfig, config_path_for_data_dir, load_config
from ..errors import ConfigError


def data_dir_option(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add the -d/--dir option."""
    return click.option(
        "-d",
        "--dir",
        "data_dir",
        default=None,
        help="Data directory (default: .jsync)",
    )(func)


def config_option(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add the --config option."""
    return click.option(
        "--config",
        "config_file",
        default=None,
        metavar="FILE",
        help="Path to YAML config file (default: <dir>/jsync.yaml)",
    )(func)


def load_cli_config(data_dir: str | None, config_file: str | None) -> tuple[Path, JSyncConfig]:
    """Resolve the data directory and load the config, or fail with a ClickException."""
    resolved_dir = data_dir_or_default(data_dir)
    config_path = Path(config_file) if config_file else config_path_for_data_dir(resolved_dir)
    try:
        return resolved_dir, load_config(config_path)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
