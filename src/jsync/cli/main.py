"""The main entry point."""

from . import cli


def main() -> None:
    cli(prog_name="jsync")
