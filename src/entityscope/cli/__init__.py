"""entityscope CLI - Command line interface for entity discovery."""

from __future__ import annotations

from entityscope.cli.commands import cli, load_adapter
from entityscope.cli.output import configure_logging


def main() -> None:
    """Main entry point for the entityscope CLI."""
    cli()


__all__ = ["main", "cli", "configure_logging", "load_adapter"]
