"""Main CLI entry point for appauth.

Defines the CLI group and registers all subcommands.

Commands:
    secrets - Secret store provisioning (add)

Subcommand help:
    appauth COMMAND -h         Show help for a specific command
"""

from __future__ import annotations

__all__ = ["cli"]

import sys
from pathlib import Path

import click

from appauth import __version__
from appauth.telemetry.system.system_logger import configure_system_logger_file

from .commands.secrets import secrets


@click.group(
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("--version", is_flag=True, help="Show version")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write warnings and errors as JSONL to this file",
)
@click.pass_context
def cli(ctx: click.Context, version: bool, log_file: Path | None) -> None:
    """appauth: OAuth app authorization and secrets tooling."""
    if version:
        click.echo(f"appauth {__version__}")
        sys.exit(0)
    if log_file is not None:
        try:
            configure_system_logger_file(log_file)
        except OSError as e:
            raise click.ClickException(f"Cannot open log file {log_file}: {e}") from e
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# Register commands
cli.add_command(secrets)


def main() -> None:
    """CLI entry point."""
    cli()
