"""Secrets provisioning commands for appauth CLI.

Commands:
    secrets add - Add KEY=VALUE secrets to a Doppler project config

Example:
    appauth secrets add -k "$DOPPLER_TOKEN" -p my-app -c dev \\
        -s APP_FIGMA_CLIENT_ID=abc -s APP_FIGMA_CLIENT_SECRET=xyz
"""

from __future__ import annotations

__all__ = ["secrets"]

import json
import sys

import click

from appauth.exceptions import SecretsProvisioningError
from appauth.provisioning.doppler import DopplerClient

from ..styling import style_dim, style_error, style_label, style_success


def _parse_secret_pairs(
    ctx: click.Context,
    param: click.Parameter,
    value: tuple[str, ...],
) -> dict[str, str]:
    """Collect repeated KEY=VALUE options into a dict (later keys win)."""
    parsed: dict[str, str] = {}
    for pair in value:
        key, sep, secret_value = pair.partition("=")
        key = key.strip()
        secret_value = secret_value.strip()
        if not sep or not key or not secret_value:
            raise click.BadParameter(f"{pair.split('=', 1)[0]!r}: secrets must be in the format KEY=VALUE")
        parsed[key] = secret_value
    return parsed


@click.group()
def secrets() -> None:
    """Secret store provisioning commands."""
    pass


@secrets.command("add")
@click.option(
    "--api-key",
    "-k",
    required=True,
    envvar="DOPPLER_TOKEN",
    help="Doppler API key (or DOPPLER_TOKEN)",
)
@click.option("--project", "-p", required=True, help="Doppler project name")
@click.option("--config", "-c", "config_name", required=True, help="Doppler config name")
@click.option(
    "--secret",
    "-s",
    "secret_pairs",
    multiple=True,
    required=True,
    callback=_parse_secret_pairs,
    help="Secret as KEY=VALUE (repeatable)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show more detailed output")
def add(
    api_key: str,
    project: str,
    config_name: str,
    secret_pairs: dict[str, str],
    verbose: bool,
) -> None:
    """Add secrets to a Doppler project config."""
    if verbose:
        click.echo(style_label("Project") + f" {project}")
        click.echo(style_label("Config") + f" {config_name}")
        click.echo(style_label("Secrets") + f" {', '.join(secret_pairs)}")
    else:
        click.echo(f"Adding {len(secret_pairs)} secret(s) to {project}/{config_name}...")

    try:
        data = DopplerClient(api_key).add_secrets(project, config_name, secret_pairs)
    except SecretsProvisioningError as e:
        click.echo(style_error(f"Error adding secrets to Doppler: {e}"), err=True)
        for message in e.messages:
            click.echo(f"  - {message}", err=True)
        sys.exit(1)

    click.echo(style_success("Secrets successfully added to Doppler"))

    if verbose and data:
        click.echo(style_dim(json.dumps(data, indent=2)))
