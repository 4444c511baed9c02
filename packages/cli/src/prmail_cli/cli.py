"""CLI entry point for prmail.

Commands:
  thread — build and print the archive thread of a pull request
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from prmail_cli.commands.thread import thread_cmd

console = Console()


@click.group()
@click.version_option(
    version=importlib.metadata.version("prmail"),
    prog_name="prmail",
)
@click.option(
    "--config",
    "config_path",
    default=".prmail.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRMAIL_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Thread pull request activity into a mailing-list archive."""
    from prmail_core.config import load_config
    from prmail_cli.auth import resolve_github_token

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    ctx.ensure_object(dict)

    config = load_config(config_path)

    token = resolve_github_token()
    if token:
        config["github_token"] = token

    ctx.obj["config"] = config


main.add_command(thread_cmd)
