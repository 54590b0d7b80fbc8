"""CLI entry point for upforgrabs.

Commands:
  validate  — check every project file in a listings repository
  comment   — build (and optionally post) the review comment for a pull request
"""

from __future__ import annotations

import importlib.metadata
import logging

import click

from upforgrabs_cli.commands.comment import comment_cmd
from upforgrabs_cli.commands.validate import validate_cmd


@click.group()
@click.version_option(
    version=importlib.metadata.version("upforgrabs-tooling"),
    prog_name="upforgrabs",
)
@click.option(
    "--config",
    "config_path",
    default=".upforgrabs.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="UPFORGRABS_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log each check to stderr.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Validate Up For Grabs project listings."""
    from upforgrabs_core.config import load_config

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    ctx.ensure_object(dict)
    ctx.obj["config"] = load_config(config_path)


main.add_command(validate_cmd)
main.add_command(comment_cmd)
