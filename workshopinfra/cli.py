"""Click CLI definitions - main entry point."""

from __future__ import annotations

import logging
import sys

import click

from workshopinfra.commands.catalog_cmd import (
    factory_group,
    repo_group,
    workbench_group,
    workshop_group,
)
from workshopinfra.commands.config_cmd import config_group
from workshopinfra.commands.infra_cmd import infra_group


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, debug: bool) -> None:
    """workshopinfra - reconcile workshop directories, worktrees and tmux sessions."""
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


cli.add_command(infra_group, "infra")
cli.add_command(factory_group, "factory")
cli.add_command(workshop_group, "workshop")
cli.add_command(workbench_group, "workbench")
cli.add_command(repo_group, "repo")
cli.add_command(config_group, "config")


if __name__ == "__main__":
    cli()
