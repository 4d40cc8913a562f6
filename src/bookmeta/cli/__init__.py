# ABOUTME: CLI package for bookmeta, built on Click.
# ABOUTME: Defines the root command group and registers subcommands.

import logging

import click

from bookmeta.cli.commands import inspect_cmd, inventory_cmd, mobi_cmd


@click.group()
@click.version_option(package_name="bookmeta")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """bookmeta - read metadata from EPUB, MOBI, PDF and comic files."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


cli.add_command(inspect_cmd.inspect)
cli.add_command(mobi_cmd.mobi)
cli.add_command(inventory_cmd.inventory)
