"""pipegraph CLI entry point: Click group with subcommands."""

import click

from pipegraph import __version__


@click.group()
@click.version_option(version=__version__, prog_name="pipegraph")
def cli() -> None:
    """pipegraph - run multi-stage workflows described as DOT graphs."""


# Import and register subcommands
from pipegraph.cli.inspect import inspect  # noqa: E402
from pipegraph.cli.resume import resume  # noqa: E402
from pipegraph.cli.run import run  # noqa: E402

cli.add_command(run)
cli.add_command(resume)
cli.add_command(inspect)
