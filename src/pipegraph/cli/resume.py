"""CLI command: pipegraph resume -- continue a run from its checkpoint."""

from __future__ import annotations

from pathlib import Path

import click

from pipegraph.cli.common import build_engine, configure_logging, fail, load_graph, report
from pipegraph.engine import PipelineError


@click.command()
@click.argument("dotfile", type=click.Path(exists=True, dir_okay=False))
@click.argument("logs_dir", type=click.Path(exists=True, file_okay=False))
@click.option(
    "--auto-approve/--interactive",
    default=True,
    help="Answer human gates automatically or prompt at the terminal",
)
@click.option("-v", "--verbose", is_flag=True, help="Log engine activity to stderr")
def resume(dotfile: str, logs_dir: str, auto_approve: bool, verbose: bool) -> None:
    """Resume the run in LOGS_DIR after its last checkpointed stage."""
    configure_logging(verbose)
    graph = load_graph(dotfile)

    click.echo(f"Resuming pipeline: {graph.name}")
    engine = build_engine(auto_approve)
    try:
        result = engine.resume(graph, Path(logs_dir))
    except PipelineError as exc:
        fail(exc)
    report(result)
