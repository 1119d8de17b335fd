"""CLI command: pipegraph run -- execute a DOT pipeline."""

from __future__ import annotations

import click

from pipegraph.cli.common import (
    build_engine,
    configure_logging,
    fail,
    load_graph,
    logs_path,
    report,
)
from pipegraph.engine import PipelineError


@click.command()
@click.argument("dotfile", type=click.Path(exists=True, dir_okay=False))
@click.option("--logs-dir", default=None, help="Run directory (default: pipegraph-runs/<graph>-<timestamp>)")
@click.option("--goal", default=None, help="Override the pipeline goal")
@click.option(
    "--auto-approve/--interactive",
    default=True,
    help="Answer human gates automatically or prompt at the terminal",
)
@click.option("-v", "--verbose", is_flag=True, help="Log engine activity to stderr")
def run(
    dotfile: str,
    logs_dir: str | None,
    goal: str | None,
    auto_approve: bool,
    verbose: bool,
) -> None:
    """Execute a DOT pipeline file from its start node."""
    configure_logging(verbose)
    graph = load_graph(dotfile)
    if goal:
        graph.attributes["goal"] = goal

    click.echo(f"Running pipeline: {graph.name}")
    if graph.goal:
        click.echo(f"Goal: {graph.goal}")

    engine = build_engine(auto_approve)
    try:
        result = engine.run(graph, logs_path(logs_dir))
    except PipelineError as exc:
        fail(exc)
    report(result)
