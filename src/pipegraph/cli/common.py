"""Helpers shared by the run and resume commands."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import NoReturn

import click

from pipegraph.engine import Engine, PipelineError, RunResult
from pipegraph.events import EventBus, log_events
from pipegraph.handlers import create_default_registry
from pipegraph.interviewer import AutoApproveInterviewer, ConsoleInterviewer
from pipegraph.model.graph import Graph
from pipegraph.parser import ParseError, parse_dot_file


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def load_graph(dotfile: str) -> Graph:
    """Parse *dotfile*; parse errors end the command with exit code 1."""
    try:
        return parse_dot_file(dotfile)
    except ParseError as exc:
        click.echo(f"Parse error: {exc}", err=True)
        sys.exit(1)


def build_engine(auto_approve: bool) -> Engine:
    interviewer = AutoApproveInterviewer() if auto_approve else ConsoleInterviewer()
    registry = create_default_registry(interviewer=interviewer)
    bus = EventBus()
    log_events(bus)
    return Engine(registry, event_bus=bus)


def report(result: RunResult) -> None:
    click.echo()
    click.echo(f"Status: {result.status}" + (" (resumed)" if result.resumed else ""))
    click.echo(f"\nCompleted nodes ({len(result.completed_nodes)}):")
    for nid in result.completed_nodes:
        outcome = result.node_outcomes.get(nid)
        status = outcome.status.value if outcome else "?"
        click.echo(f"  - {nid} [{status}]")
    click.echo(f"\nRun directory: {result.logs_root}")


def fail(exc: PipelineError) -> NoReturn:
    click.echo(f"Pipeline failed: {exc}", err=True)
    sys.exit(1)


def logs_path(value: str | None) -> Path | None:
    return Path(value) if value else None
