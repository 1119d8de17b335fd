"""CLI command: pipegraph inspect -- display graph structure."""

from __future__ import annotations

import click

from pipegraph.cli.common import load_graph
from pipegraph.engine import HandlerRegistry


@click.command()
@click.argument("dotfile", type=click.Path(exists=True, dir_okay=False))
def inspect(dotfile: str) -> None:
    """Parse a DOT file and display its graph structure.

    Shows graph attributes, nodes (with the handler type they resolve to),
    and edges (with conditions and weights).
    """
    graph = load_graph(dotfile)

    click.echo(f"Graph: {graph.name}")
    if graph.goal:
        click.echo(f"Goal:  {graph.goal}")
    for key, value in graph.attributes.items():
        if key != "goal":
            click.echo(f"  {key}={value!r}")
    start = graph.start_node()
    click.echo(f"Start: {start.id if start else '(none)'}")
    exit_node = graph.exit_node()
    click.echo(f"Exit:  {exit_node.id if exit_node else '(none)'}")
    click.echo(f"Nodes: {len(graph.nodes)}")
    click.echo(f"Edges: {len(graph.edges)}")
    click.echo()

    click.echo("Nodes:")
    for node in graph.nodes.values():
        handler_type = node.type or HandlerRegistry.SHAPE_TO_TYPE.get(node.shape, "codergen")
        parts = [f"  {node.id}", f"shape={node.shape}", f"handler={handler_type}"]
        if node.label and node.label != node.id:
            parts.append(f'label="{node.label}"')
        if node.max_retries:
            parts.append(f"max_retries={node.max_retries}")
        if node.goal_gate:
            parts.append("goal_gate")
        click.echo("  ".join(parts))
    click.echo()

    click.echo("Edges:")
    for edge in graph.edges:
        parts = [f"  {edge.from_node} -> {edge.to_node}"]
        if edge.label:
            parts.append(f'label="{edge.label}"')
        if edge.condition:
            parts.append(f"condition={edge.condition}")
        if edge.weight:
            parts.append(f"weight={edge.weight}")
        click.echo("  ".join(parts))
