"""ConditionalHandler: routing marker for branch (diamond) nodes."""

from __future__ import annotations

from pathlib import Path

from pipegraph.model.context import Context
from pipegraph.model.graph import Graph, Node
from pipegraph.model.outcome import Outcome, Status


class ConditionalHandler:
    """Handler for conditional (diamond) nodes.

    Does no work of its own: the outgoing edges' conditions are evaluated
    by the edge selector against this SUCCESS outcome and the context.
    """

    def execute(self, node: Node, context: Context, graph: Graph, logs_root: Path) -> Outcome:
        return Outcome(
            status=Status.SUCCESS,
            notes=f"Conditional node evaluated: {node.id}",
        )
