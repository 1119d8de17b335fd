"""StartHandler: marks pipeline entry."""

from __future__ import annotations

from pathlib import Path

from pipegraph.model.context import Context
from pipegraph.model.graph import Graph, Node
from pipegraph.model.outcome import Outcome, Status


class StartHandler:
    """Handler for start (Mdiamond) nodes. Always SUCCESS, no side effects."""

    def execute(self, node: Node, context: Context, graph: Graph, logs_root: Path) -> Outcome:
        return Outcome(status=Status.SUCCESS, notes="Pipeline started")
