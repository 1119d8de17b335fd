"""ParallelHandler: opens a fan-out region."""

from __future__ import annotations

from pathlib import Path

from pipegraph.model.context import Context
from pipegraph.model.graph import Graph, Node
from pipegraph.model.outcome import Outcome, Status


class ParallelHandler:
    """Handler for parallel (component) nodes.

    Records the fan-out in context (``parallel.active``, ``parallel.source``,
    ``parallel.branch_count``). Branches are not run here; the engine
    still follows a single selected edge.
    """

    def execute(self, node: Node, context: Context, graph: Graph, logs_root: Path) -> Outcome:
        branches = graph.outgoing_edges(node.id)
        if not branches:
            return Outcome(status=Status.FAIL, failure_reason="No branches to execute")

        return Outcome(
            status=Status.SUCCESS,
            context_updates={
                "parallel.active": True,
                "parallel.source": node.id,
                "parallel.branch_count": len(branches),
            },
            notes=f"Fan-out to {len(branches)} branches",
        )
