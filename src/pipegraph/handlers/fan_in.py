"""FanInHandler: closes a fan-out region."""

from __future__ import annotations

from pathlib import Path

from pipegraph.model.context import Context
from pipegraph.model.graph import Graph, Node
from pipegraph.model.outcome import Outcome, Status


class FanInHandler:
    """Handler for parallel.fan_in (tripleoctagon) nodes.

    Clears the bookkeeping keys set by the fan-out node. Without an active
    parallel region this is a pass-through.
    """

    def execute(self, node: Node, context: Context, graph: Graph, logs_root: Path) -> Outcome:
        if not context.get("parallel.active"):
            return Outcome(status=Status.SUCCESS, notes="No active parallel region")

        source = context.get_string("parallel.source")
        return Outcome(
            status=Status.SUCCESS,
            context_updates={
                "parallel.active": False,
                "parallel.source": "",
                "parallel.branch_count": 0,
            },
            notes=f"Fan-in complete for {source}",
        )
