"""Handler protocol shared by the engine and every node handler."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from pipegraph.model.context import Context
from pipegraph.model.graph import Graph, Node
from pipegraph.model.outcome import Outcome


class Handler(Protocol):
    """Protocol for node handlers: must implement execute().

    Handlers may read and must not retain *context* beyond the call; their
    mutations travel back as ``Outcome.context_updates``. Per-stage artifacts
    go under ``logs_root / node.id``.
    """

    def execute(self, node: Node, context: Context, graph: Graph, logs_root: Path) -> Outcome: ...
