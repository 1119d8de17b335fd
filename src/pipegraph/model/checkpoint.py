"""Checkpoint model: serialisable run state for resume support."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pipegraph.model.outcome import Outcome


@dataclass
class Checkpoint:
    """Snapshot of run state taken after a stage completes.

    ``current_node`` always names a node whose execution has finished and
    been recorded. The node to continue with is derived on resume by
    re-running edge selection, never stored.
    """

    timestamp: str
    current_node: str
    completed_nodes: list[str] = field(default_factory=list)
    node_retries: dict[str, int] = field(default_factory=dict)
    context_values: dict[str, Any] = field(default_factory=dict)
    logs: list[str] = field(default_factory=list)
    node_outcomes: dict[str, Outcome] = field(default_factory=dict)

    # --- persistence ----------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "current_node": self.current_node,
            "completed_nodes": list(self.completed_nodes),
            "node_retries": dict(self.node_retries),
            "context_values": dict(self.context_values),
            "logs": list(self.logs),
            "node_outcomes": {nid: o.to_dict() for nid, o in self.node_outcomes.items()},
        }

    def save(self, path: Path) -> None:
        """Serialise to JSON and overwrite *path*.

        The record is written to a sibling temp file first and renamed over
        the target so a crash mid-write never leaves a truncated checkpoint.
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_text(json.dumps(self.to_dict(), indent=2, default=str), encoding="utf-8")
        tmp.replace(path)

    @classmethod
    def load(cls, path: Path) -> Checkpoint:
        """Deserialise a checkpoint from a JSON file at *path*."""
        data = json.loads(path.read_text(encoding="utf-8"))
        return cls(
            timestamp=data["timestamp"],
            current_node=data["current_node"],
            completed_nodes=data.get("completed_nodes", []),
            node_retries=data.get("node_retries", {}),
            context_values=data.get("context_values", {}),
            logs=data.get("logs", []),
            node_outcomes={
                nid: Outcome.from_dict(raw)
                for nid, raw in data.get("node_outcomes", {}).items()
            },
        )

    # --- factory --------------------------------------------------------------

    @classmethod
    def create_now(
        cls,
        current_node: str,
        completed_nodes: list[str] | None = None,
        node_retries: dict[str, int] | None = None,
        context_values: dict[str, Any] | None = None,
        logs: list[str] | None = None,
        node_outcomes: dict[str, Outcome] | None = None,
    ) -> Checkpoint:
        """Create a checkpoint stamped with the current UTC time."""
        return cls(
            timestamp=datetime.now(timezone.utc).isoformat(),
            current_node=current_node,
            completed_nodes=list(completed_nodes or []),
            node_retries=dict(node_retries or {}),
            context_values=dict(context_values or {}),
            logs=list(logs or []),
            node_outcomes=dict(node_outcomes or {}),
        )
