"""Event types emitted during pipeline execution."""

from __future__ import annotations

from dataclasses import dataclass

from pipegraph.model.outcome import Outcome


@dataclass(frozen=True)
class PipelineStarted:
    graph_name: str
    logs_root: str
    resumed: bool = False


@dataclass(frozen=True)
class PipelineCompleted:
    graph_name: str
    completed_nodes: tuple[str, ...]


@dataclass(frozen=True)
class PipelineFailed:
    graph_name: str
    error: str
    node_id: str | None = None


@dataclass(frozen=True)
class StageStarted:
    node_id: str


@dataclass(frozen=True)
class StageCompleted:
    node_id: str
    outcome: Outcome


@dataclass(frozen=True)
class StageFailed:
    node_id: str
    error: str


@dataclass(frozen=True)
class StageRetrying:
    node_id: str
    attempt: int
    delay: float
    reason: str = ""


@dataclass(frozen=True)
class CheckpointSaved:
    node_id: str
    path: str


@dataclass(frozen=True)
class GoalGateRetry:
    node_id: str
    retry_target: str
