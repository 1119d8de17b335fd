"""Tests for resuming a run from its checkpoint."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from pipegraph.config import EngineConfig
from pipegraph.engine.engine import Engine, HandlerRegistry
from pipegraph.engine.errors import CheckpointNotFoundError, UnknownNodeError
from pipegraph.engine.retry import BackoffConfig
from pipegraph.events import types as events
from pipegraph.events.bus import EventBus
from pipegraph.model.checkpoint import Checkpoint
from pipegraph.model.context import Context
from pipegraph.model.graph import Edge, Graph, Node
from pipegraph.model.outcome import Outcome, Status
from pipegraph.parser import parse_dot

FAST = EngineConfig(backoff=BackoffConfig(initial_delay_ms=0, jitter=False))

CHAIN = """
digraph ResumeTest {
    start [shape=Mdiamond]
    exit  [shape=Msquare]
    task1 [label="Task 1"]
    task2 [label="Task 2"]
    task3 [label="Task 3"]

    start -> task1 -> task2 -> task3 -> exit
}
"""


class RecordingHandler:
    """Succeeds on every node, recording calls and the context it was given."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.seen: dict[str, dict] = {}

    def execute(self, node: Node, context: Context, graph: Graph, logs_root: Path) -> Outcome:
        self.calls.append(node.id)
        self.seen[node.id] = context.snapshot()
        return Outcome(status=Status.SUCCESS, context_updates={f"{node.id}.done": True})


def _engine(handler, bus: EventBus | None = None) -> Engine:
    reg = HandlerRegistry()
    reg.set_default(handler)
    return Engine(reg, event_bus=bus, config=FAST)


def _write_checkpoint(logs_root: Path, **kwargs) -> None:
    Checkpoint.create_now(**kwargs).save(logs_root / "checkpoint.json")


class TestResume:
    def test_resume_after_task1(self, tmp_path: Path):
        graph = parse_dot(CHAIN)
        _write_checkpoint(
            tmp_path,
            current_node="task1",
            completed_nodes=["start", "task1"],
            context_values={"graph.goal": "", "outcome": "success"},
            logs=["start: success", "task1: success"],
        )
        handler = RecordingHandler()
        result = _engine(handler).resume(graph, tmp_path)

        assert result.status == "completed"
        assert result.resumed is True
        assert handler.calls == ["task2", "task3"]
        assert result.completed_nodes == ["start", "task1", "task2", "task3"]

    def test_context_and_logs_rehydrated(self, tmp_path: Path):
        graph = parse_dot(CHAIN)
        _write_checkpoint(
            tmp_path,
            current_node="task1",
            completed_nodes=["start", "task1"],
            context_values={"outcome": "success", "carried": "yes"},
            logs=["earlier"],
        )
        handler = RecordingHandler()
        _engine(handler).resume(graph, tmp_path)
        assert handler.seen["task2"]["carried"] == "yes"
        cp = Checkpoint.load(tmp_path / "checkpoint.json")
        assert cp.logs[0] == "earlier"
        assert cp.current_node == "task3"

    def test_checkpoint_at_last_stage_finishes_immediately(self, tmp_path: Path):
        graph = parse_dot(CHAIN)
        _write_checkpoint(
            tmp_path,
            current_node="task3",
            completed_nodes=["start", "task1", "task2", "task3"],
            context_values={"outcome": "success"},
        )
        handler = RecordingHandler()
        result = _engine(handler).resume(graph, tmp_path)
        assert handler.calls == []
        assert result.completed_nodes == ["start", "task1", "task2", "task3"]
        assert (tmp_path / "manifest.json").exists()

    def test_recorded_outcome_drives_routing(self, tmp_path: Path):
        graph = parse_dot(
            """
            digraph Branch {
                start [shape=Mdiamond]
                check
                good
                bad
                exit [shape=Msquare]
                start -> check
                check -> good [condition="outcome=success"]
                check -> bad  [condition="outcome=fail"]
                good -> exit
                bad -> exit
            }
            """
        )
        _write_checkpoint(
            tmp_path,
            current_node="check",
            completed_nodes=["start", "check"],
            context_values={"outcome": "success"},
            node_outcomes={"check": Outcome(status=Status.FAIL)},
        )
        handler = RecordingHandler()
        _engine(handler).resume(graph, tmp_path)
        assert handler.calls == ["bad"]

    def test_legacy_checkpoint_routes_from_context_keys(self, tmp_path: Path):
        graph = parse_dot(
            """
            digraph Labels {
                start [shape=Mdiamond]
                ask
                yes_path
                no_path
                exit [shape=Msquare]
                start -> ask
                ask -> yes_path [label="Yes"]
                ask -> no_path  [label="No"]
                yes_path -> exit
                no_path -> exit
            }
            """
        )
        (tmp_path / "checkpoint.json").write_text(
            json.dumps(
                {
                    "timestamp": "2024-01-01T00:00:00+00:00",
                    "current_node": "ask",
                    "completed_nodes": ["start", "ask"],
                    "node_retries": {},
                    "context_values": {"outcome": "success", "preferred_label": "yes"},
                    "logs": [],
                }
            )
        )
        handler = RecordingHandler()
        _engine(handler).resume(graph, tmp_path)
        assert handler.calls == ["yes_path"]

    def test_goal_gate_state_survives_resume(self, tmp_path: Path):
        graph = Graph(name="gated")
        for node in (
            Node(id="start", shape="Mdiamond"),
            Node(id="gate", goal_gate=True, retry_target="gate"),
            Node(id="after"),
            Node(id="exit", shape="Msquare"),
        ):
            graph.add_node(node)
        for a, b in (("start", "gate"), ("gate", "after"), ("after", "exit")):
            graph.add_edge(Edge(from_node=a, to_node=b))

        _write_checkpoint(
            tmp_path,
            current_node="gate",
            completed_nodes=["start", "gate"],
            context_values={"outcome": "skipped"},
            node_outcomes={
                "start": Outcome(status=Status.SUCCESS),
                "gate": Outcome(status=Status.SKIPPED),
            },
        )
        handler = RecordingHandler()
        result = _engine(handler).resume(graph, tmp_path)
        assert handler.calls == ["after", "gate", "after"]
        assert result.node_outcomes["gate"].status is Status.SUCCESS

    def test_missing_checkpoint(self, tmp_path: Path):
        with pytest.raises(CheckpointNotFoundError) as exc_info:
            _engine(RecordingHandler()).resume(parse_dot(CHAIN), tmp_path)
        assert exc_info.value.path.endswith("checkpoint.json")

    def test_checkpointed_node_not_in_graph(self, tmp_path: Path):
        _write_checkpoint(tmp_path, current_node="vanished", completed_nodes=["vanished"])
        with pytest.raises(UnknownNodeError):
            _engine(RecordingHandler()).resume(parse_dot(CHAIN), tmp_path)

    def test_resumed_flag_on_started_event(self, tmp_path: Path):
        _write_checkpoint(tmp_path, current_node="task3", context_values={"outcome": "success"})
        bus = EventBus()
        started: list = []
        bus.subscribe(events.PipelineStarted, started.append)
        _engine(RecordingHandler(), bus).resume(parse_dot(CHAIN), tmp_path)
        assert started[0].resumed is True

    def test_run_then_resume_round_trip(self, tmp_path: Path):
        """A run interrupted by a fatal error can be resumed after the fix."""
        graph = parse_dot(CHAIN)

        class BreaksOnTask2(RecordingHandler):
            def execute(self, node, context, graph, logs_root):
                if node.id == "task2":
                    raise KeyboardInterrupt
                return super().execute(node, context, graph, logs_root)

        with pytest.raises(KeyboardInterrupt):
            _engine(BreaksOnTask2()).run(graph, tmp_path)

        handler = RecordingHandler()
        result = _engine(handler).resume(graph, tmp_path)
        assert handler.calls == ["task2", "task3"]
        assert result.completed_nodes == ["start", "task1", "task2", "task3"]
