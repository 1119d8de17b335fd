"""Execution engine core: traverses the pipeline graph and runs node handlers."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, NoReturn

from pipegraph.config import EngineConfig
from pipegraph.engine.edge_selector import select_edge
from pipegraph.engine.errors import (
    CheckpointNotFoundError,
    DeadEndError,
    GoalGateError,
    HandlerNotFoundError,
    PipelineError,
    StartNodeNotFoundError,
    UnknownNodeError,
)
from pipegraph.engine.retry import BackoffConfig, build_retry_policy, execute_with_retry
from pipegraph.events import types as events
from pipegraph.events.bus import EventBus
from pipegraph.handlers.base import Handler
from pipegraph.model.checkpoint import Checkpoint
from pipegraph.model.context import Context
from pipegraph.model.graph import Graph, Node
from pipegraph.model.outcome import Outcome, Status

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Maps node types and shapes to handler implementations."""

    SHAPE_TO_TYPE: dict[str, str] = {
        "Mdiamond": "start",
        "Msquare": "exit",
        "box": "codergen",
        "hexagon": "wait.human",
        "diamond": "conditional",
        "component": "parallel",
        "tripleoctagon": "parallel.fan_in",
        "parallelogram": "tool",
    }

    def __init__(self) -> None:
        self._handlers: dict[str, Handler] = {}
        self._default: Handler | None = None

    def register(self, type_name: str, handler: Handler) -> None:
        """Register a handler for a named type."""
        self._handlers[type_name] = handler

    def set_default(self, handler: Handler) -> None:
        """Set the fallback handler used when no specific match is found."""
        self._default = handler

    def has(self, type_name: str) -> bool:
        return type_name in self._handlers

    def resolve(self, node: Node) -> Handler:
        """Resolve a handler for the given node.

        Resolution order:
        1. Explicit type attribute on the node
        2. Shape-based lookup via SHAPE_TO_TYPE
        3. Default handler
        """
        if node.type and node.type in self._handlers:
            return self._handlers[node.type]
        handler_type = self.SHAPE_TO_TYPE.get(node.shape, "")
        if handler_type and handler_type in self._handlers:
            return self._handlers[handler_type]
        if self._default is not None:
            return self._default
        raise HandlerNotFoundError(
            f"No handler for node {node.id} (type={node.type!r}, shape={node.shape!r})",
            node_id=node.id,
        )


@dataclass
class RunResult:
    """What ``Engine.run`` / ``Engine.resume`` report on normal termination."""

    status: str
    completed_nodes: list[str]
    node_outcomes: dict[str, Outcome]
    resumed: bool = False
    logs_root: Path | None = None


@dataclass
class _RunState:
    """Mutable state owned by exactly one run."""

    graph: Graph
    logs_root: Path
    context: Context
    started_at: str
    resumed: bool = False
    completed_nodes: list[str] = field(default_factory=list)
    node_outcomes: dict[str, Outcome] = field(default_factory=dict)
    node_retries: dict[str, int] = field(default_factory=dict)


class Engine:
    """Pipeline execution engine: traverses the graph, executes handlers, manages state.

    An Engine holds only configuration (registry, event bus, config); all
    run state lives in a per-call ``_RunState`` so one engine can serve
    several independent runs.
    """

    def __init__(
        self,
        registry: HandlerRegistry,
        *,
        event_bus: EventBus | None = None,
        config: EngineConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.registry = registry
        self.event_bus = event_bus or EventBus()
        self.config = config or EngineConfig()
        self._sleep = sleep

    # --- public API -----------------------------------------------------------

    def run(self, graph: Graph, logs_root: Path | None = None) -> RunResult:
        """Execute *graph* from its start node with a fresh Context."""
        logs_root = Path(logs_root) if logs_root else self._default_logs_root(graph)
        logs_root.mkdir(parents=True, exist_ok=True)

        context = Context()
        for key, value in graph.attributes.items():
            context.set(f"graph.{key}", value)

        state = _RunState(
            graph=graph,
            logs_root=logs_root,
            context=context,
            started_at=_now(),
        )
        self.event_bus.emit(events.PipelineStarted(graph_name=graph.name, logs_root=str(logs_root)))
        logger.info("Starting pipeline %s in %s", graph.name, logs_root)

        start = graph.start_node()
        if start is None:
            self._fail(state, StartNodeNotFoundError("No start node found in graph"))
        return self._traverse(state, start)

    def resume(self, graph: Graph, logs_root: Path) -> RunResult:
        """Continue the run whose checkpoint lives in *logs_root*.

        The checkpointed node is treated as already completed: its outgoing
        edge is reselected from the recorded outcome and its handler is not
        executed again.
        """
        logs_root = Path(logs_root)
        cp_path = logs_root / self.config.checkpoint_filename
        if not cp_path.exists():
            raise CheckpointNotFoundError(f"No checkpoint found at {cp_path}", path=str(cp_path))
        cp = Checkpoint.load(cp_path)

        state = _RunState(
            graph=graph,
            logs_root=logs_root,
            context=Context(cp.context_values, logs=cp.logs),
            started_at=_now(),
            resumed=True,
            completed_nodes=list(cp.completed_nodes),
            node_outcomes=dict(cp.node_outcomes),
            node_retries=dict(cp.node_retries),
        )
        self.event_bus.emit(
            events.PipelineStarted(graph_name=graph.name, logs_root=str(logs_root), resumed=True)
        )
        logger.info("Resuming pipeline %s after stage %s", graph.name, cp.current_node)

        node = graph.get_node(cp.current_node)
        if node is None:
            self._fail(
                state,
                UnknownNodeError(
                    f"Checkpointed node {cp.current_node} is not in the graph",
                    node_id=cp.current_node,
                ),
            )
        outcome = state.node_outcomes.get(node.id) or _outcome_from_context(state.context)
        state.node_outcomes.setdefault(node.id, outcome)

        next_node = self._advance(state, node, outcome)
        if next_node is None:
            return self._finish(state)
        return self._traverse(state, next_node)

    # --- main loop ------------------------------------------------------------

    def _traverse(self, state: _RunState, current: Node) -> RunResult:
        graph = state.graph
        while True:
            node = current

            if graph.is_terminal(node):
                failed_gate = self._failed_goal_gate(state)
                if failed_gate is None:
                    return self._finish(state)
                target = self._retry_target(state, failed_gate)
                self.event_bus.emit(events.GoalGateRetry(node_id=failed_gate.id, retry_target=target))
                logger.warning("Goal gate %s unsatisfied; jumping to %s", failed_gate.id, target)
                current = graph.nodes[target]
                continue

            outcome = self._execute_stage(state, node)
            self._record(state, node, outcome)

            next_node = self._advance(state, node, outcome)
            if next_node is None:
                return self._finish(state)
            current = next_node

    def _execute_stage(self, state: _RunState, node: Node) -> Outcome:
        try:
            handler = self.registry.resolve(node)
        except HandlerNotFoundError as exc:
            self._fail(state, exc)

        self.event_bus.emit(events.StageStarted(node_id=node.id))
        state.context.set("current_node", node.id)
        logger.info("Stage %s started", node.id)

        policy = build_retry_policy(
            node, state.graph, backoff=self.config.backoff or BackoffConfig()
        )

        def on_retry(attempt: int, delay: float, reason: str) -> None:
            self.event_bus.emit(
                events.StageRetrying(node_id=node.id, attempt=attempt, delay=delay, reason=reason)
            )

        outcome = execute_with_retry(
            handler,
            node,
            state.context,
            state.graph,
            state.logs_root,
            policy,
            state.node_retries,
            sleep=self._sleep,
            on_retry=on_retry,
        )
        if outcome.failed:
            self.event_bus.emit(events.StageFailed(node_id=node.id, error=outcome.failure_reason))
        logger.info("Stage %s finished: %s", node.id, outcome.status.value)
        return outcome

    def _record(self, state: _RunState, node: Node, outcome: Outcome) -> None:
        """Record completion, merge context updates, and persist a checkpoint."""
        state.completed_nodes.append(node.id)
        state.node_outcomes[node.id] = outcome
        self.event_bus.emit(events.StageCompleted(node_id=node.id, outcome=outcome))

        ctx = state.context
        ctx.apply_updates(outcome.context_updates)
        ctx.set("outcome", outcome.status.value)
        if outcome.preferred_label:
            ctx.set("preferred_label", outcome.preferred_label)
        entry = f"{node.id}: {outcome.status.value}"
        if outcome.failure_reason:
            entry += f" ({outcome.failure_reason})"
        ctx.append_log(entry)

        cp = Checkpoint.create_now(
            current_node=node.id,
            completed_nodes=state.completed_nodes,
            node_retries=state.node_retries,
            context_values=ctx.snapshot(),
            logs=ctx.logs,
            node_outcomes=state.node_outcomes,
        )
        cp_path = state.logs_root / self.config.checkpoint_filename
        cp.save(cp_path)
        self.event_bus.emit(events.CheckpointSaved(node_id=node.id, path=str(cp_path)))

    def _advance(self, state: _RunState, node: Node, outcome: Outcome) -> Node | None:
        """Pick the node after *node*; None means the run ends normally here."""
        edge = select_edge(node, outcome, state.context, state.graph)
        if edge is None:
            if outcome.status is Status.FAIL:
                self._fail(
                    state,
                    DeadEndError(
                        f"Stage {node.id} failed with no outgoing fail edge"
                        + (f": {outcome.failure_reason}" if outcome.failure_reason else ""),
                        node_id=node.id,
                    ),
                )
            logger.info("Stage %s has no outgoing edges; pipeline ends", node.id)
            return None

        target = state.graph.get_node(edge.to_node)
        if target is None:
            self._fail(
                state,
                UnknownNodeError(
                    f"Edge {edge.from_node} -> {edge.to_node} targets unknown node {edge.to_node}",
                    node_id=node.id,
                ),
            )
        return target

    # --- goal gates -----------------------------------------------------------

    def _failed_goal_gate(self, state: _RunState) -> Node | None:
        """Return the first completed goal-gate node that did not succeed."""
        for node_id, outcome in state.node_outcomes.items():
            node = state.graph.get_node(node_id)
            if node is not None and node.goal_gate and not outcome.succeeded:
                return node
        return None

    def _retry_target(self, state: _RunState, gate: Node) -> str:
        """Resolve where to jump after *gate* failed; fatal if nothing resolves."""
        attrs = state.graph.attributes
        candidates = (
            gate.retry_target,
            gate.fallback_retry_target,
            str(attrs.get("retry_target", "") or ""),
            str(attrs.get("fallback_retry_target", "") or ""),
        )
        target = next((c for c in candidates if c), "")
        if not target:
            self._fail(
                state,
                GoalGateError(
                    f"Goal gate unsatisfied for node {gate.id} and no retry target",
                    node_id=gate.id,
                ),
            )
        if target not in state.graph.nodes:
            self._fail(
                state,
                UnknownNodeError(
                    f"Retry target {target} for goal gate {gate.id} is not in the graph",
                    node_id=gate.id,
                ),
            )
        return target

    # --- termination ----------------------------------------------------------

    def _finish(self, state: _RunState) -> RunResult:
        manifest = {
            "name": state.graph.name,
            "goal": state.graph.goal,
            "started_at": state.started_at,
        }
        (state.logs_root / self.config.manifest_filename).write_text(
            json.dumps(manifest, indent=2), encoding="utf-8"
        )
        self.event_bus.emit(
            events.PipelineCompleted(
                graph_name=state.graph.name, completed_nodes=tuple(state.completed_nodes)
            )
        )
        logger.info("Pipeline %s completed: %s", state.graph.name, " -> ".join(state.completed_nodes))
        return RunResult(
            status="completed",
            completed_nodes=list(state.completed_nodes),
            node_outcomes=dict(state.node_outcomes),
            resumed=state.resumed,
            logs_root=state.logs_root,
        )

    def _fail(self, state: _RunState, error: PipelineError) -> NoReturn:
        """Publish the failure and raise *error*. Never returns."""
        self.event_bus.emit(
            events.PipelineFailed(graph_name=state.graph.name, error=str(error), node_id=error.node_id)
        )
        logger.error("Pipeline %s failed: %s", state.graph.name, error)
        raise error

    def _default_logs_root(self, graph: Graph) -> Path:
        ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
        return Path(self.config.runs_dir) / f"{graph.name}-{ts}"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _outcome_from_context(context: Context) -> Outcome:
    """Rebuild the last stage's outcome from the keys the engine mirrors into context."""
    try:
        status = Status(context.get_string("outcome", Status.SUCCESS.value))
    except ValueError:
        status = Status.SUCCESS
    return Outcome(status=status, preferred_label=context.get_string("preferred_label"))
