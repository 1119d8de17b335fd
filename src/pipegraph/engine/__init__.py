"""Execution engine: core pipeline runner, edge selection, and retry logic."""

from pipegraph.engine.edge_selector import normalize_label, select_edge
from pipegraph.engine.engine import Engine, HandlerRegistry, RunResult
from pipegraph.engine.errors import (
    CheckpointNotFoundError,
    DeadEndError,
    GoalGateError,
    HandlerNotFoundError,
    PipelineError,
    StartNodeNotFoundError,
    UnknownNodeError,
)
from pipegraph.engine.retry import (
    PRESET_POLICIES,
    BackoffConfig,
    RetryPolicy,
    build_retry_policy,
    execute_with_retry,
    preset_policy,
)

__all__ = [
    "Engine",
    "HandlerRegistry",
    "RunResult",
    "select_edge",
    "normalize_label",
    "RetryPolicy",
    "BackoffConfig",
    "PRESET_POLICIES",
    "build_retry_policy",
    "execute_with_retry",
    "preset_policy",
    "PipelineError",
    "StartNodeNotFoundError",
    "HandlerNotFoundError",
    "CheckpointNotFoundError",
    "UnknownNodeError",
    "GoalGateError",
    "DeadEndError",
]
