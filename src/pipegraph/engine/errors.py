"""Fatal pipeline errors: structural problems that abort a run."""

from __future__ import annotations


class PipelineError(Exception):
    """Base error for every condition that aborts a pipeline run."""

    def __init__(self, message: str, *, node_id: str | None = None) -> None:
        super().__init__(message)
        self.node_id = node_id


class StartNodeNotFoundError(PipelineError):
    """The graph has no entry-shaped node and no conventional start id."""


class HandlerNotFoundError(PipelineError):
    """No registered handler matches a node's type, shape, or the default."""


class CheckpointNotFoundError(PipelineError):
    """``resume`` was asked to continue a run that has no checkpoint."""

    def __init__(self, message: str, *, path: str = "") -> None:
        super().__init__(message)
        self.path = path


class UnknownNodeError(PipelineError):
    """An edge or retry target names a node that is not in the graph."""


class GoalGateError(PipelineError):
    """A goal gate is unsatisfied and no retry target resolves."""


class DeadEndError(PipelineError):
    """A stage failed and no outgoing edge matched its outcome."""
