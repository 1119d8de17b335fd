"""Event system: bus and event types for pipeline lifecycle."""

from pipegraph.events.bus import EventBus
from pipegraph.events.log import log_events
from pipegraph.events.types import (
    CheckpointSaved,
    GoalGateRetry,
    PipelineCompleted,
    PipelineFailed,
    PipelineStarted,
    StageCompleted,
    StageFailed,
    StageRetrying,
    StageStarted,
)

__all__ = [
    "EventBus",
    "log_events",
    "CheckpointSaved",
    "GoalGateRetry",
    "PipelineCompleted",
    "PipelineFailed",
    "PipelineStarted",
    "StageCompleted",
    "StageFailed",
    "StageRetrying",
    "StageStarted",
]
