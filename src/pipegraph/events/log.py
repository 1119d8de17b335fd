"""Bridge lifecycle events onto a standard library logger."""

from __future__ import annotations

import logging
from typing import Any

from pipegraph.events import types as events
from pipegraph.events.bus import EventBus

_LEVELS: dict[type, int] = {
    events.PipelineFailed: logging.ERROR,
    events.StageFailed: logging.WARNING,
    events.StageRetrying: logging.WARNING,
    events.CheckpointSaved: logging.DEBUG,
}


def log_events(bus: EventBus, logger: logging.Logger | None = None) -> None:
    """Subscribe *logger* to every event published on *bus*."""
    log = logger or logging.getLogger("pipegraph.events")

    def listener(event: Any) -> None:
        level = _LEVELS.get(type(event), logging.INFO)
        log.log(level, "%s %s", type(event).__name__, _describe(event))

    bus.on_all(listener)


def _describe(event: Any) -> str:
    if isinstance(event, events.StageCompleted):
        return f"node_id={event.node_id} status={event.outcome.status.value}"
    fields = getattr(event, "__dataclass_fields__", {})
    return " ".join(f"{name}={getattr(event, name)!r}" for name in fields)
