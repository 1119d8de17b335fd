"""Node handlers for the pipegraph execution engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pipegraph.handlers.base import Handler
from pipegraph.handlers.codergen import CodergenBackend, CodergenHandler, StubBackend
from pipegraph.handlers.conditional import ConditionalHandler
from pipegraph.handlers.fan_in import FanInHandler
from pipegraph.handlers.parallel import ParallelHandler
from pipegraph.handlers.start import StartHandler
from pipegraph.handlers.tool import ToolHandler
from pipegraph.handlers.wait_human import WaitHumanHandler
from pipegraph.interviewer.auto_approve import AutoApproveInterviewer
from pipegraph.interviewer.base import Interviewer

if TYPE_CHECKING:
    from pipegraph.engine.engine import HandlerRegistry

__all__ = [
    "Handler",
    "StartHandler",
    "ConditionalHandler",
    "CodergenHandler",
    "CodergenBackend",
    "StubBackend",
    "WaitHumanHandler",
    "ParallelHandler",
    "FanInHandler",
    "ToolHandler",
    "create_default_registry",
]


def create_default_registry(
    *,
    backend: CodergenBackend | None = None,
    interviewer: Interviewer | None = None,
    tool_handler: ToolHandler | None = None,
) -> HandlerRegistry:
    """Create a HandlerRegistry with all default handlers registered.

    Args:
        backend: Backend for codergen nodes. Simulation mode if None.
        interviewer: Interviewer for human gates. Auto-approves if None.
        tool_handler: Preconfigured ToolHandler. Default limits if None.

    Returns:
        A fully configured HandlerRegistry whose default is the codergen handler.
    """
    from pipegraph.engine.engine import HandlerRegistry

    registry = HandlerRegistry()

    registry.register("start", StartHandler())
    registry.register("conditional", ConditionalHandler())

    codergen = CodergenHandler(backend)
    registry.register("codergen", codergen)
    registry.set_default(codergen)

    registry.register("tool", tool_handler or ToolHandler())
    registry.register("wait.human", WaitHumanHandler(interviewer or AutoApproveInterviewer()))

    registry.register("parallel", ParallelHandler())
    registry.register("parallel.fan_in", FanInHandler())

    return registry
