"""CodergenHandler: delegates code/text generation to a pluggable backend."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol, Union

from pipegraph.model.context import Context
from pipegraph.model.graph import Graph, Node
from pipegraph.model.outcome import Outcome, Status

logger = logging.getLogger(__name__)

RESPONSE_PREVIEW_CHARS = 200


class CodergenBackend(Protocol):
    """Protocol for code generation backends.

    A backend returns either the response text or a complete Outcome that
    is passed through unchanged.
    """

    def run(self, node: Node, prompt: str, context: Context) -> Union[str, Outcome]: ...


class StubBackend:
    """A stub backend that returns a predictable response for testing."""

    def run(self, node: Node, prompt: str, context: Context) -> str:
        return f"stub response: {prompt[:50]}"


class CodergenHandler:
    """Handler for codergen (box) nodes and the registry default.

    Builds the prompt from the node's prompt (or label), expanding ``$goal``
    with the graph goal, and calls the backend. Without a backend the
    handler runs in simulation mode. Writes ``prompt.md``, ``response.md``
    and ``status.json`` under ``logs_root / node.id``.
    Returns FAIL if the backend raises an exception.
    """

    def __init__(self, backend: CodergenBackend | None = None) -> None:
        self._backend = backend

    def execute(self, node: Node, context: Context, graph: Graph, logs_root: Path) -> Outcome:
        prompt = expand_goal(node.prompt or node.label, graph.goal)

        stage_dir = logs_root / node.id
        stage_dir.mkdir(parents=True, exist_ok=True)
        (stage_dir / "prompt.md").write_text(prompt, encoding="utf-8")

        if self._backend is None:
            response: str | Outcome = f"[Simulated] Response for stage: {node.id}"
        else:
            try:
                response = self._backend.run(node, prompt, context)
            except Exception as exc:
                logger.warning("Backend failed for stage %s: %s", node.id, exc)
                outcome = Outcome(status=Status.FAIL, failure_reason=str(exc))
                _write_status(stage_dir, outcome)
                return outcome

        if isinstance(response, Outcome):
            _write_status(stage_dir, response)
            return response

        text = str(response)
        (stage_dir / "response.md").write_text(text, encoding="utf-8")

        preview = text
        if len(text) > RESPONSE_PREVIEW_CHARS:
            preview = text[:RESPONSE_PREVIEW_CHARS] + "..."
        outcome = Outcome(
            status=Status.SUCCESS,
            context_updates={"last_stage": node.id, "last_response": preview},
            notes=f"Stage completed: {node.id}",
        )
        _write_status(stage_dir, outcome)
        return outcome


def expand_goal(prompt: str, goal: str) -> str:
    """Replace ``$goal`` placeholders; left untouched when the graph has no goal."""
    if not goal:
        return prompt
    return prompt.replace("$goal", goal)


def _write_status(stage_dir: Path, outcome: Outcome) -> None:
    (stage_dir / "status.json").write_text(
        json.dumps(outcome.to_dict(), indent=2), encoding="utf-8"
    )
