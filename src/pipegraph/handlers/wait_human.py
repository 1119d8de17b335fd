"""WaitHumanHandler: pauses execution to ask the user a question."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from pipegraph.interviewer.accelerators import accelerator_key
from pipegraph.interviewer.base import Interviewer
from pipegraph.model.context import Context
from pipegraph.model.graph import Edge, Graph, Node
from pipegraph.model.outcome import Outcome, Status
from pipegraph.model.question import Answer, Option, Question, QuestionType

logger = logging.getLogger(__name__)

DEFAULT_CHOICE_ATTR = "human.default_choice"


@dataclass(frozen=True)
class Choice:
    """One selectable route out of a human gate."""

    key: str
    label: str
    to: str

    def matches(self, text: str) -> bool:
        wanted = text.strip().lower()
        return wanted in (self.key.lower(), self.label.strip().lower(), self.to.lower())


def choices_for(edges: list[Edge]) -> list[Choice]:
    """Build one choice per edge, keyed by the label's accelerator."""
    choices = []
    for edge in edges:
        label = edge.label or edge.to_node
        choices.append(Choice(key=accelerator_key(label), label=label, to=edge.to_node))
    return choices


class WaitHumanHandler:
    """Handler for wait.human (hexagon) nodes.

    Offers one option per outgoing edge and delegates to an Interviewer.
    A skipped or timed-out answer falls back to the node's
    ``human.default_choice`` attribute, else the stage asks to be retried.
    The chosen edge is reported through suggested_next_ids.
    """

    def __init__(self, interviewer: Interviewer) -> None:
        self._interviewer = interviewer

    def execute(self, node: Node, context: Context, graph: Graph, logs_root: Path) -> Outcome:
        choices = choices_for(graph.outgoing_edges(node.id))
        if not choices:
            return Outcome(status=Status.FAIL, failure_reason="No outgoing edges for human gate")

        question = Question(
            text=node.label or "Select an option:",
            type=QuestionType.MULTIPLE_CHOICE,
            options=[Option(key=c.key, label=c.label) for c in choices],
            stage=node.id,
        )
        answer = self._interviewer.ask(question)

        if answer.is_unanswered:
            selected = self._default_choice(node, choices)
            if selected is None:
                reason = "Human gate timeout, no default" if answer.timed_out else "Human gate skipped, no valid default"
                return Outcome(status=Status.RETRY, failure_reason=reason)
            logger.info("Stage %s unanswered; using default choice %s", node.id, selected.to)
        else:
            selected = _match(answer, choices)

        return Outcome(
            status=Status.SUCCESS,
            suggested_next_ids=[selected.to],
            context_updates={
                "human.gate.selected": selected.key,
                "human.gate.label": selected.label,
            },
            notes=f"Human selected: {selected.label}",
        )

    @staticmethod
    def _default_choice(node: Node, choices: list[Choice]) -> Choice | None:
        default = node.attr(DEFAULT_CHOICE_ATTR)
        if not default:
            return None
        default = str(default).strip().lower()
        for choice in choices:
            if default in (choice.key.lower(), choice.to.lower()):
                return choice
        return None


def _match(answer: Answer, choices: list[Choice]) -> Choice:
    """Find the choice named by *answer*; the first choice is the last resort."""
    candidates = [answer.as_text()]
    if answer.selected_option is not None:
        candidates.append(answer.selected_option.label)
    if answer.text:
        candidates.append(answer.text)
    for text in candidates:
        if not text:
            continue
        for choice in choices:
            if choice.matches(text):
                return choice
    return choices[0]
