"""Interviewer protocol definition."""

from __future__ import annotations

from typing import Protocol

from pipegraph.model.question import Answer, Question


class Interviewer(Protocol):
    """Protocol for objects that can ask a question and return an answer.

    Implementations signal "no answer" with ``AnswerValue.TIMEOUT`` or
    ``AnswerValue.SKIPPED`` rather than raising.
    """

    def ask(self, question: Question) -> Answer: ...
