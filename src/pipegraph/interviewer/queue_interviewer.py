"""QueueInterviewer: answers questions from a pre-filled queue."""

from __future__ import annotations

from collections import deque
from typing import Iterable

from pipegraph.model.question import Answer, AnswerValue, Question


class QueueInterviewer:
    """Interviewer that replays queued answers in order.

    Once the queue is exhausted every further question is answered with
    ``AnswerValue.SKIPPED``. Asked questions are kept for inspection.
    """

    def __init__(self, answers: Iterable[Answer] | None = None) -> None:
        self._answers: deque[Answer] = deque(answers or [])
        self.asked: list[Question] = []

    def ask(self, question: Question) -> Answer:
        self.asked.append(question)
        if self._answers:
            return self._answers.popleft()
        return Answer(value=AnswerValue.SKIPPED)

    def enqueue(self, answer: Answer) -> None:
        self._answers.append(answer)

    @property
    def remaining(self) -> int:
        return len(self._answers)
