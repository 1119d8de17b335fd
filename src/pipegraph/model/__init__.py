"""pipegraph model layer -- public type re-exports."""

from pipegraph.model.checkpoint import Checkpoint
from pipegraph.model.context import Context
from pipegraph.model.graph import Edge, Graph, Node
from pipegraph.model.outcome import Outcome, Status
from pipegraph.model.question import Answer, AnswerValue, Option, Question, QuestionType

__all__ = [
    # graph
    "Node",
    "Edge",
    "Graph",
    # outcome
    "Status",
    "Outcome",
    # context
    "Context",
    # checkpoint
    "Checkpoint",
    # question
    "QuestionType",
    "AnswerValue",
    "Option",
    "Question",
    "Answer",
]
