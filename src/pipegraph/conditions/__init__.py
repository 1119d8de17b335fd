"""Condition expression evaluator for edge traversal decisions.

Grammar (a single clause, no boolean composition)::

    Condition = Field Operator Literal
    Field     = 'outcome' | 'context.' Key
    Operator  = '=' | '!='
    Literal   = bare-word | '"' quoted-string '"'

Comparison is string equality. Context values are rendered the same way the
graph author writes them: booleans as ``true``/``false``, numbers via
``str()``, missing keys as the empty string.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from pipegraph.model.context import Context
from pipegraph.model.outcome import Outcome

__all__ = [
    "Condition",
    "ConditionSyntaxError",
    "evaluate_condition",
    "parse_condition",
    "render_value",
]

logger = logging.getLogger(__name__)

_CLAUSE_RE = re.compile(
    r"""
    ^\s*
    (?P<field>outcome|context\.[A-Za-z0-9_][A-Za-z0-9_.\-]*)
    \s*(?P<op>!=|=)\s*
    (?P<literal>"(?:[^"\\]|\\.)*"|[^\s"=!&|]+)
    \s*$
    """,
    re.VERBOSE,
)

_ESCAPES = {"n": "\n", "t": "\t", '"': '"', "\\": "\\"}


class ConditionSyntaxError(ValueError):
    """Raised when a condition string does not match the grammar."""


@dataclass(frozen=True)
class Condition:
    """A parsed ``field op literal`` clause."""

    field: str
    operator: str
    literal: str

    def resolve(self, outcome: Outcome, context: Context) -> str:
        """Resolve the field reference to its string value."""
        if self.field == "outcome":
            return outcome.status.value
        key = self.field[len("context."):]
        value = context.get(key)
        if value is None:
            # Keys written back with their namespace prefix
            value = context.get(self.field)
        return render_value(value)

    def evaluate(self, outcome: Outcome, context: Context) -> bool:
        resolved = self.resolve(outcome, context)
        if self.operator == "=":
            return resolved == self.literal
        return resolved != self.literal


def render_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _unquote(literal: str) -> str:
    if len(literal) >= 2 and literal[0] == '"' and literal[-1] == '"':
        return re.sub(
            r"\\(.)", lambda m: _ESCAPES.get(m.group(1), m.group(1)), literal[1:-1]
        )
    return literal


@lru_cache(maxsize=256)
def parse_condition(expr: str) -> Condition:
    """Parse a condition string into a :class:`Condition`.

    Raises ``ConditionSyntaxError`` for anything outside the grammar,
    including ``&&``/``||`` composition.
    """
    m = _CLAUSE_RE.match(expr)
    if not m:
        raise ConditionSyntaxError(f"Unsupported condition expression: {expr!r}")
    return Condition(
        field=m.group("field"),
        operator=m.group("op"),
        literal=_unquote(m.group("literal")),
    )


def evaluate_condition(expr: str, outcome: Outcome, context: Context) -> bool:
    """Evaluate a condition expression against the current outcome and context.

    Empty/whitespace-only expressions return True (unconditional). Malformed
    expressions are logged and evaluate to False; this function never raises.
    """
    if not expr or not expr.strip():
        return True
    try:
        condition = parse_condition(expr)
    except ConditionSyntaxError as exc:
        logger.warning("Treating condition as false: %s", exc)
        return False
    return condition.evaluate(outcome, context)
