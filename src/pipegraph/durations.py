"""Duration literals: ``<int><unit>`` with unit in ms, s, m, h, d."""

from __future__ import annotations

import re

DURATION_RE = re.compile(r"^\s*(-?\d+)(ms|s|m|h|d)\s*$")

_UNIT_MS = {
    "ms": 1,
    "s": 1000,
    "m": 60 * 1000,
    "h": 60 * 60 * 1000,
    "d": 24 * 60 * 60 * 1000,
}


def parse_duration_ms(value: object, default: int = 0) -> int:
    """Convert a duration literal to milliseconds.

    Numbers are taken as milliseconds already. Anything unparseable
    yields *default*.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return int(value)
    if not isinstance(value, str):
        return default
    m = DURATION_RE.match(value)
    if not m:
        return default
    return int(m.group(1)) * _UNIT_MS[m.group(2)]


def parse_duration_seconds(value: str) -> float:
    """Convert a duration literal to (possibly fractional) seconds.

    Raises ``ValueError`` for text that is not a duration literal.
    """
    m = DURATION_RE.match(value)
    if not m:
        raise ValueError(f"Not a duration literal: {value!r}")
    return int(m.group(1)) * _UNIT_MS[m.group(2)] / 1000.0
