"""Accelerator key parsing for menu/option labels."""

from __future__ import annotations

import re

_PATTERNS = (
    re.compile(r"^\[(\w)\]\s*(.*)$"),  # [K] label
    re.compile(r"^(\w)\)\s*(.*)$"),  # K) label
    re.compile(r"^(\w)\s*-\s*(.*)$"),  # K - label
)


def parse_accelerator(label: str) -> tuple[str, str]:
    """Extract an accelerator key from a label.

    Recognizes patterns:
    - "[K] label" -> ("K", "label")
    - "K) label"  -> ("K", "label")
    - "K - label" -> ("K", "label")

    Returns (key, clean_label). If no accelerator is found,
    returns ("", original_label).
    """
    label = label.strip()
    for pattern in _PATTERNS:
        m = pattern.match(label)
        if m:
            return m.group(1), m.group(2).strip()
    return "", label


def accelerator_key(label: str) -> str:
    """Return the upper-cased accelerator for *label*.

    Falls back to the label's first character when no explicit
    accelerator pattern is present; empty labels yield "".
    """
    key, _ = parse_accelerator(label)
    if not key:
        key = label.strip()[:1]
    return key.upper()
