"""Edge selection algorithm: 5-step priority for choosing the next edge."""

from __future__ import annotations

import re

from pipegraph.conditions import evaluate_condition
from pipegraph.model.context import Context
from pipegraph.model.graph import Edge, Graph, Node
from pipegraph.model.outcome import Outcome

_ACCELERATOR_PREFIXES = (
    re.compile(r"^\[\w\]\s*"),
    re.compile(r"^\w\)\s*"),
    re.compile(r"^\w\s*-\s*"),
)


def select_edge(node: Node, outcome: Outcome, context: Context, graph: Graph) -> Edge | None:
    """Select the next edge leaving *node* using 5-step priority:

    1. Condition match - edges whose condition evaluates to true
    2. Preferred label - match outcome.preferred_label against edge labels (normalized)
    3. Suggested next IDs - match outcome.suggested_next_ids against edge targets
    4. Weight - highest weight among unconditional edges
    5. Weight over all edges

    Weight ties are broken by the lexically smallest target id. Returns None
    only when the node has no outgoing edges.
    """
    edges = graph.outgoing_edges(node.id)
    if not edges:
        return None

    # Step 1: Condition matching
    matched = [
        e for e in edges if e.condition and evaluate_condition(e.condition, outcome, context)
    ]
    if matched:
        return best_by_weight(matched)

    # Step 2: Preferred label
    if outcome.preferred_label:
        wanted = normalize_label(outcome.preferred_label)
        for edge in edges:
            if normalize_label(edge.label) == wanted:
                return edge

    # Step 3: Suggested next IDs
    for sid in outcome.suggested_next_ids:
        for edge in edges:
            if edge.to_node == sid:
                return edge

    # Step 4: Weight among unconditional edges
    unconditional = [e for e in edges if not e.condition]
    if unconditional:
        return best_by_weight(unconditional)

    # Step 5: any edge
    return best_by_weight(edges)


def best_by_weight(edges: list[Edge]) -> Edge:
    """Return the edge with the highest weight, breaking ties alphabetically by to_node."""
    return min(edges, key=lambda e: (-e.weight, e.to_node))


def normalize_label(label: str) -> str:
    """Strip accelerator prefixes (``[K] ``, then ``K) ``, then ``K - ``), lowercase, trim.

    Each pattern is tried once, in that order.
    """
    if not label:
        return ""
    label = label.strip()
    for pattern in _ACCELERATOR_PREFIXES:
        label = pattern.sub("", label, count=1)
    return label.lower().strip()
