"""Tests for the edge selection algorithm."""

from __future__ import annotations

import pytest

from pipegraph.engine.edge_selector import best_by_weight, normalize_label, select_edge
from pipegraph.model.context import Context
from pipegraph.model.graph import Edge, Graph, Node
from pipegraph.model.outcome import Outcome, Status


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _graph(*edges: Edge) -> Graph:
    g = Graph(name="sel")
    g.add_node(Node(id="n"))
    for e in edges:
        g.add_edge(e)
    return g


def _select(graph: Graph, outcome: Outcome | None = None, context: Context | None = None):
    return select_edge(
        graph.nodes["n"],
        outcome or Outcome(status=Status.SUCCESS),
        context or Context(),
        graph,
    )


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestNoEdges:
    def test_returns_none(self):
        assert _select(_graph()) is None

    def test_returns_none_even_on_fail(self):
        assert _select(_graph(), Outcome(status=Status.FAIL)) is None


class TestConditionTier:
    def test_matching_condition_beats_heavier_unconditional(self):
        g = _graph(
            Edge(from_node="n", to_node="heavy", weight=100),
            Edge(from_node="n", to_node="cond", condition="outcome=success"),
        )
        assert _select(g).to_node == "cond"

    def test_highest_weight_among_matches(self):
        g = _graph(
            Edge(from_node="n", to_node="low", condition="outcome=success", weight=1),
            Edge(from_node="n", to_node="high", condition="outcome=success", weight=7),
        )
        assert _select(g).to_node == "high"

    def test_context_condition(self):
        g = _graph(
            Edge(from_node="n", to_node="yes", condition="context.ok=true"),
            Edge(from_node="n", to_node="no", condition="context.ok=false"),
        )
        assert _select(g, context=Context({"ok": False})).to_node == "no"

    def test_non_matching_condition_falls_through(self):
        g = _graph(
            Edge(from_node="n", to_node="onfail", condition="outcome=fail"),
            Edge(from_node="n", to_node="plain"),
        )
        assert _select(g).to_node == "plain"

    def test_malformed_condition_never_matches(self):
        g = _graph(
            Edge(from_node="n", to_node="bad", condition="outcome=success && x=y", weight=50),
            Edge(from_node="n", to_node="plain"),
        )
        assert _select(g).to_node == "plain"


class TestPreferredLabelTier:
    def test_accelerator_and_case_normalized(self):
        g = _graph(
            Edge(from_node="n", to_node="approve", label="[A] Approve"),
            Edge(from_node="n", to_node="reject", label="[R] Reject", weight=10),
        )
        out = Outcome(status=Status.SUCCESS, preferred_label="approve")
        assert _select(g, out).to_node == "approve"

    def test_first_matching_edge_wins(self):
        g = _graph(
            Edge(from_node="n", to_node="first", label="Go"),
            Edge(from_node="n", to_node="second", label="go", weight=10),
        )
        out = Outcome(status=Status.SUCCESS, preferred_label="G) go")
        assert _select(g, out).to_node == "first"

    def test_unmatched_label_falls_through_to_weight(self):
        g = _graph(
            Edge(from_node="n", to_node="a", label="x"),
            Edge(from_node="n", to_node="b", label="y", weight=3),
        )
        out = Outcome(status=Status.SUCCESS, preferred_label="z")
        assert _select(g, out).to_node == "b"


class TestSuggestedIdsTier:
    def test_suggested_order_respected(self):
        g = _graph(
            Edge(from_node="n", to_node="a"),
            Edge(from_node="n", to_node="b"),
        )
        out = Outcome(status=Status.SUCCESS, suggested_next_ids=["missing", "b", "a"])
        assert _select(g, out).to_node == "b"


class TestWeightTiers:
    def test_higher_weight_wins(self):
        g = _graph(
            Edge(from_node="n", to_node="target_a", label="a", weight=5),
            Edge(from_node="n", to_node="target_b", label="b", weight=10),
        )
        assert _select(g).to_node == "target_b"

    def test_equal_weight_lexical_tiebreak(self):
        g = _graph(
            Edge(from_node="n", to_node="zeta"),
            Edge(from_node="n", to_node="alpha"),
        )
        assert _select(g).to_node == "alpha"

    def test_unconditional_preferred_over_conditional(self):
        g = _graph(
            Edge(from_node="n", to_node="cond", condition="outcome=fail", weight=100),
            Edge(from_node="n", to_node="plain", weight=1),
        )
        assert _select(g).to_node == "plain"

    def test_all_conditional_falls_back_to_any_edge(self):
        g = _graph(
            Edge(from_node="n", to_node="b", condition="outcome=fail", weight=2),
            Edge(from_node="n", to_node="a", condition="outcome=retry", weight=2),
        )
        assert _select(g).to_node == "a"

    def test_deterministic(self):
        g = _graph(
            Edge(from_node="n", to_node="x", weight=1),
            Edge(from_node="n", to_node="y", weight=1),
        )
        assert {_select(g).to_node for _ in range(20)} == {"x"}

    def test_best_by_weight_handles_negative(self):
        edges = [Edge(from_node="n", to_node="a", weight=-1), Edge(from_node="n", to_node="b")]
        assert best_by_weight(edges).to_node == "b"


class TestNormalizeLabel:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("[Y] Yes", "yes"),
            ("Y) Yes", "yes"),
            ("Y - Yes", "yes"),
            ("  Plain Label ", "plain label"),
            ("", ""),
        ],
    )
    def test_normalize(self, raw: str, expected: str):
        assert normalize_label(raw) == expected

    def test_each_prefix_form_stripped_once(self):
        assert normalize_label("[A] [B] both") == "[b] both"

    def test_prefix_forms_applied_in_sequence(self):
        assert normalize_label("[A] B - yes") == "yes"
        assert normalize_label("A) B - yes") == "yes"
