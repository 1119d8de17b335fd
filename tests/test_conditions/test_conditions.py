"""Tests for the restricted condition grammar."""

from __future__ import annotations

import logging

import pytest

from pipegraph.conditions import (
    ConditionSyntaxError,
    evaluate_condition,
    parse_condition,
    render_value,
)
from pipegraph.model.context import Context
from pipegraph.model.outcome import Outcome, Status

SUCCESS = Outcome(status=Status.SUCCESS)
FAIL = Outcome(status=Status.FAIL)


class TestParseCondition:
    def test_outcome_equality(self):
        cond = parse_condition("outcome=success")
        assert (cond.field, cond.operator, cond.literal) == ("outcome", "=", "success")

    def test_context_inequality_with_spaces(self):
        cond = parse_condition("  context.review.status != approved ")
        assert cond.field == "context.review.status"
        assert cond.operator == "!="
        assert cond.literal == "approved"

    def test_quoted_literal_may_contain_equals_and_quotes(self):
        cond = parse_condition('context.expr="a=b \\"c\\""')
        assert cond.literal == 'a=b "c"'

    @pytest.mark.parametrize(
        "expr",
        [
            "outcome",
            "outcome==success",
            "status=success",
            "outcome=success && context.x=1",
            "outcome=success || outcome=fail",
            "context.=x",
            'outcome="unterminated',
        ],
    )
    def test_rejects_unsupported(self, expr: str):
        with pytest.raises(ConditionSyntaxError):
            parse_condition(expr)


class TestEvaluateCondition:
    def test_empty_is_unconditional(self):
        assert evaluate_condition("", FAIL, Context()) is True
        assert evaluate_condition("   ", FAIL, Context()) is True

    def test_outcome_match(self):
        assert evaluate_condition("outcome=success", SUCCESS, Context())
        assert not evaluate_condition("outcome=success", FAIL, Context())
        assert evaluate_condition("outcome!=success", FAIL, Context())

    def test_context_key_match(self):
        ctx = Context({"tests_passed": "yes"})
        assert evaluate_condition("context.tests_passed=yes", SUCCESS, ctx)
        assert not evaluate_condition("context.tests_passed=no", SUCCESS, ctx)

    def test_context_key_stored_with_prefix(self):
        ctx = Context({"context.mode": "fast"})
        assert evaluate_condition("context.mode=fast", SUCCESS, ctx)

    def test_booleans_render_lowercase(self):
        ctx = Context({"parallel.active": True})
        assert evaluate_condition("context.parallel.active=true", SUCCESS, ctx)

    def test_missing_key_renders_empty(self):
        assert evaluate_condition('context.nope=""', SUCCESS, Context())
        assert evaluate_condition("context.nope!=x", SUCCESS, Context())

    def test_malformed_is_false_and_logged(self, caplog: pytest.LogCaptureFixture):
        with caplog.at_level(logging.WARNING, logger="pipegraph.conditions"):
            result = evaluate_condition("outcome=success && context.x=1", SUCCESS, Context())
        assert result is False
        assert "Unsupported condition" in caplog.text

    def test_value_containing_operator_text(self):
        ctx = Context({"note": "a!=b"})
        assert evaluate_condition('context.note="a!=b"', SUCCESS, ctx)


class TestRenderValue:
    @pytest.mark.parametrize(
        "value,expected",
        [(None, ""), (True, "true"), (False, "false"), (3, "3"), (1.5, "1.5"), ("x", "x")],
    )
    def test_render(self, value, expected):
        assert render_value(value) == expected
