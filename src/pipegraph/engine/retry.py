"""Retry logic: backoff configuration, retry policy, and the retry wrapper."""

from __future__ import annotations

import logging
import random
import re
import time
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from pipegraph.model.context import Context
from pipegraph.model.graph import Graph, Node
from pipegraph.model.outcome import Outcome, Status

if TYPE_CHECKING:
    from pipegraph.handlers.base import Handler

logger = logging.getLogger(__name__)

_TRANSIENT_MARKERS = (
    "econnrefused",
    "connection refused",
    "etimedout",
    "timed out",
    "timeout",
    "enotfound",
    "host not found",
    "name or service not known",
    "429",
)
_SERVER_ERROR_RE = re.compile(r"(?<!\d)5\d\d(?!\d)")


@dataclass(frozen=True)
class BackoffConfig:
    """Configuration for exponential backoff between retries."""

    initial_delay_ms: int = 200
    backoff_factor: float = 2.0
    max_delay_ms: int = 60000
    jitter: bool = True


@dataclass(frozen=True)
class RetryPolicy:
    """Retry policy: max_attempts counts every attempt, so 1 means no retries."""

    max_attempts: int = 1
    backoff: BackoffConfig = field(default_factory=BackoffConfig)

    def delay_for_attempt(self, attempt: int) -> float:
        """Return delay in seconds after the given attempt (1-indexed).

        Attempt 1 uses initial_delay_ms, attempt 2 uses initial * factor, etc.
        The delay is capped at max_delay_ms and optionally jittered.
        """
        delay = self.backoff.initial_delay_ms * (self.backoff.backoff_factor ** (attempt - 1))
        delay = min(delay, self.backoff.max_delay_ms)
        if self.backoff.jitter:
            delay *= random.uniform(0.5, 1.5)
        return delay / 1000.0

    def should_retry(self, error: BaseException | None) -> bool:
        """Classify a raised error as transient (retryable) or terminal."""
        if error is None:
            return False
        explicit = getattr(error, "retryable", None)
        if isinstance(explicit, bool):
            return explicit
        if isinstance(error, (ConnectionError, TimeoutError)):
            return True
        text = str(error).lower()
        if any(marker in text for marker in _TRANSIENT_MARKERS):
            return True
        return bool(_SERVER_ERROR_RE.search(text))


PRESET_POLICIES: dict[str, RetryPolicy] = {
    "none": RetryPolicy(max_attempts=1),
    "standard": RetryPolicy(
        max_attempts=5, backoff=BackoffConfig(initial_delay_ms=200, backoff_factor=2.0)
    ),
    "aggressive": RetryPolicy(
        max_attempts=5, backoff=BackoffConfig(initial_delay_ms=500, backoff_factor=2.0)
    ),
    "linear": RetryPolicy(
        max_attempts=3, backoff=BackoffConfig(initial_delay_ms=500, backoff_factor=1.0)
    ),
    "patient": RetryPolicy(
        max_attempts=3, backoff=BackoffConfig(initial_delay_ms=2000, backoff_factor=3.0)
    ),
}


def preset_policy(name: str) -> RetryPolicy:
    """Return a copy of a named preset. Raises ``KeyError`` for unknown names."""
    return replace(PRESET_POLICIES[name])


def build_retry_policy(
    node: Node, graph: Graph, backoff: BackoffConfig | None = None
) -> RetryPolicy:
    """Build retry policy from node and graph attributes.

    Uses node.max_retries if declared (0 included), otherwise falls back to the
    graph-level default_max_retry attribute. max_retries is extra attempts
    beyond the first.
    """
    max_retries = node.max_retries
    if max_retries is None:
        try:
            max_retries = int(graph.attributes.get("default_max_retry", 0))
        except (ValueError, TypeError):
            max_retries = 0
    return RetryPolicy(
        max_attempts=max(max_retries, 0) + 1,
        backoff=backoff or BackoffConfig(),
    )


OnRetry = Callable[[int, float, str], None]


def execute_with_retry(
    handler: Handler,
    node: Node,
    context: Context,
    graph: Graph,
    logs_root: Path,
    policy: RetryPolicy,
    node_retries: dict[str, int],
    *,
    sleep: Callable[[float], None] = time.sleep,
    on_retry: OnRetry | None = None,
) -> Outcome:
    """Run *handler* for *node* up to ``policy.max_attempts`` times.

    ``node_retries`` is the run's retry-count table and is updated in place.
    *on_retry* is called as ``on_retry(attempt, delay, reason)`` before each
    backoff sleep.
    """

    def _backoff(attempt: int, reason: str) -> None:
        delay = policy.delay_for_attempt(attempt)
        logger.warning(
            "Stage %s attempt %d/%d: %s; retrying in %.3fs",
            node.id, attempt, policy.max_attempts, reason, delay,
        )
        if on_retry is not None:
            on_retry(attempt, delay, reason)
        sleep(delay)

    for attempt in range(1, policy.max_attempts + 1):
        try:
            outcome = handler.execute(node, context, graph, logs_root)
        except Exception as exc:
            if policy.should_retry(exc) and attempt < policy.max_attempts:
                _backoff(attempt, f"transient error: {exc}")
                continue
            logger.error("Stage %s raised: %s", node.id, exc)
            return Outcome(status=Status.FAIL, failure_reason=str(exc))

        if outcome.status in (Status.SUCCESS, Status.PARTIAL_SUCCESS):
            node_retries.pop(node.id, None)
            return outcome

        if outcome.status is Status.RETRY:
            if attempt < policy.max_attempts:
                node_retries[node.id] = node_retries.get(node.id, 0) + 1
                _backoff(attempt, outcome.failure_reason or "stage requested retry")
                continue
            if node.allow_partial:
                return replace(
                    outcome,
                    status=Status.PARTIAL_SUCCESS,
                    notes="Retries exhausted, partial accepted",
                )
            return replace(outcome, status=Status.FAIL, failure_reason="Max retries exceeded")

        # FAIL, SKIPPED: no retry
        return outcome

    return Outcome(status=Status.FAIL, failure_reason="Max retries exceeded")
