"""Outcome model: status and result data from node execution."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Status(Enum):
    """Possible outcomes of a node execution."""

    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"
    RETRY = "retry"
    FAIL = "fail"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Outcome:
    """Result produced by a node handler after execution."""

    status: Status
    preferred_label: str = ""
    suggested_next_ids: list[str] = field(default_factory=list)
    context_updates: dict[str, Any] = field(default_factory=dict)
    notes: str = ""
    failure_reason: str = ""

    @property
    def succeeded(self) -> bool:
        """True if status is SUCCESS or PARTIAL_SUCCESS."""
        return self.status in (Status.SUCCESS, Status.PARTIAL_SUCCESS)

    @property
    def failed(self) -> bool:
        """True if status is FAIL."""
        return self.status is Status.FAIL

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "preferred_label": self.preferred_label,
            "suggested_next_ids": list(self.suggested_next_ids),
            "context_updates": dict(self.context_updates),
            "notes": self.notes,
            "failure_reason": self.failure_reason,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Outcome:
        return cls(
            status=Status(data["status"]),
            preferred_label=data.get("preferred_label", ""),
            suggested_next_ids=list(data.get("suggested_next_ids", [])),
            context_updates=dict(data.get("context_updates", {})),
            notes=data.get("notes", ""),
            failure_reason=data.get("failure_reason", ""),
        )
