"""Run-scoped key-value context store."""

from __future__ import annotations

from typing import Any


class Context:
    """Key-value store carrying state through one pipeline run.

    A run owns exactly one Context and hands it to each handler by
    reference. Mutation happens only between stage completions, so the
    store is not locked.
    """

    def __init__(
        self,
        initial: dict[str, Any] | None = None,
        logs: list[str] | None = None,
    ) -> None:
        self._data: dict[str, Any] = dict(initial) if initial else {}
        self._log: list[str] = list(logs) if logs else []

    # --- read / write ---------------------------------------------------------

    def set(self, key: str, value: Any) -> None:
        """Set a single key to the given value."""
        self._data[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Retrieve a value by key, returning *default* if absent."""
        return self._data.get(key, default)

    def get_string(self, key: str, default: str = "") -> str:
        """Retrieve a value as a string, returning *default* if absent."""
        value = self._data.get(key)
        if value is None:
            return default
        return str(value)

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    # --- bulk operations ------------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        """Return a shallow copy of the current data dictionary."""
        return dict(self._data)

    def apply_updates(self, updates: dict[str, Any] | None) -> None:
        """Merge a dictionary of updates into the context."""
        if updates:
            self._data.update(updates)

    # --- logging --------------------------------------------------------------

    def append_log(self, entry: str) -> None:
        self._log.append(entry)

    @property
    def logs(self) -> list[str]:
        """Return a copy of all log entries."""
        return list(self._log)

    def __repr__(self) -> str:
        return f"Context(keys={list(self._data.keys())}, log_entries={len(self._log)})"
