from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pipegraph.engine.retry import BackoffConfig


@dataclass(frozen=True)
class EngineConfig:
    runs_dir: str = "pipegraph-runs"
    checkpoint_filename: str = "checkpoint.json"
    manifest_filename: str = "manifest.json"
    backoff: BackoffConfig | None = None  # None = BackoffConfig() defaults
