from __future__ import annotations

"""
topoactions.core.config
=======================

Strongly-typed configuration for the action tooling.
- No external deps; optional JSON file loading.
- Derives millisecond fields from seconds to avoid repeated conversions.
- Small env overrides for operators.

If a config file path is not provided or not found, defaults are used.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .types import DEFAULT_KEEP_COUNT, DEFAULT_MAX_STALENESS_SEC, StrPath

PRUNE_ORDERS = ("name", "mtime")


def _try_load_json(path: Path | None) -> dict[str, Any]:
    if not path or not path.exists():
        return {}
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"config file {path} must contain a JSON object")
    return data


def _int_env(name: str) -> int | None:
    val = os.getenv(name)
    if val is None or not val.strip():
        return None
    return int(val)


# ---------------------------------------------------------------------------


@dataclass
class ActionsConfig:
    """Configuration for purge/stale/prune operations and store path layout."""

    # ---- Staleness / retention
    max_staleness_sec: float = DEFAULT_MAX_STALENESS_SEC
    keep_count: int = DEFAULT_KEEP_COUNT

    # "name": lexical child-name order (store-assigned sequence numbers)
    # "mtime": explicit modification-time order for backends without sequences
    prune_order: str = "name"

    # Raise instead of passing patterns through when the store cannot expand wildcards
    strict_wildcards: bool = False

    # ---- Store layout
    shard_action_fmt: str = "/zk/global/vt/keyspaces/{keyspace}/shards/{shard}/action"
    shard_actionlog_fmt: str = "/zk/global/vt/keyspaces/{keyspace}/shards/{shard}/actionlog"
    replica_action_fmt: str = "/zk/{cell}/vt/tablets/{uid:010d}/action"

    # ---- Derived (ms)
    max_staleness_ms: int = 0

    # ---- Methods ------------------------------------------------------------

    def __post_init__(self) -> None:
        if self.max_staleness_sec < 0:
            raise ValueError("max_staleness_sec must be non-negative")
        if self.keep_count < 0:
            raise ValueError("keep_count must be non-negative")
        if self.prune_order not in PRUNE_ORDERS:
            raise ValueError(f"prune_order must be one of {PRUNE_ORDERS}, got {self.prune_order!r}")
        for name in ("shard_action_fmt", "shard_actionlog_fmt", "replica_action_fmt"):
            if not str(getattr(self, name)).startswith("/"):
                raise ValueError(f"{name} must be an absolute store path template")
        self.max_staleness_ms = int(self.max_staleness_sec * 1000)

    # Loader
    @classmethod
    def load(cls, path: StrPath | None = None, *, overrides: dict[str, Any] | None = None) -> ActionsConfig:
        """
        Load config from JSON file (if provided), then apply env and overrides.

        Env overrides:
          - TOPOACTIONS_MAX_STALENESS_SEC
          - TOPOACTIONS_KEEP_COUNT
          - TOPOACTIONS_PRUNE_ORDER
        """
        data: dict[str, Any] = {}
        data.update(_try_load_json(Path(path) if path else None))

        staleness = _int_env("TOPOACTIONS_MAX_STALENESS_SEC")
        if staleness is not None:
            data["max_staleness_sec"] = staleness
        keep = _int_env("TOPOACTIONS_KEEP_COUNT")
        if keep is not None:
            data["keep_count"] = keep
        if os.getenv("TOPOACTIONS_PRUNE_ORDER"):
            data["prune_order"] = os.environ["TOPOACTIONS_PRUNE_ORDER"].strip()

        if overrides:
            data.update(overrides)

        # derived fields are recomputed, never loaded
        data.pop("max_staleness_ms", None)
        return cls(**data)
