# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Low-cardinality Prometheus metrics for action maintenance.

Labels stay conservative (op, reason) and never carry store paths.
Pass a dedicated `CollectorRegistry` when more than one set of metrics must
live in the same process (tests); the default is the global registry.
"""

from dataclasses import dataclass
from typing import Any

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram

__all__ = ["ActionMetrics", "default_metrics"]


@dataclass
class ActionMetrics:
    deleted_total: Any
    path_failures_total: Any
    skipped_total: Any
    batch_latency_ms: Any

    @classmethod
    def create(cls, registry: CollectorRegistry | None = None) -> ActionMetrics:
        reg = registry if registry is not None else REGISTRY
        deleted_total = Counter(
            "topoactions_deleted_total", "Action nodes deleted", ["op"], registry=reg
        )
        path_failures_total = Counter(
            "topoactions_path_failures_total", "Paths whose processing failed", ["op"], registry=reg
        )
        skipped_total = Counter(
            "topoactions_skipped_total", "Action nodes skipped while scanning", ["reason"], registry=reg
        )
        batch_latency_ms = Histogram(
            "topoactions_batch_latency_ms",
            "Wall time of one batch operation (ms)",
            ["op"],
            buckets=(5, 10, 25, 50, 100, 250, 500, 1000, 5000, 30000),
            registry=reg,
        )
        return cls(
            deleted_total=deleted_total,
            path_failures_total=path_failures_total,
            skipped_total=skipped_total,
            batch_latency_ms=batch_latency_ms,
        )


_default: ActionMetrics | None = None


def default_metrics() -> ActionMetrics:
    """Process-wide metrics bound to the global registry, created on first use."""
    global _default
    if _default is None:
        _default = ActionMetrics.create()
    return _default
