# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Action log manager
==================

Batch maintenance over action directories in the coordination store:

- purge_actions:     delete every purgeable action under each path
- stale_actions:     report (and optionally purge) actions idle for too long
- prune_action_logs: keep only the newest N entries of each action log

Every batch runs one asyncio task per path and waits for all of them. A failure
on one path is logged, counted, and never stops the others; callers get a
`BatchResult` with the aggregated failure count and consult the log for detail.
Nodes that vanish mid-scan and malformed payloads are skipped, not failures.
"""

import asyncio
import posixpath
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from ..api.errors import ConfigurationError, DecodeError, NotFoundError, StoreUnavailableError
from ..core.config import PRUNE_ORDERS, ActionsConfig
from ..core.log import bind_context, get_logger
from ..core.time import Clock, SystemClock
from ..core.utils import gather_all
from ..observability.metrics import ActionMetrics, default_metrics
from ..storage.topo import TopoStore
from .node import ActionNode, decode_action, purgeable, stale

__all__ = ["BatchResult", "ActionLogManager"]


@dataclass
class BatchResult:
    """
    Aggregated outcome of one batch operation.

    Attributes:
        op: Operation name (purge/stale/prune).
        total: Number of paths processed.
        failed: Number of paths whose processing failed.
        actions: Action nodes reported by the operation (stale scan), sorted by path.
        counts: Per-path number of deleted nodes.
    """
    op: str
    total: int
    failed: int = 0
    actions: list[ActionNode] = field(default_factory=list)
    counts: dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.failed == 0

    @property
    def deleted(self) -> int:
        return sum(self.counts.values())

    @property
    def error(self) -> str | None:
        if self.failed == 0:
            return None
        return f"{self.failed} of {self.total} paths failed, check the log"


PathWork = Callable[[str, BatchResult, asyncio.Lock], Awaitable[None]]


class ActionLogManager:
    """
    Purge/stale/prune operations over already-resolved concrete paths.

    The store is injected as a capability (`TopoStore`); no concrete backend
    type is assumed.
    """

    def __init__(
        self,
        *,
        store: TopoStore,
        cfg: ActionsConfig | None = None,
        clock: Clock | None = None,
        metrics: ActionMetrics | None = None,
    ) -> None:
        if not isinstance(store, TopoStore):
            raise ConfigurationError(f"{type(store).__name__} does not implement the TopoStore capability set")
        self.store = store
        self.cfg = cfg or ActionsConfig()
        self.clock: Clock = clock or SystemClock()
        self.metrics = metrics or default_metrics()
        self.log = get_logger("actions.manager")

    # ───────────────────────── public ops ─────────────────────────

    async def purge_actions(self, paths: list[str]) -> BatchResult:
        async def work(path: str, result: BatchResult, lock: asyncio.Lock) -> None:
            deleted = await self._purge_path(path)
            async with lock:
                result.counts[path] = deleted

        return await self._run("purge", paths, work)

    async def stale_actions(
        self,
        paths: list[str],
        *,
        max_staleness_ms: int | None = None,
        purge: bool = False,
    ) -> BatchResult:
        max_ms = self.cfg.max_staleness_ms if max_staleness_ms is None else int(max_staleness_ms)
        if max_ms < 0:
            raise ConfigurationError(f"max staleness must be non-negative, got {max_ms}ms")

        async def work(path: str, result: BatchResult, lock: asyncio.Lock) -> None:
            nodes = await self._fetch_all(path, await self._list_children(path))
            now_ms = self.clock.now_ms()
            found = [n for n in nodes if stale(n, now_ms, max_ms)]
            async with lock:
                result.actions.extend(found)
            if found:
                self.log.info(
                    "stale actions found", event="actions.stale.found", count=len(found), max_staleness_ms=max_ms
                )
            if purge and found:
                deleted = await self._purge_path(path, "stale")
                async with lock:
                    result.counts[path] = deleted

        result = await self._run("stale", paths, work)
        result.actions.sort(key=lambda n: n.path)
        return result

    async def prune_action_logs(self, paths: list[str], *, keep_count: int | None = None) -> BatchResult:
        keep = self.cfg.keep_count if keep_count is None else int(keep_count)
        if keep < 0:
            raise ConfigurationError(f"keep count must be non-negative, got {keep}")
        order = self.cfg.prune_order
        if order not in PRUNE_ORDERS:
            raise ConfigurationError(f"unknown prune order {order!r}")

        async def work(path: str, result: BatchResult, lock: asyncio.Lock) -> None:
            deleted = await self._prune_path(path, keep, order)
            async with lock:
                result.counts[path] = deleted
            self.log.debug("pruned", event="actions.prune.done", deleted=deleted, keep_count=keep)

        return await self._run("prune", paths, work)

    async def get_actions(self, path: str) -> list[ActionNode]:
        """
        All decodable actions under one directory, sorted by path.
        A missing directory is empty; vanished or malformed nodes are skipped.
        """
        nodes = await self._fetch_all(path, sorted(await self._list_children(path)))
        return sorted(nodes, key=lambda n: n.path)

    # ───────────────────────── fan-out ─────────────────────────

    async def _run(self, op: str, paths: list[str], work: PathWork) -> BatchResult:
        result = BatchResult(op=op, total=len(paths))
        if not paths:
            return result

        lock = asyncio.Lock()
        started = time.monotonic()

        async def _one(path: str) -> None:
            # each gathered task runs in its own context copy
            bind_context(op=op, path=path)
            try:
                await work(path, result, lock)
            except StoreUnavailableError as e:
                await self._count_failure(op, result, lock)
                self.log.error("store unavailable", event=f"actions.{op}.path_failed", error=str(e))
            except Exception as e:
                await self._count_failure(op, result, lock)
                self.log.error("path processing failed", event=f"actions.{op}.path_failed", exc_info=e)

        await asyncio.gather(*(_one(p) for p in paths))

        self.metrics.batch_latency_ms.labels(op=op).observe((time.monotonic() - started) * 1000.0)
        self.log.info(
            "batch finished",
            event=f"actions.{op}.finished",
            op=op,
            paths=result.total,
            failed=result.failed,
            deleted=result.deleted,
        )
        return result

    async def _count_failure(self, op: str, result: BatchResult, lock: asyncio.Lock) -> None:
        async with lock:
            result.failed += 1
        self.metrics.path_failures_total.labels(op=op).inc()

    # ───────────────────────── per-path steps ─────────────────────────

    async def _list_children(self, path: str) -> list[str]:
        try:
            return await self.store.get_children(path)
        except NotFoundError:
            self.log.debug("no such action directory", event="actions.dir.missing", dir=path)
            return []

    async def _fetch(self, dir_path: str, name: str) -> ActionNode | None:
        node_path = posixpath.join(dir_path, name)
        try:
            raw = await self.store.get_node(node_path)
        except NotFoundError:
            self.log.warning("action vanished before fetch", event="actions.node.vanished", node=node_path)
            self.metrics.skipped_total.labels(reason="vanished").inc()
            return None
        try:
            return decode_action(raw.data, node_path, raw.mtime_ms)
        except DecodeError as e:
            self.log.warning("bad action data", event="actions.node.malformed", node=node_path, error=e.reason)
            self.metrics.skipped_total.labels(reason="malformed").inc()
            return None

    async def _fetch_all(self, dir_path: str, names: list[str]) -> list[ActionNode]:
        if not names:
            return []
        nodes = await gather_all(*(self._fetch(dir_path, n) for n in names))
        return [n for n in nodes if n is not None]

    async def _delete(self, node_path: str) -> bool:
        try:
            await self.store.delete_node(node_path)
        except NotFoundError:
            self.log.debug("already deleted", event="actions.node.vanished", node=node_path)
            return False
        return True

    async def _purge_path(self, path: str, op: str = "purge") -> int:
        nodes = await self._fetch_all(path, await self._list_children(path))
        deleted = 0
        for node in nodes:
            if not purgeable(node):
                self.log.info(
                    "cannot remove running action",
                    event="actions.purge.running",
                    node=node.path,
                    kind=node.kind,
                    guid=node.guid,
                )
                continue
            if await self._delete(node.path):
                deleted += 1
        if deleted:
            self.metrics.deleted_total.labels(op=op).inc(deleted)
        return deleted

    async def _prune_path(self, path: str, keep: int, order: str) -> int:
        names = await self._list_children(path)
        if len(names) <= keep:
            return 0
        if order == "mtime":
            ordered = await self._order_by_mtime(path, names)
        else:
            # store-assigned sequence names: lexical order is creation order
            ordered = sorted(names)
        doomed = ordered[: max(0, len(ordered) - keep)]
        deleted = 0
        for name in doomed:
            if await self._delete(posixpath.join(path, name)):
                deleted += 1
        if deleted:
            self.metrics.deleted_total.labels(op="prune").inc(deleted)
        return deleted

    async def _order_by_mtime(self, path: str, names: list[str]) -> list[str]:
        async def _stamp(name: str) -> tuple[int, str] | None:
            try:
                raw = await self.store.get_node(posixpath.join(path, name))
            except NotFoundError:
                return None
            return raw.mtime_ms, name

        stamped = [s for s in await gather_all(*(_stamp(n) for n in names)) if s is not None]
        return [name for _, name in sorted(stamped)]
