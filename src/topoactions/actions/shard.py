# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import asyncio

from ..api.errors import StoreUnavailableError
from ..core.log import get_logger
from ..core.utils import gather_all
from ..storage.layout import StoreLayout
from ..storage.topo import ReplicaAlias, ReplicaDiscovery
from .manager import ActionLogManager
from .node import ActionNode


class ShardActionAggregator:
    """
    Read-only view over every action touching a shard: the shard-level action
    directory plus the action directory of each replica serving it.

    Results are merged by path and returned sorted by path, so repeated calls
    over an unchanged store produce identical listings.
    """

    def __init__(
        self,
        *,
        manager: ActionLogManager,
        discovery: ReplicaDiscovery,
        layout: StoreLayout | None = None,
    ) -> None:
        self.manager = manager
        self.discovery = discovery
        self.layout = layout or StoreLayout.from_config(manager.cfg)
        self.log = get_logger("actions.shard")

    async def list_shard_actions(self, keyspace: str, shard: str) -> list[ActionNode]:
        merged: dict[str, ActionNode] = {}
        lock = asyncio.Lock()

        async def _merge(nodes: list[ActionNode]) -> None:
            async with lock:
                for node in nodes:
                    merged[node.path] = node

        async def _shard_level() -> None:
            await _merge(await self.manager.get_actions(self.layout.shard_action_path(keyspace, shard)))

        async def _replica(alias: ReplicaAlias) -> None:
            action_path = self.layout.replica_action_path(alias)
            try:
                nodes = await self.manager.get_actions(action_path)
            except StoreUnavailableError as e:
                self.log.warning(
                    "cannot read replica actions",
                    event="actions.shard.replica_failed",
                    replica=str(alias),
                    error=str(e),
                )
                return
            await _merge(nodes)

        async def _replicas() -> None:
            aliases = await self.discovery.find_replica_aliases(keyspace, shard)
            await gather_all(*(_replica(a) for a in aliases))

        await gather_all(_shard_level(), _replicas())

        self.log.debug(
            "shard actions listed",
            event="actions.shard.listed",
            keyspace=keyspace,
            shard=shard,
            count=len(merged),
        )
        return [merged[p] for p in sorted(merged)]
