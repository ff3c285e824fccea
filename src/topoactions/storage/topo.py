# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Coordination store capability interfaces (backend-agnostic).

The action tooling never depends on a concrete backend type. Callers inject
an object implementing `TopoStore`; wildcard expansion is an optional extra
capability (`WildcardResolver`) detected at runtime.

Implementations may wrap ZooKeeper, etcd, Consul, etc. Connection management,
timeouts and retries belong to the implementation, not to callers.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

__all__ = [
    "NodeData",
    "ReplicaAlias",
    "TopoStore",
    "WildcardResolver",
    "ReplicaDiscovery",
]


@dataclass(frozen=True)
class NodeData:
    """
    Raw node contents as returned by the store.

    Attributes:
        data: Opaque payload bytes.
        mtime_ms: Store-supplied modification time (epoch milliseconds).
    """
    data: bytes
    mtime_ms: int


@dataclass(frozen=True, order=True)
class ReplicaAlias:
    """Identity of one replica (tablet): the cell it lives in and its numeric uid."""
    cell: str
    uid: int

    def __str__(self) -> str:
        return f"{self.cell}-{self.uid:010d}"


@runtime_checkable
class TopoStore(Protocol):
    """
    Minimal async store interface consumed by the action manager.

    Errors:
        - NotFoundError when the path does not exist.
        - StoreUnavailableError on backend/network failures.
    """

    async def get_children(self, path: str) -> list[str]:
        """Return child names (not full paths) of `path`."""

    async def get_node(self, path: str) -> NodeData:
        """Return payload and modification time of `path`."""

    async def delete_node(self, path: str) -> None:
        """Delete a leaf node."""


@runtime_checkable
class WildcardResolver(Protocol):
    """Optional store capability: expand path patterns to concrete paths."""

    async def resolve_wildcards(self, patterns: list[str]) -> list[str]:
        """
        Expand every pattern; a pattern matching nothing contributes nothing.
        """


@runtime_checkable
class ReplicaDiscovery(Protocol):
    """Finds the replicas serving a shard."""

    async def find_replica_aliases(self, keyspace: str, shard: str) -> list[ReplicaAlias]: ...
