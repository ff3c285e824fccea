# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Where action records live inside the coordination store.

Shard-level actions:    /zk/global/vt/keyspaces/<keyspace>/shards/<shard>/action
Shard action log:       /zk/global/vt/keyspaces/<keyspace>/shards/<shard>/actionlog
Replica-level actions:  /zk/<cell>/vt/tablets/<uid, 10 digits>/action

The templates come from `ActionsConfig` so other deployments can relocate them.
"""

import re
from dataclasses import dataclass

from ..api.errors import ConfigurationError
from ..core.config import ActionsConfig
from .topo import ReplicaAlias

__all__ = ["StoreLayout", "parse_shard_param"]

_SHARD_PATH_RE = re.compile(r"^/zk/global/vt/keyspaces/(?P<keyspace>[^/]+)/shards/(?P<shard>[^/]+)/?$")


@dataclass(frozen=True)
class StoreLayout:
    shard_action_fmt: str
    shard_actionlog_fmt: str
    replica_action_fmt: str

    @classmethod
    def from_config(cls, cfg: ActionsConfig) -> StoreLayout:
        return cls(
            shard_action_fmt=cfg.shard_action_fmt,
            shard_actionlog_fmt=cfg.shard_actionlog_fmt,
            replica_action_fmt=cfg.replica_action_fmt,
        )

    def shard_action_path(self, keyspace: str, shard: str) -> str:
        return self.shard_action_fmt.format(keyspace=keyspace, shard=shard)

    def shard_actionlog_path(self, keyspace: str, shard: str) -> str:
        return self.shard_actionlog_fmt.format(keyspace=keyspace, shard=shard)

    def replica_action_path(self, alias: ReplicaAlias) -> str:
        return self.replica_action_fmt.format(cell=alias.cell, uid=alias.uid)


def parse_shard_param(param: str) -> tuple[str, str]:
    """
    Accept `keyspace/shard` or a full global shard path and return (keyspace, shard).
    """
    param = param.strip()
    if param.startswith("/"):
        m = _SHARD_PATH_RE.match(param)
        if not m:
            raise ConfigurationError(f"invalid shard path: {param!r}")
        return m.group("keyspace"), m.group("shard")
    keyspace, sep, shard = param.partition("/")
    if not sep or not keyspace or not shard or "/" in shard:
        raise ConfigurationError(f"invalid shard param, expected <keyspace>/<shard>: {param!r}")
    return keyspace, shard
