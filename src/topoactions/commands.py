# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Operator-facing action commands.

These are the calls a command-line layer binds to its subcommands:

    PurgeActions     <action path> ...
    StaleActions     [max staleness] [purge] <action path> ...
    PruneActionLogs  [keep count] <actionlog path> ...
    ListShardActions <keyspace/shard | shard path>

Each resolves wildcards, runs the batch, writes one line per reported action
to `ctx.out` and returns None on success or a human-readable error string.
Exit codes are the caller's business.
"""

import sys
from dataclasses import dataclass, field
from typing import TextIO

from .actions.manager import ActionLogManager
from .actions.node import ActionNode, format_action
from .actions.resolver import PathResolver
from .actions.shard import ShardActionAggregator
from .api.errors import ConfigurationError, TopoActionsError
from .core.config import ActionsConfig
from .core.log import get_logger
from .core.time import Clock
from .observability.metrics import ActionMetrics
from .storage.layout import parse_shard_param
from .storage.topo import ReplicaDiscovery, TopoStore

__all__ = [
    "CommandContext",
    "purge_actions",
    "stale_actions",
    "prune_action_logs",
    "list_shard_actions",
]

_log = get_logger("commands")


@dataclass
class CommandContext:
    """Wiring shared by all commands: store capabilities, config and output stream."""

    store: TopoStore
    cfg: ActionsConfig = field(default_factory=ActionsConfig)
    discovery: ReplicaDiscovery | None = None
    clock: Clock | None = None
    metrics: ActionMetrics | None = None
    out: TextIO | None = None

    manager: ActionLogManager = field(init=False)
    resolver: PathResolver = field(init=False)

    def __post_init__(self) -> None:
        self.manager = ActionLogManager(store=self.store, cfg=self.cfg, clock=self.clock, metrics=self.metrics)
        self.resolver = PathResolver(self.store, strict=self.cfg.strict_wildcards)

    def echo(self, line: str) -> None:
        print(line, file=self.out or sys.stdout)


def _require_args(command: str, args: list[str], usage: str) -> None:
    if not args:
        raise ConfigurationError(f"action {command} requires {usage}")


def _dump(ctx: CommandContext, nodes: list[ActionNode]) -> None:
    for node in nodes:
        ctx.echo(format_action(node))


async def purge_actions(ctx: CommandContext, patterns: list[str]) -> str | None:
    """Remove every action that is not running. Powerful cleanup; use with care."""
    _require_args("PurgeActions", patterns, "<action path> ...")
    paths = await ctx.resolver.resolve(patterns)
    result = await ctx.manager.purge_actions(paths)
    _log.info("purged actions", event="commands.purge", paths=len(paths), deleted=result.deleted)
    return result.error


async def stale_actions(
    ctx: CommandContext,
    patterns: list[str],
    *,
    max_staleness_ms: int | None = None,
    purge: bool = False,
) -> str | None:
    """List queued actions older than the staleness limit, optionally purging their directories."""
    _require_args("StaleActions", patterns, "<action path> ...")
    paths = await ctx.resolver.resolve(patterns)
    result = await ctx.manager.stale_actions(paths, max_staleness_ms=max_staleness_ms, purge=purge)
    _dump(ctx, result.actions)
    return result.error


async def prune_action_logs(ctx: CommandContext, patterns: list[str], *, keep_count: int | None = None) -> str | None:
    """Remove older action log entries until at most `keep_count` are left per path."""
    _require_args("PruneActionLogs", patterns, "<actionlog path> ...")
    paths = await ctx.resolver.resolve(patterns)
    result = await ctx.manager.prune_action_logs(paths, keep_count=keep_count)
    for path, count in sorted(result.counts.items()):
        _log.debug("action log pruned", event="commands.prune", actionlog=path, deleted=count)
    return result.error


async def list_shard_actions(ctx: CommandContext, shard_param: str) -> str | None:
    """Print every action on a shard and on the replicas serving it."""
    keyspace, shard = parse_shard_param(shard_param)
    if ctx.discovery is None:
        raise ConfigurationError("ListShardActions requires a replica discovery backend")
    aggregator = ShardActionAggregator(manager=ctx.manager, discovery=ctx.discovery)
    try:
        nodes = await aggregator.list_shard_actions(keyspace, shard)
    except TopoActionsError as e:
        _log.error(
            "cannot list shard actions", event="commands.list_shard.failed", keyspace=keyspace, shard=shard, error=str(e)
        )
        return str(e)
    _dump(ctx, nodes)
    return None
