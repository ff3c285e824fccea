"""
Operator-facing commands: wildcard resolution, line-oriented output and the
aggregated error string handed back to the command layer.
"""

from __future__ import annotations

import io

import pytest

from topoactions import commands
from topoactions.api.errors import ConfigurationError
from topoactions.core.config import ActionsConfig
from topoactions.storage.layout import StoreLayout
from topoactions.storage.topo import ReplicaAlias
from tests.helpers import START_MS, StaticDiscovery

KS = "/zk/global/vt/keyspaces"
MIN = 60_000


@pytest.fixture
def out():
    return io.StringIO()


@pytest.fixture
def ctx(wild_topo, clock, metrics, out):
    discovery = StaticDiscovery({("ks", "0"): [ReplicaAlias("nyc", 1)]})
    return commands.CommandContext(store=wild_topo, discovery=discovery, clock=clock, metrics=metrics, out=out)


@pytest.mark.asyncio
async def test_purge_with_wildcards(ctx, wild_topo):
    for shard in ("0", "1"):
        wild_topo.put_action(f"{KS}/ks/shards/{shard}/action", state="completed")
    running = wild_topo.put_action(f"{KS}/ks/shards/1/action", state="running")

    err = await commands.purge_actions(ctx, [f"{KS}/*/shards/*/action"])

    assert err is None
    assert wild_topo.children(f"{KS}/ks/shards/0/action") == []
    assert wild_topo.children(f"{KS}/ks/shards/1/action") == [running.rsplit("/", 1)[1]]


@pytest.mark.asyncio
async def test_pattern_matching_nothing_is_success(ctx, out):
    assert await commands.purge_actions(ctx, [f"{KS}/nothing*/shards/*/action"]) is None
    assert await commands.stale_actions(ctx, [f"{KS}/nothing*/action"]) is None
    assert out.getvalue() == ""


@pytest.mark.asyncio
async def test_stale_prints_one_line_per_action(ctx, wild_topo, clock, out):
    p1 = wild_topo.put_action(f"{KS}/ks/shards/0/action", kind="Snapshot", target="ks/0", mtime_ms=START_MS)
    p2 = wild_topo.put_action(f"{KS}/ks/shards/1/action", kind="Backfill", mtime_ms=START_MS)
    clock.advance_ms(10 * MIN)

    err = await commands.stale_actions(ctx, [f"{KS}/ks/shards/*/action"], max_staleness_ms=MIN)

    assert err is None
    assert out.getvalue().splitlines() == [
        f"{p1} Snapshot pending -",
        f"{p2} Backfill pending -",
    ]


@pytest.mark.asyncio
async def test_failures_surface_as_error_string(ctx, wild_topo):
    for shard in ("0", "1", "2"):
        wild_topo.put_action(f"{KS}/ks/shards/{shard}/actionlog")
    wild_topo.fail_paths.add(f"{KS}/ks/shards/2/actionlog")

    err = await commands.prune_action_logs(ctx, [f"{KS}/ks/shards/*/actionlog"], keep_count=0)

    assert err == "1 of 3 paths failed, check the log"
    assert wild_topo.children(f"{KS}/ks/shards/0/actionlog") == []


@pytest.mark.asyncio
async def test_list_shard_actions_prints_sorted(ctx, wild_topo, out):
    layout = StoreLayout.from_config(ctx.cfg)
    replica = wild_topo.put_action(layout.replica_action_path(ReplicaAlias("nyc", 1)), kind="Snapshot")
    shard = wild_topo.put_action(layout.shard_action_path("ks", "0"), kind="ReparentShard", state="running")

    assert await commands.list_shard_actions(ctx, "ks/0") is None

    lines = out.getvalue().splitlines()
    assert [line.split(" ", 1)[0] for line in lines] == sorted([replica, shard])


@pytest.mark.asyncio
async def test_list_shard_actions_returns_store_errors(ctx, wild_topo, clock, metrics, out):
    layout = StoreLayout.from_config(ctx.cfg)
    shard_dir = layout.shard_action_path("ks", "0")
    wild_topo.put_action(shard_dir)
    wild_topo.fail_paths.add(shard_dir)

    err = await commands.list_shard_actions(ctx, "ks/0")

    assert isinstance(err, str)
    assert shard_dir in err
    assert out.getvalue() == ""

    down = commands.CommandContext(
        store=wild_topo, discovery=StaticDiscovery({}, fail=True), clock=clock, metrics=metrics, out=out
    )
    wild_topo.fail_paths.clear()
    assert await commands.list_shard_actions(down, "ks/0") == "discovery backend down"


@pytest.mark.asyncio
async def test_argument_errors(ctx, topo, metrics):
    with pytest.raises(ConfigurationError):
        await commands.purge_actions(ctx, [])
    with pytest.raises(ConfigurationError):
        await commands.prune_action_logs(ctx, [])
    with pytest.raises(ConfigurationError):
        await commands.list_shard_actions(ctx, "not-a-shard")

    no_discovery = commands.CommandContext(store=topo, metrics=metrics)
    with pytest.raises(ConfigurationError):
        await commands.list_shard_actions(no_discovery, "ks/0")


@pytest.mark.asyncio
async def test_strict_wildcards_need_capable_store(topo, metrics):
    strict = commands.CommandContext(store=topo, cfg=ActionsConfig(strict_wildcards=True), metrics=metrics)
    with pytest.raises(ConfigurationError):
        await commands.purge_actions(strict, [f"{KS}/*/shards/*/action"])
