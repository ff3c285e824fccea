from __future__ import annotations

import json

import pytest

from topoactions.actions.node import (
    ActionNode,
    ActionState,
    decode_action,
    encode_action,
    format_action,
    is_terminal,
    purgeable,
    stale,
)
from topoactions.api.errors import DecodeError

pytestmark = [pytest.mark.unit]

PATH = "/zk/global/vt/keyspaces/ks/shards/0/action/0000000001"


def _raw(**fields) -> bytes:
    return json.dumps(fields).encode("utf-8")


def test_decode_full_record():
    raw = _raw(kind="ReparentShard", state="running", target="ks/0", createdAt=1234, args={"force": True}, guid="g1")
    node = decode_action(raw, PATH, mtime_ms=99)
    assert node.path == PATH
    assert node.mtime_ms == 99
    assert node.kind == "ReparentShard"
    assert node.state is ActionState.running
    assert node.target == "ks/0"
    assert node.created_at == 1234
    assert node.args == {"force": True}
    assert node.guid == "g1"


def test_decode_tolerates_missing_and_unknown_fields():
    node = decode_action(_raw(kind="Snapshot", future_field={"x": 1}), PATH)
    assert node.state is ActionState.pending
    assert node.args == {}
    assert node.target is None
    assert not hasattr(node, "future_field")


def test_empty_state_means_pending():
    assert decode_action(_raw(kind="Ping", state=""), PATH).state is ActionState.pending
    assert decode_action(_raw(kind="Ping", state=None, args=None), PATH).args == {}


def test_store_fields_are_not_taken_from_payload():
    node = decode_action(_raw(kind="Ping", path="/elsewhere", mtime_ms=5), PATH, mtime_ms=7)
    assert node.path == PATH
    assert node.mtime_ms == 7


def test_stale_candidate_wire_value():
    node = decode_action(_raw(kind="Ping", state="stale-candidate"), PATH)
    assert node.state is ActionState.stale_candidate


@pytest.mark.parametrize(
    "raw",
    [
        b"",
        b"   ",
        b"{not json",
        b"[1, 2]",
        b"\xff\xfe",
        json.dumps({"kind": "Ping", "state": "exploded"}).encode(),
    ],
)
def test_decode_rejects_malformed(raw):
    with pytest.raises(DecodeError) as ei:
        decode_action(raw, PATH)
    assert ei.value.path == PATH


@pytest.mark.parametrize(
    "extra,attr,expected",
    [
        ({"target": 31337}, "target", "31337"),
        ({"reply": "ok"}, "reply", "ok"),
        ({"args": ["a", "b"]}, "args", ["a", "b"]),
        ({"createdAt": 1.5}, "created_at", 1.5),
    ],
)
def test_decode_accepts_loosely_typed_fields(extra, attr, expected):
    node = decode_action(_raw(kind="Ping", state="completed", **extra), PATH)
    assert node.state is ActionState.completed
    assert getattr(node, attr) == expected
    assert purgeable(node)


def test_encode_uses_persisted_shape():
    node = ActionNode(path=PATH, mtime_ms=1, kind="Ping", state=ActionState.stale_candidate, created_at=10)
    body = json.loads(encode_action(node))
    assert body == {"kind": "Ping", "state": "stale-candidate", "createdAt": 10, "args": {}}
    assert decode_action(encode_action(node), PATH, 1) == node


def test_purgeable_only_protects_running():
    for state in ActionState:
        node = ActionNode(path=PATH, state=state)
        assert purgeable(node) is (state is not ActionState.running)


def test_terminal_states():
    assert is_terminal(ActionNode(state=ActionState.completed))
    assert is_terminal(ActionNode(state=ActionState.failed))
    assert not is_terminal(ActionNode(state=ActionState.pending))
    assert not is_terminal(ActionNode(state=ActionState.stale_candidate))


@pytest.mark.parametrize(
    "state,age,expected",
    [
        (ActionState.pending, 301, True),
        (ActionState.pending, 300, False),
        (ActionState.pending, 10, False),
        (ActionState.running, 1000, True),
        (ActionState.stale_candidate, 301, True),
        (ActionState.completed, 1000, False),
        (ActionState.failed, 1000, False),
    ],
)
def test_stale_predicate(state, age, expected):
    node = ActionNode(path=PATH, state=state, mtime_ms=1_000)
    assert stale(node, now_ms=1_000 + age, max_staleness_ms=300) is expected


def test_format_action_line():
    node = ActionNode(path=PATH, kind="Ping", state=ActionState.failed, target="ks/0", guid="g", error="boom")
    assert format_action(node) == f"{PATH} Ping failed g boom"
    assert format_action(ActionNode(path=PATH)) == f"{PATH} - pending -"
