# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Action node model and codec
===========================

An action node is the bookkeeping record the orchestration system writes when
an administrative action starts. This module only reads such records:

    {"kind": "...", "state": "pending|running|completed|failed|stale-candidate",
     "target": "...", "createdAt": ..., "args": {...}}

Design principles:
- Pydantic v2 model with `extra="ignore"`: action kinds added later may carry
  fields we do not know about, and must still decode.
- `path` and `mtime_ms` come from the store, never from the payload.
- `purgeable` and `stale` are pure predicates over decoded state.
"""

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..api.errors import DecodeError

__all__ = [
    "ActionState",
    "ActionNode",
    "TERMINAL_STATES",
    "decode_action",
    "encode_action",
    "format_action",
    "is_terminal",
    "purgeable",
    "stale",
]


class ActionState(str, Enum):
    """Declared state of an action as written by its creator."""

    pending = "pending"
    running = "running"
    completed = "completed"
    failed = "failed"
    stale_candidate = "stale-candidate"


TERMINAL_STATES = frozenset({ActionState.completed, ActionState.failed})

# Assigned from the store, never read from the payload.
_STORE_FIELDS = ("path", "mtime_ms")


class ActionNode(BaseModel):
    """
    Decoded action record.

    Fields:
        path: Unique store path of the node.
        mtime_ms: Store-supplied modification time (epoch ms).
        kind: Action kind, e.g. "ReparentShard" (free-form, forward compatible).
        state: Declared state; empty/missing means pending.
        target: Identifier of the object acted upon (shard, tablet alias, ...).
        created_at: Creation marker as written by the creator (epoch ms or ISO string).
        args: Creation arguments (opaque).
        guid: Optional action guid.
        error: Optional error text for failed actions.
        pid: Optional process id of the actor that ran the action.
        reply: Optional opaque result payload.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    path: str = ""
    mtime_ms: int = 0

    kind: str = ""
    state: ActionState = ActionState.pending
    target: str | None = None
    created_at: Any = Field(default=None, alias="createdAt")
    args: Any = Field(default_factory=dict)

    guid: str | None = None
    error: str | None = None
    pid: Any = None
    reply: Any = None

    @field_validator("state", mode="before")
    @classmethod
    def _empty_state_is_pending(cls, v: Any) -> Any:
        if v is None or v == "":
            return ActionState.pending
        return v

    @field_validator("args", mode="before")
    @classmethod
    def _null_args(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("kind", "target", "guid", "error", mode="before")
    @classmethod
    def _text(cls, v: Any) -> Any:
        # creators of newer action kinds may write numbers or objects here
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, (dict, list)):
            return json.dumps(v, sort_keys=True, separators=(",", ":"))
        return str(v)


# --------------------------------------------------------------------------- #
# Codec
# --------------------------------------------------------------------------- #


def decode_action(raw: bytes | str, path: str, mtime_ms: int = 0) -> ActionNode:
    """
    Decode a raw node payload. Raises DecodeError on malformed input.
    """
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = bytes(raw).decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(path, f"payload is not utf-8: {e}") from e
    if not raw.strip():
        raise DecodeError(path, "empty payload")
    try:
        obj = json.loads(raw)
    except json.JSONDecodeError as e:
        raise DecodeError(path, f"invalid json: {e}") from e
    if not isinstance(obj, dict):
        raise DecodeError(path, f"payload must be a JSON object, got {type(obj).__name__}")

    payload = {k: v for k, v in obj.items() if k not in _STORE_FIELDS}
    try:
        return ActionNode.model_validate({**payload, "path": path, "mtime_ms": int(mtime_ms)})
    except ValidationError as e:
        raise DecodeError(path, str(e)) from e


def encode_action(node: ActionNode) -> bytes:
    """Serialize to the persisted JSON shape (store fields excluded)."""
    body = node.model_dump(mode="json", by_alias=True, exclude=set(_STORE_FIELDS), exclude_none=True)
    return json.dumps(body, sort_keys=True, separators=(",", ":")).encode("utf-8")


# --------------------------------------------------------------------------- #
# Predicates
# --------------------------------------------------------------------------- #


def is_terminal(node: ActionNode) -> bool:
    return node.state in TERMINAL_STATES


def purgeable(node: ActionNode) -> bool:
    """Everything except an action that is currently running may be removed."""
    return node.state is not ActionState.running


def stale(node: ActionNode, now_ms: int, max_staleness_ms: int) -> bool:
    """
    True iff the node is non-terminal and was last modified more than
    `max_staleness_ms` before `now_ms`.
    """
    if is_terminal(node):
        return False
    return now_ms - node.mtime_ms > max_staleness_ms


def format_action(node: ActionNode) -> str:
    """One-line operator dump: path kind state guid [error]; missing fields print as "-"."""
    parts = [node.path, node.kind or "-", node.state.value, node.guid or "-"]
    if node.error:
        parts.append(node.error)
    return " ".join(parts)
