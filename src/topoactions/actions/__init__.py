# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Action records: model/codec, path resolution, batch maintenance and shard views.
"""

from .manager import ActionLogManager, BatchResult
from .node import (
    TERMINAL_STATES,
    ActionNode,
    ActionState,
    decode_action,
    encode_action,
    format_action,
    is_terminal,
    purgeable,
    stale,
)
from .resolver import PathResolver
from .shard import ShardActionAggregator

__all__ = [
    # node
    "ActionNode",
    "ActionState",
    "TERMINAL_STATES",
    "decode_action",
    "encode_action",
    "format_action",
    "is_terminal",
    "purgeable",
    "stale",
    # ops
    "ActionLogManager",
    "BatchResult",
    "PathResolver",
    "ShardActionAggregator",
]
