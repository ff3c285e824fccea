from __future__ import annotations

"""
topoactions.core.types
======================

Shared type aliases and small constants. Keep this module tiny and
dependency-free; do not import application models here.
"""

import os
from pathlib import Path
from typing import Any, Final, Union

# ---- JSON-like values --------------------------------------------------------

JSONDict = dict[str, Any]

# Paths on the local filesystem (config files)
StrPath = Union[str, os.PathLike[str], Path]

# ---- Time & IDs --------------------------------------------------------------

Millis = int
Seconds = float
TimestampMs = int  # wall-clock epoch timestamp (ms)

StorePath = str  # absolute path inside the coordination store
Keyspace = str
ShardName = str
CellName = str

# ---- Constants ---------------------------------------------------------------

# Characters that make a store path segment a wildcard pattern.
WILDCARD_CHARS: Final[str] = "*?["

DEFAULT_MAX_STALENESS_SEC: Final[int] = 5 * 60
DEFAULT_KEEP_COUNT: Final[int] = 10


__all__ = [
    "JSONDict",
    "StrPath",
    "Millis",
    "Seconds",
    "TimestampMs",
    "StorePath",
    "Keyspace",
    "ShardName",
    "CellName",
    "WILDCARD_CHARS",
    "DEFAULT_MAX_STALENESS_SEC",
    "DEFAULT_KEEP_COUNT",
]
