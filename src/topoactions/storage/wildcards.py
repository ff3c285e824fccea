# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Wildcard expansion on top of `get_children`.

Backends that can list children but have no native pattern support can
implement `WildcardResolver` by delegating to `resolve_by_listing`.
Segments containing `*`, `?` or `[` are matched with fnmatch semantics
(case-sensitive, never crossing a `/`). Plain segments are appended as-is.
"""

import posixpath
from fnmatch import fnmatchcase

from ..api.errors import NotFoundError
from ..core.log import get_logger
from ..core.types import WILDCARD_CHARS
from .topo import TopoStore

__all__ = ["has_wildcards", "resolve_by_listing", "resolve_all_by_listing"]

_log = get_logger("storage.wildcards")


def has_wildcards(pattern: str) -> bool:
    return any(c in pattern for c in WILDCARD_CHARS)


async def resolve_by_listing(store: TopoStore, pattern: str) -> list[str]:
    """
    Expand one pattern into concrete paths, in sorted order.
    A missing intermediate node simply yields no matches.
    """
    if not has_wildcards(pattern):
        return [pattern]
    if not pattern.startswith("/"):
        raise ValueError(f"wildcard pattern must be absolute: {pattern!r}")

    prefixes = ["/"]
    for segment in (s for s in pattern.split("/") if s):
        if not has_wildcards(segment):
            prefixes = [posixpath.join(p, segment) for p in prefixes]
            continue
        expanded: list[str] = []
        for prefix in prefixes:
            try:
                children = await store.get_children(prefix)
            except NotFoundError:
                continue
            expanded.extend(posixpath.join(prefix, c) for c in sorted(children) if fnmatchcase(c, segment))
        prefixes = expanded
        if not prefixes:
            break

    _log.debug("wildcard expanded", event="wildcards.expanded", pattern=pattern, matches=len(prefixes))
    return prefixes


async def resolve_all_by_listing(store: TopoStore, patterns: list[str]) -> list[str]:
    out: list[str] = []
    for pattern in patterns:
        out.extend(await resolve_by_listing(store, pattern))
    return out
