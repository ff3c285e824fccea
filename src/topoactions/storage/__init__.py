# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Backend-agnostic coordination store interfaces and helpers.
"""

from .layout import StoreLayout, parse_shard_param
from .topo import NodeData, ReplicaAlias, ReplicaDiscovery, TopoStore, WildcardResolver
from .wildcards import has_wildcards, resolve_all_by_listing, resolve_by_listing

__all__ = [
    # topo
    "NodeData",
    "ReplicaAlias",
    "ReplicaDiscovery",
    "TopoStore",
    "WildcardResolver",
    # layout
    "StoreLayout",
    "parse_shard_param",
    # wildcards
    "has_wildcards",
    "resolve_by_listing",
    "resolve_all_by_listing",
]
