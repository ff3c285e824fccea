from __future__ import annotations

try:
    from importlib.metadata import version as _pkg_version

    __version__ = _pkg_version("topoactions")
except Exception:  # pragma: no cover
    # source checkout without installed metadata
    __version__ = "0.0.0"

from .actions.manager import ActionLogManager, BatchResult
from .actions.resolver import PathResolver
from .actions.shard import ShardActionAggregator
from .core.config import ActionsConfig

__all__ = [
    "ActionLogManager",
    "ActionsConfig",
    "BatchResult",
    "PathResolver",
    "ShardActionAggregator",
    "__version__",
]
