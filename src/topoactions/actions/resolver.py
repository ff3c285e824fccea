# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

from ..api.errors import ConfigurationError
from ..core.log import get_logger, warn_once
from ..storage.topo import TopoStore, WildcardResolver
from ..storage.wildcards import has_wildcards


class PathResolver:
    """
    Expands operator path patterns into concrete store paths.

    Uses the store's `resolve_wildcards` when it has one; otherwise patterns
    pass through unchanged, unless `strict` is set and a pattern actually
    needs expansion, which raises ConfigurationError.
    """

    def __init__(self, store: TopoStore, *, strict: bool = False) -> None:
        self.store = store
        self.strict = strict
        self.log = get_logger("actions.resolver")

    @property
    def can_expand(self) -> bool:
        return isinstance(self.store, WildcardResolver)

    async def resolve(self, patterns: list[str]) -> list[str]:
        if not patterns:
            return []

        if not self.can_expand:
            wild = [p for p in patterns if has_wildcards(p)]
            if wild and self.strict:
                raise ConfigurationError(
                    f"store {type(self.store).__name__} cannot expand wildcards: {', '.join(wild)}"
                )
            if wild:
                warn_once(
                    self.log,
                    "resolver.no_wildcard_capability",
                    "store cannot expand wildcards; using patterns verbatim",
                    store=type(self.store).__name__,
                )
            return _dedup(patterns)

        out: list[str] = []
        # patterns are expanded one at a time so an empty match stays local to its pattern
        for pattern in patterns:
            matched = await self.store.resolve_wildcards([pattern])
            if not matched:
                self.log.info("pattern matched nothing", event="resolver.no_match", pattern=pattern)
            out.extend(matched)
        return _dedup(out)


def _dedup(paths: list[str]) -> list[str]:
    return list(dict.fromkeys(paths))
