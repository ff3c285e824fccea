from __future__ import annotations

"""
topoactions.core.utils
======================

Low-level helpers with no external dependencies.
"""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


async def gather_all(*aws: Awaitable[T]) -> list[T]:
    """
    Run awaitables concurrently and wait for **all** of them, then re-raise the
    first failure (in argument order), if any.

    Unlike a bare `asyncio.gather`, no sibling is left running in the
    background when one of them fails.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    for r in results:
        if isinstance(r, BaseException):
            raise r
    return list(results)
