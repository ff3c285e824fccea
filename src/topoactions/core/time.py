from __future__ import annotations

"""
topoactions.core.time
=====================

Clock abstractions:
- Clock Protocol, injected wherever "now" matters (staleness checks).
- SystemClock: production default.
- ManualClock: deterministic time control for tests.
"""

import time
from datetime import UTC, datetime
from typing import Protocol

from .types import Millis, TimestampMs


class Clock(Protocol):
    def now_dt(self) -> datetime: ...
    def now_ms(self) -> TimestampMs: ...


class SystemClock:
    """Wall-clock time from the host."""

    def now_dt(self) -> datetime:
        return datetime.now(UTC)

    def now_ms(self) -> TimestampMs:
        """Epoch milliseconds, comparable with store modification times."""
        return time.time_ns() // 1_000_000


class ManualClock(SystemClock):
    """
    Controllable clock for tests: starts at `start_ms` and only moves when
    `advance_ms` is called.
    """

    def __init__(self, start_ms: Millis = 0) -> None:
        self._wall: Millis = start_ms

    def now_dt(self) -> datetime:
        return datetime.fromtimestamp(self._wall / 1000.0, tz=UTC)

    def now_ms(self) -> TimestampMs:
        return self._wall

    def advance_ms(self, ms: Millis) -> None:
        self._wall += max(0, int(ms))
