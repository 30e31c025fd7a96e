"""Clocks used to timestamp checkpoints."""

import time
from typing import Optional


class SystemClock:
    """Wall-clock time in whole unix seconds."""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: Optional[int] = None):
        self._now = int(time.time()) if start is None else start

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        self._now += seconds
        return self._now

    def set(self, timestamp: int) -> None:
        self._now = timestamp
