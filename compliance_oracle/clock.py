"""
Logical clock.

The engine never reads wall-clock time. Every timestamp it records is a
block height supplied by the host through a clock object, which must be
monotonically non-decreasing.
"""

import threading
from abc import ABC, abstractmethod


class LogicalClock(ABC):
    """Source of the current block height."""

    @abstractmethod
    def now(self) -> int:
        pass


class ManualClock(LogicalClock):
    """
    Host-driven clock for embedding and tests.

    Usage:
        clock = ManualClock(100)
        clock.advance(10)      # height 110
        clock.advance_to(500)  # height 500
    """

    def __init__(self, height: int = 0):
        if height < 0:
            raise ValueError("block height must be non-negative")
        self._height = height
        self._lock = threading.Lock()

    def now(self) -> int:
        with self._lock:
            return self._height

    def advance(self, blocks: int = 1) -> int:
        if blocks < 0:
            raise ValueError("clock cannot move backwards")
        with self._lock:
            self._height += blocks
            return self._height

    def advance_to(self, height: int) -> int:
        with self._lock:
            if height < self._height:
                raise ValueError(f"clock cannot move backwards: {height} < {self._height}")
            self._height = height
            return self._height
