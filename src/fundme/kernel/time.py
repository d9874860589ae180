"""
Block clock abstraction for deterministic execution

Block timestamps are whole seconds and never move backwards. The chain
asks its clock for the time once per block, so every call inside a
transaction observes the same timestamp.
"""

import time
from typing import Protocol


class BlockClock(Protocol):
    """Protocol for block clocks - allows deterministic testing"""

    def now(self) -> int:
        """Return current Unix time in whole seconds"""
        ...


class SystemClock:
    """Production clock using the system time"""

    def now(self) -> int:
        return int(time.time())


class TestClock:
    """
    Controllable clock for deterministic tests

    Allows tests to freeze time and advance it by exact amounts, which
    is how cooldown boundaries are exercised.
    """

    __test__ = False  # not a pytest test class

    def __init__(self, initial_time: int = 1_700_000_000) -> None:
        """
        Initialize with a fixed time

        Args:
            initial_time: Starting Unix time in seconds
        """
        self._current_time = initial_time

    def now(self) -> int:
        return self._current_time

    def set_time(self, timestamp: int) -> None:
        """Set current time to a specific value"""
        self._current_time = timestamp

    def advance_seconds(self, seconds: int) -> None:
        """Advance time by specified seconds"""
        self._current_time += seconds

    def advance_minutes(self, minutes: int) -> None:
        """Advance time by specified minutes"""
        self._current_time += minutes * 60
