"""
Time budget handling for the search loops.

Engines never read the wall clock directly. They receive a clock (any
zero-argument callable returning seconds) and wrap it in a Deadline that is
checked once per outer loop iteration. Tests pass a fake clock to simulate
an expired budget without sleeping.
"""
import time
from typing import Callable

Clock = Callable[[], float]
"""Zero-argument callable returning monotonic seconds."""


def default_clock() -> float:
    """Monotonic clock used when no clock is injected."""
    return time.perf_counter()


class Deadline:
    """
    A time budget started at construction.

    Args:
        budget: Budget in seconds
        clock: Clock used to measure elapsed time
    """

    def __init__(self, budget: float, clock: Clock = default_clock):
        self.budget = budget
        self.clock = clock
        self.start = clock()
        self.last_reading = self.start

    def elapsed(self) -> float:
        """Seconds spent since the deadline started (reads the clock)."""
        self.last_reading = self.clock()
        return self.last_reading - self.start

    def expired(self) -> bool:
        """Whether the budget is used up (reads the clock)."""
        return self.elapsed() >= self.budget

    def __repr__(self) -> str:
        return f"Deadline(budget={self.budget}, spent={self.last_reading - self.start:.4f})"
