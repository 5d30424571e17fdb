"""Injectable wall clock (epoch milliseconds)."""

import time
from collections.abc import Callable

Clock = Callable[[], float]


def system_clock() -> float:
    """Current time in epoch milliseconds."""
    return time.time() * 1000
