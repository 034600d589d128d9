import time
from typing import Callable


class ExecutionBudget:
    """Wall-clock allowance for one invocation.

    The host kills jobs that run past `limit_seconds`; callers compare the
    remaining time against a safety buffer at each tagging boundary.
    """

    def __init__(self, limit_seconds: float, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._deadline = clock() + float(limit_seconds)

    def remaining_seconds(self) -> float:
        return self._deadline - self._clock()

    def is_exhausted(self, buffer_seconds: float) -> bool:
        return self.remaining_seconds() < buffer_seconds
