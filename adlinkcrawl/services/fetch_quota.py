import logging
import threading
import time
from collections import deque
from datetime import date
from typing import Callable, Deque, Optional

from adlinkcrawl.exceptions import DailyQuotaExceededError, RateLimitedError

logger = logging.getLogger(__name__)


class FetchQuota:
    """Process-wide fetch allowance shared by every account worker.

    Enforces a short-term calls-per-second cap and a per-day cap. Either
    limit may be None to disable it. `acquire()` raises instead of blocking;
    the checker decides whether to back off or give up.
    """

    def __init__(
        self,
        *,
        per_second: Optional[int] = None,
        per_day: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
        today: Callable[[], date] = date.today,
    ):
        self.per_second = per_second if per_second and per_second > 0 else None
        self.per_day = per_day if per_day and per_day > 0 else None
        self._clock = clock
        self._today = today
        self._lock = threading.Lock()
        self._recent: Deque[float] = deque()
        self._day: Optional[date] = None
        self._day_count = 0

    def acquire(self) -> None:
        with self._lock:
            day = self._today()
            if day != self._day:
                self._day = day
                self._day_count = 0
            if self.per_day is not None and self._day_count >= self.per_day:
                logger.warning("Daily fetch quota exhausted (%d fetches)", self._day_count)
                raise DailyQuotaExceededError(f"daily fetch quota of {self.per_day} used")

            now = self._clock()
            while self._recent and now - self._recent[0] >= 1.0:
                self._recent.popleft()
            if self.per_second is not None and len(self._recent) >= self.per_second:
                raise RateLimitedError(f"more than {self.per_second} fetches in one second")

            self._recent.append(now)
            self._day_count += 1

    @property
    def used_today(self) -> int:
        with self._lock:
            return self._day_count
