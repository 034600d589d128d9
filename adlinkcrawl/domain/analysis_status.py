from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class AnalysisStatus:
    """Persisted timestamps describing the current analysis cycle.

    `num_errors` is derived from the report sink and is not stored.
    """

    date_started: Optional[datetime] = None
    date_completed: Optional[datetime] = None
    date_emailed: Optional[datetime] = None
    num_errors: int = 0

    @property
    def has_ever_run(self) -> bool:
        return self.date_started is not None

    @property
    def is_in_progress(self) -> bool:
        if self.date_started is None:
            return False
        return self.date_completed is None or self.date_started > self.date_completed

    def started(self, now: datetime) -> "AnalysisStatus":
        return replace(self, date_started=now, date_completed=None, num_errors=0)

    def completed(self, now: datetime) -> "AnalysisStatus":
        return replace(self, date_completed=now)

    def emailed(self, now: datetime) -> "AnalysisStatus":
        return replace(self, date_emailed=now)
