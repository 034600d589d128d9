import logging
from datetime import datetime
from enum import Enum
from typing import NamedTuple

from adlinkcrawl.domain.analysis_status import AnalysisStatus
from adlinkcrawl.domain.options import Options
from adlinkcrawl.utils.datetime_utils import whole_days_between

logger = logging.getLogger(__name__)


class LifecycleAction(str, Enum):
    START = "start"
    RESUME = "resume"
    SKIP = "skip"


class LifecycleDecision(NamedTuple):
    action: LifecycleAction
    status: AnalysisStatus


def decide(status: AnalysisStatus, frequency_days: int, now: datetime) -> LifecycleAction:
    """Choose what this invocation does from the persisted status alone."""
    if not status.has_ever_run:
        return LifecycleAction.START
    if status.is_in_progress:
        return LifecycleAction.RESUME
    if whole_days_between(status.date_started, now) < int(frequency_days):
        return LifecycleAction.SKIP
    return LifecycleAction.START


class AnalysisLifecycle:
    """Starts, resumes or skips an analysis cycle.

    Starting a cycle after a finished one clears every completion label
    (fleet and entity level) and archives the previous report rows.
    """

    def __init__(self, *, status_repo, results_repo, account_store):
        self.status_repo = status_repo
        self.results_repo = results_repo
        self.account_store = account_store

    def begin(self, options: Options, now: datetime) -> LifecycleDecision:
        status = self.status_repo.load()
        action = decide(status, options.frequency_days, now)

        if action is LifecycleAction.SKIP:
            logger.info(
                "Last analysis started %s and finished %s; next one due after %d day(s)",
                status.date_started,
                status.date_completed,
                options.frequency_days,
            )
            return LifecycleDecision(action, status)

        if action is LifecycleAction.RESUME:
            logger.info("Resuming analysis started %s", status.date_started)
            return LifecycleDecision(action, status)

        if status.has_ever_run:
            logger.info("Clearing label %s from accounts and entities", options.label_name)
            self.account_store.clear_labels(options.label_name)
        archived = self.results_repo.archive_all()
        if archived:
            logger.info("Archived %d result rows from the previous analysis", archived)
        status = status.started(now)
        self.status_repo.save(status)
        logger.info("Started new analysis at %s", now)
        return LifecycleDecision(action, status)
