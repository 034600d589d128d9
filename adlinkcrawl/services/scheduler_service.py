from typing import Optional
import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from adlinkcrawl.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

JOB_ID = "audit"


class SchedulerService:
    """Invokes the audit job runner on a fixed interval."""

    def __init__(self, job_runner, interval_minutes: int = 60):
        self.job_runner = job_runner
        self.interval_minutes = int(interval_minutes)
        self._sched: Optional[BackgroundScheduler] = None

    def start(self):
        if self._sched is not None:
            return
        self._sched = BackgroundScheduler()
        self._sched.start()
        self._sched.add_job(
            self._execute_audit,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id=JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        logger.info("Scheduler started; audit runs every %s minute(s)", self.interval_minutes)

    def shutdown(self, wait: bool = True):
        if not self._sched:
            return
        try:
            self._sched.shutdown(wait=wait)
            logger.info("Scheduler shut down")
        finally:
            self._sched = None

    def _execute_audit(self):
        try:
            summary = self.job_runner.run()
            if summary is not None:
                logger.info("Scheduled audit finished: %s", summary)
        except ConfigurationError:
            logger.exception("Scheduled audit aborted by a configuration error")
        except Exception:
            logger.exception("Scheduled audit failed")
