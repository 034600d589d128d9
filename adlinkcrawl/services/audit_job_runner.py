import logging
import threading
from dataclasses import replace
from datetime import datetime
from typing import Callable, NamedTuple, Optional

from adlinkcrawl.domain.execution_budget import ExecutionBudget
from adlinkcrawl.services.analysis_lifecycle import LifecycleAction
from adlinkcrawl.services.notification_service import NotificationKind
from adlinkcrawl.utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)


class AuditRunSummary(NamedTuple):
    action: LifecycleAction
    accounts_processed: int = 0
    accounts_completed: int = 0
    urls_checked: int = 0
    num_errors: int = 0
    did_complete: bool = False
    notification: Optional[NotificationKind] = None


class AuditJobRunner:
    """Runs one audit invocation end to end.

    Loads options, advances the analysis lifecycle, crawls a batch of
    accounts, writes the report and sends notifications. Only one invocation
    runs at a time per process; overlapping calls return None.
    Configuration errors propagate to the caller.
    """

    def __init__(
        self,
        *,
        options_service,
        lifecycle,
        orchestrator,
        reporter,
        notifications,
        status_repo,
        budget_factory: Callable[[], ExecutionBudget],
        now: Callable[[], datetime] = utc_now,
    ):
        self.options_service = options_service
        self.lifecycle = lifecycle
        self.orchestrator = orchestrator
        self.reporter = reporter
        self.notifications = notifications
        self.status_repo = status_repo
        self.budget_factory = budget_factory
        self.now = now
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def run(self) -> Optional[AuditRunSummary]:
        if not self._lock.acquire(blocking=False):
            logger.warning("Audit already running; skipping this invocation")
            return None
        try:
            return self._run()
        finally:
            self._lock.release()

    def _run(self) -> AuditRunSummary:
        # the budget clock starts with the invocation
        budget = self.budget_factory()
        options = self.options_service.load()
        decision = self.lifecycle.begin(options, self.now())
        if decision.action is LifecycleAction.SKIP:
            return AuditRunSummary(action=decision.action, did_complete=True)

        fleet = self.orchestrator.run(options, budget)
        self.reporter.record(fleet.results, options)
        num_errors = self.reporter.count_errors(options)
        new_errors = sum(1 for r in fleet.results if not options.is_valid_code(r.response_outcome))

        status = replace(decision.status, num_errors=num_errors)
        if fleet.did_complete:
            status = status.completed(self.now())
            logger.info("Analysis complete: %d error(s) in total", num_errors)

        event = self.notifications.after_run(
            did_complete=fleet.did_complete,
            num_errors=num_errors,
            new_errors=new_errors,
            options=options,
        )
        if event is not None:
            status = status.emailed(self.now())
        self.status_repo.save(status)

        return AuditRunSummary(
            action=decision.action,
            accounts_processed=fleet.accounts_processed,
            accounts_completed=fleet.accounts_completed,
            urls_checked=len(fleet.results),
            num_errors=num_errors,
            did_complete=fleet.did_complete,
            notification=event.kind if event is not None else None,
        )
