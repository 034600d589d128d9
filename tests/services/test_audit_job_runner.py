import threading
from datetime import datetime
from unittest.mock import Mock

import pytest

from adlinkcrawl.domain.analysis_status import AnalysisStatus
from adlinkcrawl.domain.crawl_result import FleetCrawlResult
from adlinkcrawl.domain.options import Options
from adlinkcrawl.domain.url_check_result import EntityType, UrlCheckResult
from adlinkcrawl.exceptions import ConfigurationError
from adlinkcrawl.services.analysis_lifecycle import LifecycleAction, LifecycleDecision
from adlinkcrawl.services.notification_service import NotificationEvent, NotificationKind
from adlinkcrawl.services.audit_job_runner import AuditJobRunner

NOW = datetime(2024, 6, 10, 9, 0)
STARTED = AnalysisStatus(date_started=datetime(2024, 6, 10, 8, 0))


def _r(outcome):
    return UrlCheckResult("acc", NOW, "https://e.com", outcome, EntityType.AD, ad_text="Ad")


def _runner(action=LifecycleAction.RESUME, fleet=None, num_errors=0, event=None, options=None):
    options = options or Options()
    deps = dict(
        options_service=Mock(load=Mock(return_value=options)),
        lifecycle=Mock(begin=Mock(return_value=LifecycleDecision(action, STARTED))),
        orchestrator=Mock(run=Mock(return_value=fleet or FleetCrawlResult([], False, 0, 0))),
        reporter=Mock(count_errors=Mock(return_value=num_errors)),
        notifications=Mock(after_run=Mock(return_value=event)),
        status_repo=Mock(),
        budget_factory=Mock(return_value="budget"),
    )
    return AuditJobRunner(now=lambda: NOW, **deps), deps


def test_incomplete_run_records_results_without_completing():
    fleet = FleetCrawlResult([_r(200), _r(404)], False, 2, 1)
    runner, deps = _runner(fleet=fleet, num_errors=1)

    summary = runner.run()

    assert summary.action is LifecycleAction.RESUME
    assert summary.urls_checked == 2
    assert not summary.did_complete
    deps["orchestrator"].run.assert_called_once_with(deps["options_service"].load.return_value, "budget")
    deps["reporter"].record.assert_called_once_with(fleet.results, deps["options_service"].load.return_value)
    saved = deps["status_repo"].save.call_args[0][0]
    assert saved.date_completed is None
    assert saved.num_errors == 1
    _, kwargs = deps["notifications"].after_run.call_args
    assert kwargs["new_errors"] == 1


def test_complete_run_sets_completion_and_email_dates():
    fleet = FleetCrawlResult([_r(500)], True, 1, 1)
    event = NotificationEvent(NotificationKind.FINAL, 1, "https://r", ("a@b.c",))
    runner, deps = _runner(fleet=fleet, num_errors=1, event=event)

    summary = runner.run()

    assert summary.did_complete
    assert summary.notification is NotificationKind.FINAL
    saved = deps["status_repo"].save.call_args[0][0]
    assert saved.date_completed == NOW
    assert saved.date_emailed == NOW


def test_skip_does_no_work():
    runner, deps = _runner(action=LifecycleAction.SKIP)

    summary = runner.run()

    assert summary.action is LifecycleAction.SKIP
    deps["orchestrator"].run.assert_not_called()
    deps["status_repo"].save.assert_not_called()


def test_budget_created_before_options_load():
    runner, deps = _runner()
    order = []
    deps["budget_factory"].side_effect = lambda: order.append("budget")
    deps["options_service"].load.side_effect = lambda: order.append("options") or Options()

    runner.run()

    assert order == ["budget", "options"]


def test_configuration_error_propagates():
    runner, deps = _runner()
    deps["options_service"].load.side_effect = ConfigurationError("placeholder report url")

    with pytest.raises(ConfigurationError):
        runner.run()
    assert not runner.is_running


def test_overlapping_invocation_is_skipped():
    runner, deps = _runner()
    entered = threading.Event()
    release = threading.Event()

    def slow_run(options, budget):
        entered.set()
        release.wait(5)
        return FleetCrawlResult([], False, 0, 0)

    deps["orchestrator"].run.side_effect = slow_run
    t = threading.Thread(target=runner.run)
    t.start()
    assert entered.wait(5)

    assert runner.is_running
    assert runner.run() is None

    release.set()
    t.join(5)
    assert deps["orchestrator"].run.call_count == 1
