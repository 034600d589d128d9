from datetime import datetime
from unittest.mock import Mock

import pytest
from fastapi import BackgroundTasks, HTTPException

from adlinkcrawl.api.routers.analysis import create_analysis_router
from adlinkcrawl.domain.analysis_status import AnalysisStatus
from adlinkcrawl.domain.options import Options
from adlinkcrawl.domain.url_check_result import EntityType, UrlCheckResult
from adlinkcrawl.exceptions import ConfigurationError


def _get_endpoint(router, path: str, method: str):
    for route in router.routes:
        if getattr(route, "path", None) != path:
            continue
        methods = getattr(route, "methods", set())
        if method.upper() in methods:
            return route.endpoint
    raise AssertionError(f"No route found for {method} {path}")


def _router(**overrides):
    deps = dict(
        status_repo=Mock(load=Mock(return_value=AnalysisStatus(date_started=datetime(2024, 1, 1)))),
        results_repo=Mock(list_results=Mock(return_value=[])),
        options_service=Mock(load=Mock(return_value=Options(valid_codes=frozenset({200, 301})))),
        job_runner=Mock(is_running=False),
    )
    deps.update(overrides)
    return create_analysis_router(**deps), deps


def test_status_reports_in_progress():
    router, _ = _router()
    body = _get_endpoint(router, "/analysis/status", "GET")()

    assert body.has_ever_run is True
    assert body.in_progress is True
    assert body.date_started == datetime(2024, 1, 1)


def test_results_are_flattened():
    row = UrlCheckResult("acc", datetime(2024, 1, 1), "https://e.com", 404, EntityType.KEYWORD, keyword_text="shoes")
    router, deps = _router(results_repo=Mock(list_results=Mock(return_value=[row])))

    body = _get_endpoint(router, "/analysis/results", "GET")(errors_only=False, limit=10)

    assert body[0].response == 404
    assert body[0].entity_type == "Keyword"
    assert body[0].keyword_text == "shoes"
    deps["results_repo"].list_results.assert_called_once_with(limit=10, errors_only_for=None)


def test_message_outcome_kept_as_text():
    row = UrlCheckResult("acc", datetime(2024, 1, 1), "https://e.com", "Failure string detected", EntityType.AD, ad_text="Ad")
    router, _ = _router(results_repo=Mock(list_results=Mock(return_value=[row])))

    body = _get_endpoint(router, "/analysis/results", "GET")(errors_only=False, limit=10)

    assert body[0].response == "Failure string detected"
    assert body[0].model_dump()["ad_text"] == "Ad"


def test_errors_only_uses_configured_valid_codes():
    router, deps = _router()

    _get_endpoint(router, "/analysis/results", "GET")(errors_only=True, limit=None)

    deps["results_repo"].list_results.assert_called_once_with(limit=None, errors_only_for=frozenset({200, 301}))


def test_errors_only_with_broken_options_is_conflict():
    router, _ = _router(options_service=Mock(load=Mock(side_effect=ConfigurationError("placeholder"))))

    with pytest.raises(HTTPException) as e:
        _get_endpoint(router, "/analysis/results", "GET")(errors_only=True, limit=None)
    assert e.value.status_code == 409


def test_run_enqueues_background_audit():
    router, deps = _router()
    tasks = BackgroundTasks()

    resp = _get_endpoint(router, "/analysis/run", "POST")(tasks)

    assert resp == {"status": "started"}
    assert len(tasks.tasks) == 1
    tasks.tasks[0].func()
    deps["job_runner"].run.assert_called_once()


def test_background_audit_failure_is_logged(caplog):
    router, deps = _router()
    deps["job_runner"].run.side_effect = ConfigurationError("bad")
    tasks = BackgroundTasks()

    _get_endpoint(router, "/analysis/run", "POST")(tasks)
    tasks.tasks[0].func()

    assert "Audit triggered via API failed" in caplog.text


def test_run_rejected_while_running():
    router, _ = _router(job_runner=Mock(is_running=True))

    with pytest.raises(HTTPException) as e:
        _get_endpoint(router, "/analysis/run", "POST")(BackgroundTasks())
    assert e.value.status_code == 409


def test_run_requires_admin():
    from adlinkcrawl.api.auth import require_admin

    router, _ = _router()
    route = next(r for r in router.routes if r.path == "/analysis/run")
    assert any(d.call is require_admin for d in route.dependant.dependencies)
