from datetime import datetime
from unittest.mock import Mock

from adlinkcrawl.domain.options import Options
from adlinkcrawl.domain.url_check_result import EntityType, UrlCheckResult
from adlinkcrawl.services.report_service import ResultReporter


def _r(outcome):
    return UrlCheckResult("acc", datetime(2024, 1, 1), "https://e.com", outcome, EntityType.KEYWORD, keyword_text="kw")


def test_only_failures_written_by_default():
    repo = Mock(append=Mock(side_effect=lambda rows: len(rows)))
    reporter = ResultReporter(repo)

    written = reporter.record([_r(200), _r(404), _r("Failure string detected")], Options())

    assert written == 2
    rows = repo.append.call_args[0][0]
    assert [r.response_outcome for r in rows] == [404, "Failure string detected"]


def test_save_all_urls_writes_everything():
    repo = Mock(append=Mock(side_effect=lambda rows: len(rows)))
    reporter = ResultReporter(repo)

    assert reporter.record([_r(200), _r(404)], Options(save_all_urls=True)) == 2


def test_count_errors_uses_valid_codes():
    repo = Mock(count_errors=Mock(return_value=3))
    reporter = ResultReporter(repo)

    assert reporter.count_errors(Options(valid_codes=frozenset({200, 301}))) == 3
    repo.count_errors.assert_called_once_with(frozenset({200, 301}))
