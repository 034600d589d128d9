import logging
from typing import Iterable, List

from adlinkcrawl.domain.options import Options
from adlinkcrawl.domain.url_check_result import UrlCheckResult

logger = logging.getLogger(__name__)


class ResultReporter:
    """Writes check results to the report sink.

    Only failures are stored unless `save_all_urls` is set.
    """

    def __init__(self, results_repo):
        self.results_repo = results_repo

    def select(self, results: Iterable[UrlCheckResult], options: Options) -> List[UrlCheckResult]:
        if options.save_all_urls:
            return list(results)
        return [r for r in results if not options.is_valid_code(r.response_outcome)]

    def record(self, results: Iterable[UrlCheckResult], options: Options) -> int:
        rows = self.select(results, options)
        written = self.results_repo.append(rows)
        logger.info("Wrote %d result row(s) to the report", written)
        return written

    def count_errors(self, options: Options) -> int:
        return self.results_repo.count_errors(options.valid_codes)
