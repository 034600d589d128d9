import logging
import time
from typing import Callable, Optional

from adlinkcrawl.domain.entities import Entity
from adlinkcrawl.domain.http_response import HttpResponse
from adlinkcrawl.domain.options import Options
from adlinkcrawl.domain.url_check_result import ResponseOutcome
from adlinkcrawl.exceptions import (
    AbortKind,
    CrawlAborted,
    DailyQuotaExceededError,
    HttpFetchError,
    RateLimitedError,
)
from adlinkcrawl.services.protocols import Fetcher, ResponseValidator
from adlinkcrawl.services.response_validator import AcceptAllValidator

logger = logging.getLogger(__name__)

FAILURE_STRING_DETECTED = "Failure string detected"
CUSTOM_VALIDATION_FAILED = "Custom validation failed"


class UrlChecker:
    """Checks a single URL with bounded retry on rate limiting.

    Outcomes are either the HTTP status code or a message describing a
    synthetic or transport failure. Quota exhaustion is raised as
    `CrawlAborted` for the crawl driver to handle.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        validator: Optional[ResponseValidator] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.fetcher = fetcher
        self.validator = validator or AcceptAllValidator()
        self.sleep = sleep

    def _classify(self, url: str, response: HttpResponse, options: Options, entity: Optional[Entity]) -> ResponseOutcome:
        status = response.status_code
        if status not in options.valid_codes:
            return status
        if options.use_simple_failure_string_matching:
            body = response.text or ""
            if any(s and s in body for s in options.failure_strings):
                return FAILURE_STRING_DETECTED
        if options.use_custom_validation:
            if not self.validator.is_valid_response(url, response, options, entity):
                return CUSTOM_VALIDATION_FAILED
        return status

    def _attempt(self, url: str) -> Optional[HttpResponse]:
        """One fetch. None means rate limited; other failures raise."""
        try:
            return self.fetcher.fetch(url)
        except RateLimitedError as e:
            logger.debug("Rate limited while checking %s: %s", url, e)
            return None
        except DailyQuotaExceededError as e:
            raise CrawlAborted(AbortKind.DAILY_QUOTA, str(e)) from e

    def check(self, url: str, options: Options, entity: Optional[Entity] = None) -> ResponseOutcome:
        quota = options.quota
        delay = quota.initial_delay_seconds
        for attempt in range(1, quota.max_attempts + 1):
            try:
                response = self._attempt(url)
            except HttpFetchError as e:
                logger.warning("Fetch failed for %s: %s", url, e.original)
                self._throttle(options)
                return str(e.original)
            self._throttle(options)

            if response is not None:
                outcome = self._classify(url, response, options, entity)
                logger.debug("Checked %s -> %s (attempt %d)", url, outcome, attempt)
                return outcome

            if attempt < quota.max_attempts:
                self.sleep(delay)
                delay *= quota.backoff_multiplier

        logger.warning("Giving up on %s after %d rate-limited attempts", url, quota.max_attempts)
        raise CrawlAborted(AbortKind.RATE_LIMITED, url)

    def _throttle(self, options: Options) -> None:
        if options.throttle_seconds > 0:
            self.sleep(options.throttle_seconds)
