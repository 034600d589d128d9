import logging
from datetime import datetime
from typing import Callable, List

from adlinkcrawl.domain.checked_url_set import CheckedUrlSet
from adlinkcrawl.domain.crawl_result import AccountCrawlResult
from adlinkcrawl.domain.entities import EntityGroup, EntitySelector
from adlinkcrawl.domain.execution_budget import ExecutionBudget
from adlinkcrawl.domain.options import Options
from adlinkcrawl.domain.url_check_result import UrlCheckResult
from adlinkcrawl.exceptions import AbortKind, CrawlAborted, TagStoreReadOnlyError
from adlinkcrawl.services.entity_enumerator import EntityEnumerator, selectors_for
from adlinkcrawl.services.protocols import EntityStore
from adlinkcrawl.services.url_checker import UrlChecker
from adlinkcrawl.services.url_template_expander import expand_url
from adlinkcrawl.utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)


class AccountCrawlDriver:
    """Checks every not-yet-labelled entity URL of one account.

    Progress is checkpointed by labelling each entity group as soon as its
    URLs are checked, so an aborted account resumes where it stopped. Quota
    and execution-budget aborts are contained here and reported as
    `complete=False`; configuration errors propagate.
    """

    def __init__(
        self,
        *,
        store: EntityStore,
        enumerator: EntityEnumerator,
        checker: UrlChecker,
        budget: ExecutionBudget,
        read_only: bool = False,
        now: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.enumerator = enumerator
        self.checker = checker
        self.budget = budget
        self.read_only = read_only
        self.now = now

    def analyze_account(self, account_id: str, options: Options) -> AccountCrawlResult:
        self._ensure_label(account_id, options.label_name)
        checked = self._build_checked_set(account_id, options)
        logger.info("Account %s: %d URLs already checked this cycle", account_id, len(checked))

        results: List[UrlCheckResult] = []
        complete = True
        try:
            for selector in selectors_for(options, labeled=False):
                if not self._check_kind(account_id, selector, options, checked, results):
                    complete = False
        except CrawlAborted as e:
            if e.kind is AbortKind.TIMEOUT:
                logger.info("Account %s: stopping before the execution limit; %d results kept", account_id, len(results))
            else:
                logger.warning("Account %s: %s; %d results kept", account_id, e, len(results))
            complete = False

        logger.info("Account %s: %d URLs checked, complete=%s", account_id, len(results), complete)
        return AccountCrawlResult(account_id=account_id, results=tuple(results), complete=complete)

    def _ensure_label(self, account_id: str, label_name: str) -> None:
        if self.store.label_exists(account_id, label_name):
            return
        if self.read_only:
            raise TagStoreReadOnlyError(account_id, label_name)
        logger.info("Account %s: creating label %s", account_id, label_name)
        self.store.create_label(account_id, label_name)

    def _build_checked_set(self, account_id: str, options: Options) -> CheckedUrlSet:
        checked = CheckedUrlSet()
        for selector in selectors_for(options, labeled=True):
            enumeration = self.enumerator.enumerate(account_id, selector, options.label_name)
            for group in enumeration.items:
                for entity in group.entities:
                    for url in entity.urls:
                        checked.update(expand_url(url))
        return checked

    def _check_kind(
        self,
        account_id: str,
        selector: EntitySelector,
        options: Options,
        checked: CheckedUrlSet,
        results: List[UrlCheckResult],
    ) -> bool:
        """Check one entity kind. Returns False when the listing was capped."""
        enumeration = self.enumerator.enumerate(account_id, selector, options.label_name)
        logger.info("Account %s: %d unchecked %s groups", account_id, len(enumeration.items), selector.kind.value)
        for group in enumeration.items:
            self._check_group(group, options, checked, results)
            self.store.apply_label(account_id, group.tag_target, options.label_name)
            self._enforce_budget(options)
        return not enumeration.is_truncated

    def _check_group(
        self,
        group: EntityGroup,
        options: Options,
        checked: CheckedUrlSet,
        results: List[UrlCheckResult],
    ) -> None:
        for entity in group.entities:
            for url in entity.urls:
                for expanded in expand_url(url):
                    if not checked.add_if_new(expanded):
                        continue
                    outcome = self.checker.check(expanded, options, entity)
                    results.append(UrlCheckResult.for_entity(entity, expanded, outcome, self.now()))

    def _enforce_budget(self, options: Options) -> None:
        if self.budget.is_exhausted(options.timeout_buffer_seconds):
            raise CrawlAborted(
                AbortKind.TIMEOUT,
                f"{self.budget.remaining_seconds():.0f}s left, buffer {options.timeout_buffer_seconds:.0f}s",
            )
