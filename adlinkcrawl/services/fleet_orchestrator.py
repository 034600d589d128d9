import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional

from adlinkcrawl.domain.crawl_result import AccountCrawlResult, FleetCrawlResult
from adlinkcrawl.domain.execution_budget import ExecutionBudget
from adlinkcrawl.domain.options import Options
from adlinkcrawl.domain.url_check_result import UrlCheckResult
from adlinkcrawl.exceptions import ConfigurationError
from adlinkcrawl.services.fetch_quota import FetchQuota
from adlinkcrawl.services.protocols import AccountStore

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 50


class FleetOrchestrator:
    """Runs the crawl driver over a batch of not-yet-completed accounts.

    Each account runs in its own worker with its own driver and receives the
    options as a serialized payload; results come back serialized as well,
    so no mutable state is shared between accounts. A failing account is
    logged and left for the next run; configuration errors abort the batch.
    """

    def __init__(
        self,
        *,
        account_store: AccountStore,
        driver_factory: Callable[..., object],
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_workers: int = 8,
        quota: Optional[FetchQuota] = None,
    ):
        self.account_store = account_store
        self.quota = quota
        self.driver_factory = driver_factory
        self.batch_size = int(batch_size)
        self.max_workers = max(1, int(max_workers))

    def select_accounts(self, options: Options) -> List[str]:
        return self.account_store.list_account_ids(without_label=options.label_name, limit=self.batch_size)

    def _process_account(self, account_id: str, options_payload: str, budget: ExecutionBudget) -> str:
        options = Options.from_payload(options_payload)
        driver = self.driver_factory(budget=budget)
        return driver.analyze_account(account_id, options).to_payload()

    def _dispatch(self, account_ids: List[str], options: Options, budget: ExecutionBudget) -> Dict[str, Optional[AccountCrawlResult]]:
        payload = options.to_payload()
        outcomes: Dict[str, Optional[AccountCrawlResult]] = {}
        fatal: Optional[ConfigurationError] = None
        workers = min(self.max_workers, len(account_ids))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="account") as pool:
            futures = {aid: pool.submit(self._process_account, aid, payload, budget) for aid in account_ids}
            for account_id, future in futures.items():
                try:
                    outcomes[account_id] = AccountCrawlResult.from_payload(future.result())
                except ConfigurationError as e:
                    logger.error("Account %s: configuration error: %s", account_id, e)
                    fatal = fatal or e
                except Exception:
                    logger.exception("Account %s: processing failed; will retry next run", account_id)
                    outcomes[account_id] = None
        if fatal is not None:
            raise fatal
        return outcomes

    def run(self, options: Options, budget: ExecutionBudget) -> FleetCrawlResult:
        account_ids = self.select_accounts(options)
        if not account_ids:
            logger.info("No unprocessed accounts remain")
            return self.merge({}, options)

        logger.info("Processing %d account(s)", len(account_ids))
        return self.merge(self._dispatch(account_ids, options, budget), options)

    def merge(self, outcomes: Dict[str, Optional[AccountCrawlResult]], options: Options) -> FleetCrawlResult:
        """Concatenate per-account results and label the completed accounts."""
        results: List[UrlCheckResult] = []
        completed = 0
        all_complete = True
        for account_id, outcome in outcomes.items():
            if outcome is None or not outcome.complete:
                all_complete = False
            if outcome is None:
                continue
            results.extend(outcome.results)
            if outcome.complete:
                self.account_store.apply_account_label(account_id, options.label_name)
                completed += 1

        remaining = self.account_store.count_accounts(without_label=options.label_name)
        did_complete = all_complete and remaining == 0
        logger.info(
            "Batch finished: %d/%d accounts complete, %d results, %d accounts remaining",
            completed,
            len(outcomes),
            len(results),
            remaining,
        )
        if self.quota is not None:
            logger.info("Fetches used today: %d", self.quota.used_today)
        return FleetCrawlResult(
            results=results,
            did_complete=did_complete,
            accounts_processed=len(outcomes),
            accounts_completed=completed,
        )
