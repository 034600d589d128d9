"""Crawl result data models."""
import json
from typing import List, NamedTuple, Tuple

from adlinkcrawl.domain.url_check_result import UrlCheckResult


class AccountCrawlResult(NamedTuple):
    """Result of crawling one account.

    Carries partial results when the account was aborted, so callers can
    persist progress and revisit the account on the next run.
    """
    account_id: str

    results: Tuple[UrlCheckResult, ...]
    """Checks performed in this invocation, in check order"""

    complete: bool
    """True once every enabled entity kind of the account has been fully checked"""

    def to_payload(self) -> str:
        return json.dumps({
            "account_id": self.account_id,
            "complete": self.complete,
            "results": [r.to_payload() for r in self.results],
        })

    @classmethod
    def from_payload(cls, payload: str) -> "AccountCrawlResult":
        data = json.loads(payload)
        return cls(
            account_id=data["account_id"],
            results=tuple(UrlCheckResult.from_payload(r) for r in data["results"]),
            complete=bool(data["complete"]),
        )


class FleetCrawlResult(NamedTuple):
    """Merged outcome of one fleet batch."""
    results: List[UrlCheckResult]
    did_complete: bool
    accounts_processed: int
    accounts_completed: int
