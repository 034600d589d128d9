"""Custom exceptions for AdLinkCrawl services."""
from enum import Enum


class ConfigurationError(Exception):
    """Raised when setup is incomplete; aborts the whole invocation."""


class TagStoreReadOnlyError(ConfigurationError):
    """Raised when a label must be created but the store is in preview mode."""

    def __init__(self, account_id: str, label_name: str):
        self.account_id = account_id
        self.label_name = label_name
        super().__init__(
            f"Label '{label_name}' is missing in account {account_id} and cannot be created in preview mode"
        )


class HttpFetchError(Exception):
    """Raised when an HTTP fetch fails due to network/transport errors."""

    def __init__(self, url: str, original: Exception):
        self.url = url
        self.original = original
        super().__init__(f"HTTP fetch failed for {url}: {original}")


class RateLimitedError(Exception):
    """Short-term fetch rate cap hit; the call may be retried after a pause."""


class DailyQuotaExceededError(Exception):
    """Daily fetch quota used up; no further fetches succeed today."""


class AbortKind(str, Enum):
    RATE_LIMITED = "QPS"
    DAILY_QUOTA = "LIMIT"
    TIMEOUT = "TIMEOUT"


class CrawlAborted(Exception):
    """Stops the remaining work of one account.

    Raised by the checker (quota) or the crawl driver (execution budget) and
    caught at the per-account boundary, matched on `kind`.
    """

    def __init__(self, kind: AbortKind, detail: str = ""):
        self.kind = kind
        self.detail = detail
        message = f"Crawl aborted ({kind.value})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
