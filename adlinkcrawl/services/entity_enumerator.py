import logging
from typing import List

from adlinkcrawl.domain.entities import EntityGroup, EntityKind, EntitySelector, Enumeration
from adlinkcrawl.domain.options import Options
from adlinkcrawl.services.protocols import EntityStore

logger = logging.getLogger(__name__)


def selectors_for(options: Options, *, labeled: bool) -> List[EntitySelector]:
    """Selectors for every entity kind enabled in `options`, in crawl order."""
    selectors: List[EntitySelector] = []
    if options.check_ad_urls:
        selectors.append(EntitySelector(EntityKind.AD, options.check_paused_ads, labeled))
    if options.check_keyword_urls:
        selectors.append(EntitySelector(EntityKind.KEYWORD, options.check_paused_keywords, labeled))
    if options.check_sitelink_urls:
        selectors.append(EntitySelector(EntityKind.CAMPAIGN_SITELINK, options.check_paused_sitelinks, labeled))
        selectors.append(EntitySelector(EntityKind.AD_GROUP_SITELINK, options.check_paused_sitelinks, labeled))
    return selectors


class EntityEnumerator:
    """Pages through the entity store for one selector.

    The store caps how many groups a single listing may return
    (`max_per_query`). The authoritative total is fetched separately so
    callers can tell a capped listing from a complete one.
    """

    def __init__(self, store: EntityStore, *, max_per_query: int = 50_000, page_size: int = 1000):
        if max_per_query <= 0 or page_size <= 0:
            raise ValueError("max_per_query and page_size must be positive")
        self.store = store
        self.max_per_query = int(max_per_query)
        self.page_size = int(page_size)

    def enumerate(self, account_id: str, selector: EntitySelector, label_name: str) -> Enumeration:
        items: List[EntityGroup] = []
        while len(items) < self.max_per_query:
            want = min(self.page_size, self.max_per_query - len(items))
            page = self.store.select_groups(account_id, selector, label_name, offset=len(items), limit=want)
            items.extend(page)
            if len(page) < want:
                break

        total = self.store.count_groups(account_id, selector, label_name)
        enumeration = Enumeration(items=tuple(items), total_count=total)
        if enumeration.is_truncated:
            logger.warning(
                "Account %s: listed %d of %d %s groups (labeled=%s); coverage incomplete",
                account_id,
                len(items),
                total,
                selector.kind.value,
                selector.labeled,
            )
        return enumeration
