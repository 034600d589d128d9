from unittest.mock import Mock

import pytest

from adlinkcrawl.domain.entities import (
    Entity,
    EntityGroup,
    EntityKind,
    Enumeration,
    TagCapability,
    TagTarget,
    TagTargetKind,
)
from adlinkcrawl.domain.options import Options
from adlinkcrawl.exceptions import AbortKind, CrawlAborted, TagStoreReadOnlyError
from adlinkcrawl.services.crawl_driver import AccountCrawlDriver

ACCOUNT = "123-456-7890"


def _ad(ad_id, url, mobile=None):
    entity = Entity(EntityKind.AD, ad_id, ACCOUNT, "Camp", "Group", f"Ad {ad_id}", url, mobile, TagCapability(True))
    return EntityGroup(entity.tag_target, (entity,))


def _campaign_sitelinks(campaign_id, *urls):
    parent = TagTarget(TagTargetKind.CAMPAIGN, campaign_id)
    entities = tuple(
        Entity(EntityKind.CAMPAIGN_SITELINK, 100 + i, ACCOUNT, "Camp", None, f"Link {i}", u, None,
               TagCapability(False, parent))
        for i, u in enumerate(urls)
    )
    return EntityGroup(parent, entities)


class DummyEnumerator:
    """Returns canned groups per (kind, labeled)."""

    def __init__(self, groups=None, totals=None):
        self.groups = groups or {}
        self.totals = totals or {}

    def enumerate(self, account_id, selector, label_name):
        key = (selector.kind, selector.labeled)
        items = tuple(self.groups.get(key, ()))
        return Enumeration(items=items, total_count=self.totals.get(key, len(items)))


class DummyBudget:
    def __init__(self, exhaust_after=None):
        self.checks = 0
        self.exhaust_after = exhaust_after

    def remaining_seconds(self):
        return 0.0

    def is_exhausted(self, buffer_seconds):
        self.checks += 1
        return self.exhaust_after is not None and self.checks >= self.exhaust_after


def _driver(enumerator, checker=None, budget=None, store=None, read_only=False):
    store = store or Mock(label_exists=Mock(return_value=True))
    checker = checker or Mock(check=Mock(return_value=200))
    return AccountCrawlDriver(
        store=store,
        enumerator=enumerator,
        checker=checker,
        budget=budget or DummyBudget(),
        read_only=read_only,
    ), store, checker


def test_same_url_checked_once_per_account():
    enumerator = DummyEnumerator({
        (EntityKind.AD, False): [_ad(1, "https://e.com/a"), _ad(2, "https://e.com/a")],
    })
    driver, store, checker = _driver(enumerator)

    result = driver.analyze_account(ACCOUNT, Options(check_keyword_urls=False, check_sitelink_urls=False))

    assert result.complete
    assert [r.url for r in result.results] == ["https://e.com/a"]
    assert checker.check.call_count == 1
    # both ads are labelled even though only one URL was fetched
    assert store.apply_label.call_count == 2


def test_urls_of_labeled_entities_are_not_rechecked():
    enumerator = DummyEnumerator({
        (EntityKind.AD, True): [_ad(1, "https://e.com/a")],
        (EntityKind.AD, False): [_ad(2, "https://e.com/a"), _ad(3, "https://e.com/b")],
    })
    driver, _, checker = _driver(enumerator)

    result = driver.analyze_account(ACCOUNT, Options(check_keyword_urls=False, check_sitelink_urls=False))

    assert [r.url for r in result.results] == ["https://e.com/b"]


def test_templated_urls_expand_into_separate_checks():
    enumerator = DummyEnumerator({
        (EntityKind.AD, False): [_ad(1, "https://e.com/{ifmobile:m}{ifnotmobile:d}")],
    })
    driver, _, _ = _driver(enumerator)

    result = driver.analyze_account(ACCOUNT, Options(check_keyword_urls=False, check_sitelink_urls=False))

    assert sorted(r.url for r in result.results) == ["https://e.com/d", "https://e.com/m"]


def test_timeout_keeps_earlier_results_and_marks_incomplete():
    enumerator = DummyEnumerator({
        (EntityKind.AD, False): [_ad(1, "https://e.com/a"), _ad(2, "https://e.com/b"), _ad(3, "https://e.com/c")],
    })
    driver, store, _ = _driver(enumerator, budget=DummyBudget(exhaust_after=2))

    result = driver.analyze_account(ACCOUNT, Options(check_keyword_urls=False, check_sitelink_urls=False))

    assert not result.complete
    assert [r.url for r in result.results] == ["https://e.com/a", "https://e.com/b"]
    assert store.apply_label.call_count == 2


def test_quota_abort_keeps_results_and_marks_incomplete():
    enumerator = DummyEnumerator({
        (EntityKind.AD, False): [_ad(1, "https://e.com/a"), _ad(2, "https://e.com/b")],
    })
    checker = Mock()
    checker.check.side_effect = [404, CrawlAborted(AbortKind.DAILY_QUOTA)]
    driver, store, _ = _driver(enumerator, checker=checker)

    result = driver.analyze_account(ACCOUNT, Options(check_keyword_urls=False, check_sitelink_urls=False))

    assert not result.complete
    assert [r.response_outcome for r in result.results] == [404]
    # the aborted group is not labelled so it is revisited next run
    assert store.apply_label.call_count == 1


def test_truncated_listing_marks_account_incomplete():
    enumerator = DummyEnumerator(
        {(EntityKind.AD, False): [_ad(1, "https://e.com/a")]},
        totals={(EntityKind.AD, False): 5},
    )
    driver, _, _ = _driver(enumerator)

    result = driver.analyze_account(ACCOUNT, Options(check_keyword_urls=False, check_sitelink_urls=False))

    assert not result.complete
    assert len(result.results) == 1


def test_sitelinks_tag_their_parent_campaign():
    enumerator = DummyEnumerator({
        (EntityKind.CAMPAIGN_SITELINK, False): [_campaign_sitelinks(7, "https://e.com/s1", "https://e.com/s2")],
    })
    driver, store, _ = _driver(enumerator)

    result = driver.analyze_account(ACCOUNT, Options(check_ad_urls=False, check_keyword_urls=False))

    assert result.complete
    assert [r.sitelink_text for r in result.results] == ["Link 0", "Link 1"]
    store.apply_label.assert_called_once_with(ACCOUNT, TagTarget(TagTargetKind.CAMPAIGN, 7), "link_checker_analyzed")


def test_missing_label_is_created():
    store = Mock(label_exists=Mock(return_value=False))
    driver, _, _ = _driver(DummyEnumerator(), store=store)

    assert driver.analyze_account(ACCOUNT, Options()).complete
    store.create_label.assert_called_once_with(ACCOUNT, "link_checker_analyzed")


def test_missing_label_in_preview_mode_raises():
    store = Mock(label_exists=Mock(return_value=False))
    driver, _, _ = _driver(DummyEnumerator(), store=store, read_only=True)

    with pytest.raises(TagStoreReadOnlyError):
        driver.analyze_account(ACCOUNT, Options())
    store.create_label.assert_not_called()
