from unittest.mock import Mock

import pytest

from adlinkcrawl.domain.entities import EntityGroup, EntityKind, EntitySelector, TagTarget, TagTargetKind
from adlinkcrawl.domain.options import Options
from adlinkcrawl.services.entity_enumerator import EntityEnumerator, selectors_for


def _groups(n):
    return [EntityGroup(TagTarget(TagTargetKind.AD, i), ()) for i in range(n)]


class DummyStore:
    def __init__(self, total):
        self.rows = _groups(total)
        self.calls = []

    def select_groups(self, account_id, selector, label_name, *, offset, limit):
        self.calls.append((offset, limit))
        return self.rows[offset:offset + limit]

    def count_groups(self, account_id, selector, label_name):
        return len(self.rows)


def test_pages_until_store_runs_out():
    store = DummyStore(25)
    enumerator = EntityEnumerator(store, page_size=10)
    result = enumerator.enumerate("acc", EntitySelector(EntityKind.AD), "lbl")

    assert len(result.items) == 25
    assert result.total_count == 25
    assert not result.is_truncated
    assert store.calls == [(0, 10), (10, 10), (20, 10)]


def test_listing_capped_at_max_per_query_is_truncated():
    store = DummyStore(30)
    enumerator = EntityEnumerator(store, max_per_query=20, page_size=15)
    result = enumerator.enumerate("acc", EntitySelector(EntityKind.AD), "lbl")

    assert len(result.items) == 20
    assert result.total_count == 30
    assert result.is_truncated
    assert store.calls == [(0, 15), (15, 5)]


def test_rejects_non_positive_limits():
    with pytest.raises(ValueError):
        EntityEnumerator(Mock(), max_per_query=0)


def test_selectors_follow_enabled_kinds_and_paused_flags():
    opts = Options(check_keyword_urls=False, check_paused_sitelinks=True)
    selectors = selectors_for(opts, labeled=True)

    assert [s.kind for s in selectors] == [
        EntityKind.AD,
        EntityKind.CAMPAIGN_SITELINK,
        EntityKind.AD_GROUP_SITELINK,
    ]
    assert [s.include_paused for s in selectors] == [False, True, True]
    assert all(s.labeled for s in selectors)
