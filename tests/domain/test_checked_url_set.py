from adlinkcrawl.domain.checked_url_set import CheckedUrlSet


def test_url_not_checked_initially():
    checked = CheckedUrlSet()
    assert "https://example.com" not in checked


def test_add_if_new_reports_first_sighting_only():
    checked = CheckedUrlSet()
    assert checked.add_if_new("https://example.com") is True
    assert checked.add_if_new("https://example.com") is False
    assert len(checked) == 1


def test_seeded_urls_are_already_checked():
    checked = CheckedUrlSet(["https://a.example", "https://b.example"])
    assert checked.add_if_new("https://a.example") is False
    checked.update(["https://c.example"])
    assert "https://c.example" in checked
    assert len(checked) == 3
