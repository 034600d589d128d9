import pytest

from adlinkcrawl.domain.options import Options, QuotaConfig


def test_defaults():
    opts = Options()
    assert opts.valid_codes == frozenset({200})
    assert opts.label_name == "link_checker_analyzed"
    assert opts.quota == QuotaConfig(0.25, 2.0, 5)


def test_is_valid_code_only_accepts_listed_integers():
    opts = Options(valid_codes=frozenset({200, 301}))
    assert opts.is_valid_code(301)
    assert not opts.is_valid_code(404)
    assert not opts.is_valid_code("Failure string detected")


def test_payload_roundtrip_preserves_all_fields():
    opts = Options(
        valid_codes=frozenset({200, 302}),
        failure_strings=("Out of stock",),
        recipient_emails=("ops@example.org",),
        report_url="https://reports.example.org/1",
        throttle_seconds=0.5,
        quota=QuotaConfig(initial_delay_seconds=1.0, backoff_multiplier=3.0, max_attempts=2),
    )
    assert Options.from_payload(opts.to_payload()) == opts


def test_quota_config_rejects_zero_attempts():
    with pytest.raises(ValueError):
        QuotaConfig(max_attempts=0)
