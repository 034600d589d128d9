from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any, FrozenSet, Tuple

DEFAULT_LABEL_NAME = "link_checker_analyzed"


@dataclass(frozen=True)
class QuotaConfig:
    """Retry tuning for rate-limited fetches."""

    initial_delay_seconds: float = 0.25
    backoff_multiplier: float = 2.0
    max_attempts: int = 5

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.backoff_multiplier < 1:
            raise ValueError("backoff_multiplier must be >= 1")
        if self.initial_delay_seconds < 0:
            raise ValueError("initial_delay_seconds must be >= 0")


@dataclass(frozen=True)
class Options:
    """Job options loaded once per run and passed to every component.

    Instances are immutable and round-trip through `to_payload`/`from_payload`
    so they can be handed to per-account workers as plain JSON.
    """

    check_ad_urls: bool = True
    check_keyword_urls: bool = True
    check_sitelink_urls: bool = True
    check_paused_ads: bool = False
    check_paused_keywords: bool = False
    check_paused_sitelinks: bool = False
    valid_codes: FrozenSet[int] = frozenset({200})
    save_all_urls: bool = False
    failure_strings: Tuple[str, ...] = ()
    use_simple_failure_string_matching: bool = False
    use_custom_validation: bool = False
    email_each_run: bool = False
    email_non_errors: bool = False
    email_on_completion: bool = True
    recipient_emails: Tuple[str, ...] = ()
    report_url: str = ""
    frequency_days: int = 1
    label_name: str = DEFAULT_LABEL_NAME
    timeout_buffer_seconds: float = 120.0
    throttle_seconds: float = 0.0
    quota: QuotaConfig = field(default_factory=QuotaConfig)

    def is_valid_code(self, outcome: Any) -> bool:
        return isinstance(outcome, int) and outcome in self.valid_codes

    def to_payload(self) -> str:
        data = asdict(self)
        data["valid_codes"] = sorted(self.valid_codes)
        data["failure_strings"] = list(self.failure_strings)
        data["recipient_emails"] = list(self.recipient_emails)
        return json.dumps(data)

    @classmethod
    def from_payload(cls, payload: str) -> "Options":
        data = json.loads(payload)
        data["valid_codes"] = frozenset(data.get("valid_codes", []))
        data["failure_strings"] = tuple(data.get("failure_strings", []))
        data["recipient_emails"] = tuple(data.get("recipient_emails", []))
        data["quota"] = QuotaConfig(**data.get("quota", {}))
        return cls(**data)
