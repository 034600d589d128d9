from typing import Any, Dict, Iterable, Tuple

from adlinkcrawl.domain.options import DEFAULT_LABEL_NAME, Options, QuotaConfig
from adlinkcrawl.exceptions import ConfigurationError

PLACEHOLDER_REPORT_URL = "YOUR_REPORT_URL"
PLACEHOLDER_EMAIL = "email@example.com"

_BOOL_KEYS = (
    "check_ad_urls",
    "check_keyword_urls",
    "check_sitelink_urls",
    "check_paused_ads",
    "check_paused_keywords",
    "check_paused_sitelinks",
    "save_all_urls",
    "use_simple_failure_string_matching",
    "use_custom_validation",
    "email_each_run",
    "email_non_errors",
    "email_on_completion",
)


def _as_bool(data: Dict[str, Any], key: str) -> bool:
    value = data[key]
    if not isinstance(value, bool):
        raise ConfigurationError(f"Option {key!r} must be true or false, got {value!r}")
    return value


def _as_number(data: Dict[str, Any], key: str, default: float) -> float:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"Option {key!r} must be a number, got {value!r}")
    if value < 0:
        raise ConfigurationError(f"Option {key!r} must not be negative")
    return float(value)


def _as_str_list(data: Dict[str, Any], key: str) -> Tuple[str, ...]:
    value = data.get(key) or []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigurationError(f"Option {key!r} must be a list of strings")
    return tuple(v.strip() for v in value if v.strip())


def _as_codes(values: Iterable[Any]):
    codes = set()
    for v in values:
        try:
            codes.add(int(v))
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid HTTP status code in valid_codes: {v!r}")
    return frozenset(codes)


class OptionsParser:
    """Parse a YAML dict into Options.

    Responsibility: schema/validation of the options file.
    It does NOT perform filesystem IO.
    """

    def parse(self, data: Dict[str, Any]) -> Options:
        if not isinstance(data, dict):
            raise ConfigurationError("Options file must contain a mapping")

        kwargs: Dict[str, Any] = {}
        for key in _BOOL_KEYS:
            if key in data:
                kwargs[key] = _as_bool(data, key)

        if "valid_codes" in data:
            raw = data["valid_codes"]
            if not isinstance(raw, list) or not raw:
                raise ConfigurationError("Option 'valid_codes' must be a non-empty list")
            kwargs["valid_codes"] = _as_codes(raw)

        kwargs["failure_strings"] = _as_str_list(data, "failure_strings")
        kwargs["recipient_emails"] = self._recipients(data)
        kwargs["report_url"] = self._report_url(data)

        frequency = data.get("frequency_days", 1)
        if isinstance(frequency, bool) or not isinstance(frequency, int) or frequency < 1:
            raise ConfigurationError("Option 'frequency_days' must be a positive integer")
        kwargs["frequency_days"] = frequency

        label = data.get("label_name", DEFAULT_LABEL_NAME)
        if not isinstance(label, str) or not label.strip():
            raise ConfigurationError("Option 'label_name' must be a non-empty string")
        kwargs["label_name"] = label.strip()

        kwargs["timeout_buffer_seconds"] = _as_number(data, "timeout_buffer_seconds", 120)
        kwargs["throttle_seconds"] = _as_number(data, "throttle_ms", 0) / 1000.0
        kwargs["quota"] = self._quota(data.get("quota") or {})
        return Options(**kwargs)

    def _report_url(self, data: Dict[str, Any]) -> str:
        url = data.get("report_url")
        if not isinstance(url, str) or not url.strip():
            raise ConfigurationError("Option 'report_url' is required")
        if url.strip() == PLACEHOLDER_REPORT_URL:
            raise ConfigurationError("Option 'report_url' still holds the placeholder value")
        return url.strip()

    def _recipients(self, data: Dict[str, Any]) -> Tuple[str, ...]:
        recipients = _as_str_list(data, "recipient_emails")
        if PLACEHOLDER_EMAIL in recipients:
            raise ConfigurationError(f"Replace the placeholder recipient {PLACEHOLDER_EMAIL} with a real address")
        return recipients

    def _quota(self, quota: Dict[str, Any]) -> QuotaConfig:
        if not isinstance(quota, dict):
            raise ConfigurationError("Option 'quota' must be a mapping")
        defaults = QuotaConfig()
        max_attempts = quota.get("max_attempts", defaults.max_attempts)
        if isinstance(max_attempts, bool) or not isinstance(max_attempts, int):
            raise ConfigurationError("Option 'quota.max_attempts' must be an integer")
        try:
            return QuotaConfig(
                initial_delay_seconds=_as_number(quota, "initial_delay_ms", defaults.initial_delay_seconds * 1000) / 1000.0,
                backoff_multiplier=_as_number(quota, "backoff_multiplier", defaults.backoff_multiplier),
                max_attempts=max_attempts,
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid quota options: {e}") from e
