"""Expansion of ad-platform URL templating syntax into concrete URLs."""
import re
from typing import Dict, List, Tuple

# Mutually exclusive conditional tags, one pair per branching axis.
PAIRED_TAGS: Tuple[Tuple[str, str], ...] = (
    ("ifmobile", "ifnotmobile"),
    ("ifsearch", "ifcontent"),
)

_CONDITIONAL_RE = re.compile(r"\{(ifmobile|ifnotmobile|ifsearch|ifcontent):([^{}]*)\}", re.IGNORECASE)
_PLACEHOLDER_RE = re.compile(r"\{[^{}]*\}")
# Any placeholder other than a conditional tag, innermost first.
_PLAIN_PLACEHOLDER_RE = re.compile(r"\{(?!(?:ifmobile|ifnotmobile|ifsearch|ifcontent):)[^{}]*\}", re.IGNORECASE)


def _tag_values(url: str) -> Dict[str, List[Tuple[str, str]]]:
    """Map lower-cased tag name -> [(placeholder text, value), ...]."""
    found: Dict[str, List[Tuple[str, str]]] = {}
    for match in _CONDITIONAL_RE.finditer(url):
        found.setdefault(match.group(1).lower(), []).append((match.group(0), match.group(2)))
    return found


def _choose(url: str, keep: str, drop: str, tags: Dict[str, List[Tuple[str, str]]]) -> str:
    for placeholder, value in tags.get(keep, []):
        url = url.replace(placeholder, value)
    for placeholder, _ in tags.get(drop, []):
        url = url.replace(placeholder, "")
    return url


def _dedup(urls: List[str]) -> List[str]:
    return list(dict.fromkeys(urls))


def _strip(pattern: "re.Pattern[str]", url: str) -> str:
    """Remove matches of `pattern` until none are left, so nested placeholders go too."""
    while True:
        stripped = pattern.sub("", url)
        if stripped == url:
            return url
        url = stripped


def expand_url(url: str) -> List[str]:
    """Return every concrete URL a templated URL can resolve to.

    Each conditional pair present in `url` doubles the variants (cross
    product across pairs); any other `{...}` placeholder is stripped. The
    result is de-duplicated and never empty.
    """
    if "{" not in url:
        return [url]

    variants = [_strip(_PLAIN_PLACEHOLDER_RE, url)]
    for first, second in PAIRED_TAGS:
        branched: List[str] = []
        for variant in variants:
            tags = _tag_values(variant)
            if first not in tags and second not in tags:
                branched.append(variant)
                continue
            branched.append(_choose(variant, first, second, tags))
            branched.append(_choose(variant, second, first, tags))
        variants = _dedup(branched)

    return _dedup([_strip(_PLACEHOLDER_RE, v) for v in variants])
