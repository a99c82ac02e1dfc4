"""Korean text helpers for station and stop lookups."""

import re
from urllib.parse import quote

_STATION_SUFFIX = re.compile(r"역$")


def normalize_station_name(name: str) -> str:
    """Strip surrounding whitespace and a trailing "역" (station) marker.

    >>> normalize_station_name(" 강남역 ")
    '강남'
    """
    return _STATION_SUFFIX.sub("", name.strip()).strip()


def encode_path_segment(text: str) -> str:
    """Percent-encode text for use as a single URL path segment."""
    return quote(text.strip(), safe="")


def contains_casefold(haystack: str | None, needle: str) -> bool:
    """Case-insensitive substring test that tolerates missing values."""
    if not haystack:
        return False
    return needle.casefold() in haystack.casefold()


def redact_key(url: str, secret: str) -> str:
    """Hide an API key embedded in a URL before it is logged."""
    if not secret:
        return url
    return url.replace(secret, "***")
