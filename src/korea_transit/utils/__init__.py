"""Utility modules for korea-transit."""

from .korean_text import (
    contains_casefold,
    encode_path_segment,
    normalize_station_name,
    redact_key,
)

__all__ = [
    "contains_casefold",
    "encode_path_segment",
    "normalize_station_name",
    "redact_key",
]
