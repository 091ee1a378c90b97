"""Common infrastructure utilities."""

from __future__ import annotations

from .converters import to_datetime, to_int
from .patterns import expand_replacement, regex_replace
from .urls import is_absolute_link, join_url, resolve_link

__all__ = [
    "expand_replacement",
    "is_absolute_link",
    "join_url",
    "regex_replace",
    "resolve_link",
    "to_datetime",
    "to_int",
]
