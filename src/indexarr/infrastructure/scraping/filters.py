"""String filters applied to extracted values.

Each filter is a pure ``str -> str`` transform named from the closed
``FilterName`` catalog. Filters never abort an extraction: unknown names
and bad arguments are logged and the value passes through unchanged.
"""

from __future__ import annotations

import re
from typing import Callable, Sequence
from urllib.parse import parse_qs, quote_plus, unquote_plus, urlsplit

import structlog

from indexarr.domain.indexers import FilterName, FilterSpec
from indexarr.infrastructure.common.patterns import regex_replace

log = structlog.get_logger(__name__)

FilterFn = Callable[[str, Sequence[str]], str]


def _re_replace(value: str, args: Sequence[str]) -> str:
    return regex_replace(value, args[0], args[1])


def _replace(value: str, args: Sequence[str]) -> str:
    return value.replace(args[0], args[1])


def _trim(value: str, args: Sequence[str]) -> str:
    return value.strip(args[0]) if args else value.strip()


def _split(value: str, args: Sequence[str]) -> str:
    parts = value.split(args[0])
    index = int(args[1]) if len(args) > 1 else 0
    return parts[index]


def _regexp(value: str, args: Sequence[str]) -> str:
    match = re.search(args[0], value)
    if match is None:
        return ""
    return match.group(1) if match.re.groups else match.group(0)


def _querystring(value: str, args: Sequence[str]) -> str:
    values = parse_qs(urlsplit(value).query).get(args[0])
    return values[0] if values else ""


_FILTERS: dict[FilterName, FilterFn] = {
    FilterName.RE_REPLACE: _re_replace,
    FilterName.REPLACE: _replace,
    FilterName.TRIM: _trim,
    FilterName.PREPEND: lambda value, args: args[0] + value,
    FilterName.APPEND: lambda value, args: value + args[0],
    FilterName.TOLOWER: lambda value, _args: value.lower(),
    FilterName.TOUPPER: lambda value, _args: value.upper(),
    FilterName.SPLIT: _split,
    FilterName.REGEXP: _regexp,
    FilterName.QUERYSTRING: _querystring,
    FilterName.URLDECODE: lambda value, _args: unquote_plus(value),
    FilterName.URLENCODE: lambda value, _args: quote_plus(value),
}


def apply_filter(value: str, spec: FilterSpec) -> str:
    """Apply one filter, passing *value* through on any problem."""
    if not spec.known:
        log.warning("filter_unknown", filter=str(spec.name), args=list(spec.args))
        return value

    fn = _FILTERS[spec.name]
    try:
        return fn(value, spec.args)
    except (IndexError, ValueError, re.error) as e:
        log.warning(
            "filter_failed",
            filter=spec.name.value,
            args=list(spec.args),
            error=str(e),
        )
        return value


def apply_filters(value: str, filters: Sequence[FilterSpec]) -> str:
    """Run *filters* over *value* in declared order."""
    for spec in filters:
        value = apply_filter(value, spec)
    return value
