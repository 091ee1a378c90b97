"""Evaluate one ``SelectorRule`` against a parsed HTML fragment."""

from __future__ import annotations

import copy

import structlog
from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

from indexarr.domain.indexers import FragmentUnreadableError, SelectorRule

from .filters import apply_filters

log = structlog.get_logger(__name__)


def _select_one(fragment: Tag, selector: str) -> Tag | None:
    try:
        return fragment.select_one(selector)
    except (SelectorSyntaxError, NotImplementedError) as e:
        raise FragmentUnreadableError(
            f"cannot query fragment with selector {selector!r}: {e}"
        ) from e


def _strip_removed(target: Tag, selector: str) -> Tag:
    """Return a copy of *target* without children matching *selector*."""
    clone = copy.copy(target)
    try:
        doomed = clone.select(selector)
    except (SelectorSyntaxError, NotImplementedError) as e:
        raise FragmentUnreadableError(
            f"cannot query fragment with selector {selector!r}: {e}"
        ) from e
    for child in doomed:
        child.decompose()
    return clone


def _read(target: Tag, attribute: str | None) -> str | None:
    if attribute is None:
        return target.get_text().strip()
    value = target.get(attribute)
    if value is None:
        return None
    # multi-valued attributes (class, rel) come back as lists
    if isinstance(value, list):
        return " ".join(value)
    return str(value).strip()


def extract(fragment: Tag | BeautifulSoup, rule: SelectorRule) -> str:
    """
    Extract a string from *fragment* following *rule*.

    Absence of data never raises: a selector without match or a missing
    attribute yields ``rule.default`` (empty string when unset).

    Raises:
        FragmentUnreadableError: *fragment* is not queryable or the rule
            carries an invalid CSS selector.
    """
    if not isinstance(fragment, Tag):
        raise FragmentUnreadableError(
            f"expected a parsed HTML fragment, got {type(fragment).__name__}"
        )

    fallback = rule.default or ""

    if not rule.selector and rule.text is not None:
        value = rule.text
    else:
        target = _select_one(fragment, rule.selector) if rule.selector else fragment
        if target is None:
            return fallback
        if rule.remove:
            target = _strip_removed(target, rule.remove)
        read = _read(target, rule.attribute)
        if read is None:
            return fallback
        value = read

    if rule.case:
        value = rule.case.get(value, value)

    return apply_filters(value, rule.filters)
