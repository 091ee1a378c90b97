"""
Row parser: turns a search-results document into validated candidates.

Rows are located with the definition's row selector, in document order.
Every declared field is extracted per row; rows without a title or a
download reference are dropped silently.
"""

from __future__ import annotations

from dataclasses import replace

import structlog
from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup
from soupsieve import SelectorSyntaxError

from indexarr.domain.entities import Candidate
from indexarr.domain.indexers import (
    DefinitionError,
    DefinitionProblem,
    DownloadLinkNotFoundError,
    DownloadRule,
    FragmentUnreadableError,
    IndexerDefinition,
    RowRule,
    SelectorRule,
    UnreadableDocumentError,
)
from indexarr.infrastructure.common import resolve_link, to_datetime, to_int

from .selector_engine import extract

log = structlog.get_logger(__name__)

# Link-bearing fields read ``href`` when the rule names no attribute.
LINK_FIELDS = frozenset({"download", "details"})
DEFAULT_LINK_ATTRIBUTE = "href"
DATE_FIELDS = ("date", "publishdate")


def parse_document(document: bytes | str, encoding: str | None = None) -> BeautifulSoup:
    """Parse *document* once into a queryable tree.

    Raises:
        UnreadableDocumentError: the markup cannot be parsed.
    """
    try:
        return BeautifulSoup(document, "lxml", from_encoding=_encoding_for(document, encoding))
    except (ParserRejectedMarkup, TypeError, ValueError) as e:
        raise UnreadableDocumentError(f"document could not be parsed: {e}") from e


def _encoding_for(document: bytes | str, encoding: str | None) -> str | None:
    # bs4 rejects from_encoding for already-decoded markup
    if isinstance(document, str):
        return None
    return encoding


def _link_rule(rule: SelectorRule) -> SelectorRule:
    if rule.attribute is None and rule.selector:
        return replace(rule, attribute=DEFAULT_LINK_ATTRIBUTE)
    return rule


def _locate_rows(soup: BeautifulSoup, rows: RowRule) -> list[Tag]:
    try:
        found = soup.select(rows.selector)
        removed = {id(tag) for tag in soup.select(rows.remove)} if rows.remove else set()
    except (SelectorSyntaxError, NotImplementedError) as e:
        raise FragmentUnreadableError(
            f"cannot locate rows with selector {rows.selector!r}: {e}"
        ) from e
    kept = [row for row in found if id(row) not in removed]
    return kept[rows.after :] if rows.after > 0 else kept


def _extract_fields(row: Tag, definition: IndexerDefinition) -> dict[str, str]:
    assert definition.search is not None
    values: dict[str, str] = {}
    for name, rule in definition.search.fields.items():
        if name in LINK_FIELDS:
            rule = _link_rule(rule)
        values[name] = extract(row, rule)
    return values


def _to_candidate(values: dict[str, str], definition: IndexerDefinition) -> Candidate | None:
    base = definition.base_link
    title = values.get("title", "").strip()
    magnet = resolve_link(base, values.get("download", "").strip())
    if not title or not magnet:
        return None

    details = resolve_link(base, values.get("details", "").strip()) or None
    published_raw = next((values[f] for f in DATE_FIELDS if values.get(f)), None)

    return Candidate(
        title=title,
        magnet=magnet,
        indexer=definition.id,
        size=values.get("size") or None,
        seeders=to_int(values.get("seeders")),
        leechers=to_int(values.get("leechers")),
        published_at=to_datetime(published_raw),
        details=details,
    )


def parse_rows(document: bytes | str, definition: IndexerDefinition) -> list[Candidate]:
    """
    Extract candidates from a search-results *document*.

    An empty list is a valid "no results" outcome.

    Raises:
        DefinitionError: the definition declares no row selector; raised
            before the document is touched.
        UnreadableDocumentError: the document cannot be parsed.
        FragmentUnreadableError: a selector cannot be evaluated.
    """
    if definition.search is None or not definition.search.rows.selector:
        raise DefinitionError(definition.id, DefinitionProblem.MISSING_ROW_SELECTOR)

    soup = parse_document(document, definition.encoding)
    rows = _locate_rows(soup, definition.search.rows)

    candidates: list[Candidate] = []
    for row in rows:
        candidate = _to_candidate(_extract_fields(row, definition), definition)
        if candidate is not None:
            candidates.append(candidate)

    log.debug(
        "rows_parsed",
        indexer=definition.id,
        rows=len(rows),
        candidates=len(candidates),
        dropped=len(rows) - len(candidates),
    )
    return candidates


def parse_details_page(
    document: bytes | str,
    download: DownloadRule,
    base_link: str = "",
) -> str:
    """Return the first download link a details page yields.

    Selectors are tried in declared order; relative links are joined
    onto *base_link*.

    Raises:
        DownloadLinkNotFoundError: no selector produced a value.
    """
    soup = parse_document(document)
    for rule in download.selectors:
        value = extract(soup, _link_rule(rule)).strip()
        if value:
            return resolve_link(base_link, value)
    raise DownloadLinkNotFoundError("magnet link not found")
