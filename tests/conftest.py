"""Shared test fixtures for indexarr test suite."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Callable
from unittest.mock import AsyncMock

import pytest

from indexarr.domain.entities import Candidate
from indexarr.domain.indexers import (
    DownloadRule,
    IndexerDefinition,
    RowRule,
    SearchBlock,
    SearchPath,
    SelectorRule,
    SettingsField,
)

BASE_LINK = "https://example.com"

# ---------------------------------------------------------------------------
# HTML fixtures
# ---------------------------------------------------------------------------


def build_row(
    title: str = "Ubuntu 22.04 ISO",
    href: str = "magnet:?xt=urn:btih:abc",
    size: str = "2.5 GB",
    seeders: str = "100",
    leechers: str = "10",
) -> str:
    return (
        '<tr class="result">'
        f'<td class="title">{title}</td>'
        f'<td><a class="dl" href="{href}">dl</a></td>'
        f"<td>{size}</td><td>{seeders}</td><td>{leechers}</td>"
        "</tr>"
    )


def build_page(*rows: str) -> str:
    return f"<html><body><table><tbody>{''.join(rows)}</tbody></table></body></html>"


@pytest.fixture()
def row_html() -> Callable[..., str]:
    """Factory for one result row in the canonical table layout."""
    return build_row


@pytest.fixture()
def page_html() -> Callable[..., str]:
    """Factory wrapping rows into a full results document."""
    return build_page


# ---------------------------------------------------------------------------
# Definition fixtures
# ---------------------------------------------------------------------------


def _default_fields() -> dict[str, SelectorRule]:
    return {
        "title": SelectorRule(selector=".title"),
        "download": SelectorRule(selector=".dl", attribute="href"),
        "size": SelectorRule(selector="td:nth-of-type(3)"),
        "seeders": SelectorRule(selector="td:nth-of-type(4)"),
        "leechers": SelectorRule(selector="td:nth-of-type(5)"),
    }


def build_definition(
    definition_id: str = "example",
    *,
    links: tuple[str, ...] = (BASE_LINK,),
    path: str | None = "search/{{ .Keywords }}/",
    row_selector: str = "tr.result",
    fields: dict[str, SelectorRule] | None = None,
    extra_fields: dict[str, SelectorRule] | None = None,
    settings: tuple[SettingsField, ...] = (),
    download: DownloadRule | None = None,
    with_search: bool = True,
    **search_kwargs: Any,
) -> IndexerDefinition:
    rules = fields if fields is not None else _default_fields()
    if extra_fields:
        rules = {**rules, **extra_fields}
    search = None
    if with_search:
        search_kwargs.setdefault("paths", (SearchPath(path=path),) if path else ())
        search = SearchBlock(
            rows=RowRule(selector=row_selector),
            fields=MappingProxyType(rules),
            **search_kwargs,
        )
    return IndexerDefinition(
        id=definition_id,
        name=definition_id.title(),
        links=links,
        settings=settings,
        search=search,
        download=download,
    )


@pytest.fixture()
def definition_factory() -> Callable[..., IndexerDefinition]:
    """Factory for definitions matching the canonical row markup."""
    return build_definition


@pytest.fixture()
def definition() -> IndexerDefinition:
    """Valid definition matching the canonical row markup."""
    return build_definition()


@pytest.fixture()
def candidate() -> Candidate:
    """Minimal valid Candidate."""
    return Candidate(
        title="Ubuntu 22.04 ISO",
        magnet="magnet:?xt=urn:btih:abc",
        indexer="example",
        size="2.5 GB",
        seeders=100,
        leechers=10,
    )


# ---------------------------------------------------------------------------
# Mock port fixtures
# ---------------------------------------------------------------------------


class FakeFetcher:
    """In-memory DocumentFetcherPort recording every request."""

    def __init__(
        self,
        documents: dict[str, bytes | str] | None = None,
        *,
        via_relay: bool = False,
        error: Exception | None = None,
    ) -> None:
        self.documents = documents or {}
        self.via_relay = via_relay
        self.error = error
        self.calls: list[tuple[str, str, dict[str, str] | None]] = []

    async def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        params: Any = None,
    ) -> bytes:
        self.calls.append((url, method, dict(params) if params else None))
        if self.error is not None:
            raise self.error
        doc = self.documents.get(url, "<html></html>")
        return doc.encode("utf-8") if isinstance(doc, str) else doc


@pytest.fixture()
def fake_fetcher_factory() -> Callable[..., FakeFetcher]:
    return FakeFetcher


@pytest.fixture()
def mock_search_engine() -> AsyncMock:
    """Mock SearchEnginePort."""
    engine = AsyncMock()
    engine.search = AsyncMock(return_value=[])
    engine.resolve_download = AsyncMock(side_effect=lambda _d, c: c)
    return engine
