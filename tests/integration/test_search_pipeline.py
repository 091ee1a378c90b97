"""Integration tests for the definition -> fetch -> parse -> select pipeline.

Real registry, fetchers, search engine and aggregator; only HTTP is mocked.
"""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest
import respx

from indexarr.application.use_cases import SearchAggregator
from indexarr.domain.entities import SearchOutcome
from indexarr.infrastructure.definitions import DefinitionRegistry
from indexarr.infrastructure.fetching import DirectFetcher, FetcherSelector, RelayFetcher
from indexarr.infrastructure.probing import ReachabilityProber
from indexarr.infrastructure.search import IndexerSearchEngine

pytestmark = pytest.mark.integration

TRACKER = "https://tracker.test"
RELAY = "http://relay.test:8191"


def _selector(client: httpx.AsyncClient, relay: bool = True) -> FetcherSelector:
    return FetcherSelector(
        DirectFetcher(client),
        RelayFetcher(client, RELAY) if relay else None,
    )


def _relay_ok(html: str) -> dict:
    return {"status": "ok", "message": "", "solution": {"status": 200, "response": html}}


class TestAggregatedSearch:
    async def test_selects_best_across_indexers(
        self,
        definitions_dir: Path,
        http_client: httpx.AsyncClient,
        respx_mock: respx.MockRouter,
        tracker_page: str,
        guarded_page: str,
    ) -> None:
        tracker = respx_mock.get(url__startswith=f"{TRACKER}/search/ubuntu/").respond(
            200, text=tracker_page
        )
        relay = respx_mock.post(f"{RELAY}/v1").respond(200, json=_relay_ok(guarded_page))

        definitions = DefinitionRegistry(definitions_dir).load_all()
        aggregator = SearchAggregator(IndexerSearchEngine(_selector(http_client)))
        sel = await aggregator.search(definitions, "ubuntu", min_seeders=100)

        assert sel.outcome is SearchOutcome.FOUND
        assert [c.title for c in sel.ranked] == [
            "Ubuntu 24.04 Desktop",
            "Ubuntu 24.04 Server",
            "Ubuntu Mirror",
        ]
        assert sel.selected is not None
        assert sel.selected.seeders == 1204
        assert sel.selected.details == f"{TRACKER}/t/1"
        assert sel.ranked[1].magnet == f"{TRACKER}/download/2.torrent"

        assert tracker.calls.last.request.url.params["sort"] == "seeders"
        sent = json.loads(relay.calls.last.request.content)
        assert sent["url"] == "https://guarded.test/s/ubuntu"

    async def test_failing_indexer_reported(
        self,
        definitions_dir: Path,
        http_client: httpx.AsyncClient,
        respx_mock: respx.MockRouter,
        tracker_page: str,
        guarded_page: str,
    ) -> None:
        respx_mock.get(url__startswith=f"{TRACKER}/search/").respond(503)
        respx_mock.post(f"{RELAY}/v1").respond(200, json=_relay_ok(guarded_page))

        definitions = DefinitionRegistry(definitions_dir).load_all()
        aggregator = SearchAggregator(IndexerSearchEngine(_selector(http_client)))
        sel = await aggregator.search(definitions, "ubuntu mirror", min_seeders=10)

        assert sel.outcome is SearchOutcome.FOUND
        assert sel.selected is not None
        assert sel.selected.indexer == "guarded"
        [failure] = sel.failures
        assert failure.indexer == "tracker"
        assert failure.kind == "network"
        assert failure.message == "HTTP Status: 503"

    async def test_relay_error_reported(
        self,
        definitions_dir: Path,
        http_client: httpx.AsyncClient,
        respx_mock: respx.MockRouter,
        tracker_page: str,
        guarded_page: str,
    ) -> None:
        respx_mock.get(url__startswith=f"{TRACKER}/search/").respond(200, text=tracker_page)
        respx_mock.post(f"{RELAY}/v1").respond(
            500, json={"status": "error", "message": "Cloudflare challenge failed"}
        )

        definitions = DefinitionRegistry(definitions_dir).load_all()
        aggregator = SearchAggregator(IndexerSearchEngine(_selector(http_client)))
        sel = await aggregator.search(definitions, "ubuntu", min_seeders=5000)

        assert sel.outcome is SearchOutcome.BELOW_THRESHOLD
        [failure] = sel.failures
        assert failure.kind == "relay"
        assert failure.message == (
            "FlareSolverr Status: error, Msg: Cloudflare challenge failed"
        )

    async def test_without_relay_fetches_directly(
        self,
        definitions_dir: Path,
        http_client: httpx.AsyncClient,
        respx_mock: respx.MockRouter,
        tracker_page: str,
        guarded_page: str,
    ) -> None:
        respx_mock.get(url__startswith=f"{TRACKER}/search/").respond(200, text="<html/>")
        guarded = respx_mock.get("https://guarded.test/s/ubuntu").respond(
            200, text=guarded_page
        )

        definitions = DefinitionRegistry(definitions_dir).load_all()
        engine = IndexerSearchEngine(_selector(http_client, relay=False))
        sel = await SearchAggregator(engine).search(definitions, "ubuntu")

        assert guarded.called
        assert [c.title for c in sel.ranked] == ["Ubuntu Mirror"]


class TestProbing:
    async def test_probe_all(
        self,
        definitions_dir: Path,
        http_client: httpx.AsyncClient,
        respx_mock: respx.MockRouter,
        tracker_page: str,
        guarded_page: str,
    ) -> None:
        respx_mock.get(url__startswith=f"{TRACKER}/search/").respond(403)
        respx_mock.post(f"{RELAY}/v1").respond(200, json=_relay_ok("<html/>"))

        definitions = DefinitionRegistry(definitions_dir).load_all()
        results = await ReachabilityProber(_selector(http_client)).probe_all(definitions)

        assert list(results) == ["guarded", "tracker"]
        assert results["guarded"].ok is True
        assert results["guarded"].via_relay is True
        assert results["tracker"].ok is False
        assert results["tracker"].http_status == 403
        assert results["tracker"].target_url == f"{TRACKER}/search//"
