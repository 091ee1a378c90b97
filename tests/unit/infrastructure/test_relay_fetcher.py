"""Unit tests for the FlareSolverr relay adapter."""

from __future__ import annotations

import json
from dataclasses import replace

import httpx
import pytest
import respx

from indexarr.domain.indexers import RelayError
from indexarr.infrastructure.fetching import RelayFetcher
from indexarr.infrastructure.scraping.row_parser import parse_rows

_RELAY = "http://relay.local:8191"
_ENDPOINT = f"{_RELAY}/v1"
_TARGET = "https://example.com/search/ubuntu/"


def _ok(html: str = "<html>solved</html>") -> dict:
    return {
        "status": "ok",
        "message": "Challenge not detected!",
        "solution": {"url": _TARGET, "status": 200, "response": html},
        "startTimestamp": 1,
        "version": "3.3.0",
    }


class TestRelayFetch:
    @respx.mock
    async def test_ok_envelope_returns_page(self) -> None:
        respx.post(_ENDPOINT).respond(200, json=_ok())
        async with httpx.AsyncClient() as client:
            body = await RelayFetcher(client, _RELAY).fetch(_TARGET)

        assert body == "<html>solved</html>"

    @respx.mock
    async def test_request_payload(self) -> None:
        route = respx.post(_ENDPOINT).respond(200, json=_ok())
        async with httpx.AsyncClient() as client:
            await RelayFetcher(client, _RELAY, max_timeout_ms=30000).fetch(_TARGET)

        request = route.calls.last.request
        assert json.loads(request.content) == {
            "cmd": "request.get",
            "url": _TARGET,
            "maxTimeout": 30000,
        }
        assert request.headers["Content-Type"] == "application/json"

    @respx.mock
    async def test_params_folded_into_target(self) -> None:
        route = respx.post(_ENDPOINT).respond(200, json=_ok())
        async with httpx.AsyncClient() as client:
            await RelayFetcher(client, _RELAY).fetch(
                "https://example.com/s?x=1", params={"q": "a b"}
            )

        sent = json.loads(route.calls.last.request.content)
        assert sent["url"] == "https://example.com/s?x=1&q=a+b"

    async def test_trailing_slash_on_relay_url(self) -> None:
        async with httpx.AsyncClient() as client:
            fetcher = RelayFetcher(client, _RELAY + "/")

        assert fetcher.endpoint == _ENDPOINT

    @respx.mock
    async def test_error_envelope_raises(self) -> None:
        respx.post(_ENDPOINT).respond(
            500, json={"status": "error", "message": "Timeout after 60.0 seconds."}
        )
        async with httpx.AsyncClient() as client:
            with pytest.raises(RelayError) as exc_info:
                await RelayFetcher(client, _RELAY).fetch(_TARGET)

        assert str(exc_info.value) == (
            "FlareSolverr Status: error, Msg: Timeout after 60.0 seconds."
        )
        assert exc_info.value.status == "error"

    @respx.mock
    async def test_missing_solution_yields_empty(self) -> None:
        respx.post(_ENDPOINT).respond(200, json={"status": "ok"})
        async with httpx.AsyncClient() as client:
            body = await RelayFetcher(client, _RELAY).fetch(_TARGET)

        assert body == ""

    @respx.mock
    async def test_undecodable_envelope_raises(self) -> None:
        respx.post(_ENDPOINT).respond(502, text="<html>Bad Gateway</html>")
        async with httpx.AsyncClient() as client:
            with pytest.raises(RelayError, match="Failed to decode FS response"):
                await RelayFetcher(client, _RELAY).fetch(_TARGET)

    @respx.mock
    async def test_connection_failure_raises(self) -> None:
        respx.post(_ENDPOINT).mock(side_effect=httpx.ConnectError("refused"))
        async with httpx.AsyncClient() as client:
            with pytest.raises(RelayError, match="FlareSolverr connection failed"):
                await RelayFetcher(client, _RELAY).fetch(_TARGET)

    async def test_post_is_rejected(self) -> None:
        async with httpx.AsyncClient() as client:
            with pytest.raises(RelayError, match="only relays GET"):
                await RelayFetcher(client, _RELAY).fetch(_TARGET, method="POST")


class TestRelayDocumentDecoding:
    @respx.mock
    async def test_non_utf8_definition_parses_relayed_page(
        self, row_html, page_html, definition
    ) -> None:
        page = page_html(row_html(title="Привет мир"))
        respx.post(_ENDPOINT).respond(200, json=_ok(page))
        cyrillic = replace(definition, encoding="windows-1251")

        async with httpx.AsyncClient() as client:
            body = await RelayFetcher(client, _RELAY).fetch(_TARGET)

        [candidate] = parse_rows(body, cyrillic)
        assert candidate.title == "Привет мир"
