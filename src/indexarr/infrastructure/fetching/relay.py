"""
Anti-bot relay adapter (FlareSolverr wire protocol).

The relay fetches a URL on our behalf and returns the rendered page
wrapped in a JSON envelope:

    POST {relay}/v1  {"cmd": "request.get", "url": "...", "maxTimeout": 60000}
    -> {"status": "ok", "message": "...", "solution": {"response": "<html>"}}

Only ``status == "ok"`` yields content.
"""

from __future__ import annotations

from typing import Mapping
from urllib.parse import urlencode

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, ValidationError

from indexarr.domain.indexers import RelayError

log = structlog.get_logger(__name__)

RELAY_COMMAND = "request.get"
DEFAULT_MAX_TIMEOUT_MS = 60000


class RelaySolution(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: str | None = None
    status: int | None = None
    response: str = ""


class RelayResponse(BaseModel):
    """Response envelope; unknown keys (timestamps, versions) are ignored."""

    model_config = ConfigDict(extra="ignore")

    status: str
    message: str = ""
    solution: RelaySolution | None = None


def _with_query(url: str, params: Mapping[str, str] | None) -> str:
    if not params:
        return url
    sep = "&" if "?" in url else "?"
    return f"{url}{sep}{urlencode(dict(params))}"


class RelayFetcher:
    """Drop-in substitute for ``DirectFetcher`` that proxies GETs via the relay."""

    via_relay = True

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        relay_url: str,
        *,
        max_timeout_ms: int = DEFAULT_MAX_TIMEOUT_MS,
        timeout_seconds: float | None = None,
    ) -> None:
        self._http = http_client
        self._endpoint = relay_url.rstrip("/") + "/v1"
        self._max_timeout_ms = max_timeout_ms
        # the relay may spend up to maxTimeout solving the challenge
        self._timeout = (
            timeout_seconds if timeout_seconds is not None else max_timeout_ms / 1000 + 5
        )

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        params: Mapping[str, str] | None = None,
    ) -> str:
        """Fetch *url* through the relay and unwrap the rendered page.

        Raises:
            RelayError: transport failure, malformed envelope, or a
                status other than ``"ok"``.
        """
        if method.upper() != "GET":
            raise RelayError(f"FlareSolverr only relays GET requests, got {method.upper()}")

        target = _with_query(url, params)
        payload = {"cmd": RELAY_COMMAND, "url": target, "maxTimeout": self._max_timeout_ms}

        try:
            resp = await self._http.post(
                self._endpoint,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            log.warning(
                "relay_connection_failed", relay=self._endpoint, url=target, error=str(e)
            )
            raise RelayError(f"FlareSolverr connection failed: {e}") from e

        # error envelopes come with 5xx codes, so the body is decoded regardless
        try:
            envelope = RelayResponse.model_validate_json(resp.content)
        except ValidationError as e:
            log.warning(
                "relay_envelope_invalid",
                relay=self._endpoint,
                url=target,
                http_status=resp.status_code,
            )
            raise RelayError(f"Failed to decode FS response: {e}") from e

        if envelope.status != "ok":
            log.info(
                "relay_status_not_ok",
                url=target,
                status=envelope.status,
                message=envelope.message,
            )
            raise RelayError(
                f"FlareSolverr Status: {envelope.status}, Msg: {envelope.message}",
                status=envelope.status,
            )

        body = envelope.solution.response if envelope.solution else ""
        log.debug("relay_fetch_ok", url=target, size=len(body))
        return body
