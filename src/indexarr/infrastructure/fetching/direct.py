"""Direct document fetcher over a shared ``httpx.AsyncClient``."""

from __future__ import annotations

from typing import Mapping

import httpx
import structlog

from indexarr.domain.indexers import NetworkError

log = structlog.get_logger(__name__)

# Some sites reject clients that do not identify as an indexer manager.
DEFAULT_USER_AGENT = "Prowlarr/1.0 (Text-Mode-Operator)"


class DirectFetcher:
    """Fetch documents straight from the indexer site.

    Args:
        http_client: Shared client; its lifecycle belongs to the caller.
        user_agent: Sent as ``User-Agent`` on every request.
        timeout_seconds: Per-request timeout.
        follow_redirects: Whether 3xx responses are followed.
    """

    via_relay = False

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout_seconds: float = 30.0,
        follow_redirects: bool = True,
    ) -> None:
        self._http = http_client
        self._user_agent = user_agent
        self._timeout = timeout_seconds
        self._follow_redirects = follow_redirects

    async def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        params: Mapping[str, str] | None = None,
    ) -> bytes:
        """Fetch *url*; query inputs go to the query string (GET) or form body (POST).

        Raises:
            NetworkError: transport failure or a non-2xx status.
        """
        method = method.upper()
        request_args: dict = {}
        if params:
            if method == "POST":
                request_args["data"] = dict(params)
            else:
                request_args["params"] = dict(params)

        try:
            resp = await self._http.request(
                method,
                url,
                headers={"User-Agent": self._user_agent},
                timeout=self._timeout,
                follow_redirects=self._follow_redirects,
                **request_args,
            )
        except httpx.InvalidURL as e:
            raise NetworkError(url, f"Failed to create request: {e}") from e
        except httpx.HTTPError as e:
            log.debug("direct_fetch_failed", url=url, error=str(e))
            raise NetworkError(url, f"Connection failed: {e}") from e

        if not resp.is_success:
            log.debug("direct_fetch_bad_status", url=url, status=resp.status_code)
            raise NetworkError(
                url,
                f"HTTP Status: {resp.status_code}",
                status_code=resp.status_code,
            )

        log.debug(
            "direct_fetch_ok", url=url, status=resp.status_code, size=len(resp.content)
        )
        return resp.content
