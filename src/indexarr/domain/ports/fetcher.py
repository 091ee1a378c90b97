"""Port for fetching raw documents (direct or via an anti-bot relay)."""

from __future__ import annotations

from typing import Mapping, Protocol, runtime_checkable


@runtime_checkable
class DocumentFetcherPort(Protocol):
    """Fetch a URL and return the raw document.

    Direct fetches return undecoded bytes; the relay returns the page it
    already decoded as ``str``, so no charset is applied twice.

    Implementations raise ``FetchError`` subclasses (``NetworkError`` or
    ``RelayError``) on failure; callers never see transport exceptions.
    """

    via_relay: bool

    async def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        params: Mapping[str, str] | None = None,
    ) -> bytes | str: ...
