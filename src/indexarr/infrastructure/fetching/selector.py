"""Choose between the direct fetcher and the relay for a definition."""

from __future__ import annotations

import structlog

from indexarr.domain.indexers import IndexerDefinition
from indexarr.domain.ports import DocumentFetcherPort

log = structlog.get_logger(__name__)


class FetcherSelector:
    """Pick the fetch path per definition.

    The relay is used when explicitly requested, or when the definition
    asks for it and a relay is configured. Without a configured relay
    every definition is fetched directly.
    """

    def __init__(
        self,
        direct: DocumentFetcherPort,
        relay: DocumentFetcherPort | None = None,
    ) -> None:
        self._direct = direct
        self._relay = relay

    @property
    def relay_configured(self) -> bool:
        return self._relay is not None

    def for_definition(
        self,
        definition: IndexerDefinition,
        use_relay: bool | None = None,
    ) -> DocumentFetcherPort:
        wanted = definition.wants_relay if use_relay is None else use_relay
        if not wanted:
            return self._direct
        if self._relay is None:
            if use_relay:
                log.warning("relay_not_configured", indexer=definition.id)
            return self._direct
        return self._relay
