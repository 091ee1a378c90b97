"""Reachability prober: is an indexer's search endpoint answering?"""

from __future__ import annotations

import asyncio
import time
from datetime import datetime, timezone
from typing import Iterable, Mapping

import structlog

from indexarr.domain.entities import ProbeResult
from indexarr.domain.indexers import FetchError, IndexerDefinition
from indexarr.infrastructure.fetching import FetcherSelector
from indexarr.infrastructure.templating import build_target_url

log = structlog.get_logger(__name__)

NO_LINKS_REASON = "No links defined"


class ReachabilityProber:
    """Probes an indexer's rendered search URL, directly or via the relay.

    Strategy:
    1. Render the first search path with empty keywords and fallback
       credentials; an unrenderable path probes the bare base link.
    2. Fetch it once. Any 2xx (direct) or relay status ``"ok"`` is healthy.

    Never raises for network or relay trouble and never retries.
    """

    def __init__(
        self,
        fetchers: FetcherSelector,
        *,
        config: Mapping[str, str] | None = None,
        config_fallback: str = "guest",
    ) -> None:
        self._fetchers = fetchers
        self._config = dict(config or {})
        self._fallback = config_fallback

    def build_probe_url(self, definition: IndexerDefinition) -> str:
        return build_target_url(
            definition,
            "",
            self._config,
            fallback=self._fallback,
        )

    async def probe(
        self,
        definition: IndexerDefinition,
        use_relay: bool | None = None,
    ) -> ProbeResult:
        """Probe a single definition and return a ProbeResult."""
        started_at = datetime.now(timezone.utc)
        t0 = time.monotonic()

        if not definition.links:
            return ProbeResult(
                indexer=definition.id,
                ok=False,
                started_at=started_at,
                duration_ms=0.0,
                reason=NO_LINKS_REASON,
            )

        target = self.build_probe_url(definition)
        fetcher = self._fetchers.for_definition(definition, use_relay)

        try:
            await fetcher.fetch(target)
        except FetchError as exc:
            duration_ms = (time.monotonic() - t0) * 1000
            log.debug(
                "probe_unhealthy",
                indexer=definition.id,
                url=target,
                via_relay=fetcher.via_relay,
                reason=str(exc),
            )
            return ProbeResult(
                indexer=definition.id,
                ok=False,
                started_at=started_at,
                duration_ms=duration_ms,
                target_url=target,
                reason=str(exc),
                http_status=getattr(exc, "status_code", None),
                via_relay=fetcher.via_relay,
            )

        return ProbeResult(
            indexer=definition.id,
            ok=True,
            started_at=started_at,
            duration_ms=(time.monotonic() - t0) * 1000,
            target_url=target,
            via_relay=fetcher.via_relay,
        )

    async def probe_all(
        self,
        definitions: Iterable[IndexerDefinition],
        concurrency: int = 5,
        use_relay: bool | None = None,
    ) -> dict[str, ProbeResult]:
        """Probe multiple definitions concurrently.

        Returns:
            Mapping of definition id → ProbeResult, in input order.
        """
        sem = asyncio.Semaphore(concurrency)
        ordered = list(definitions)

        async def _probe_one(definition: IndexerDefinition) -> ProbeResult:
            async with sem:
                result = await self.probe(definition, use_relay)
                log.debug(
                    "probe_done",
                    indexer=definition.id,
                    ok=result.ok,
                    duration_ms=round(result.duration_ms, 1),
                )
                return result

        results = await asyncio.gather(*(_probe_one(d) for d in ordered))
        return {d.id: r for d, r in zip(ordered, results)}
