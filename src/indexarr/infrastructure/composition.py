"""Composition root: wire config into fetchers, engine, aggregator and prober."""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

import httpx
import structlog

from indexarr.application.use_cases import SearchAggregator
from indexarr.infrastructure.config import AppConfig
from indexarr.infrastructure.definitions import DefinitionRegistry
from indexarr.infrastructure.fetching import DirectFetcher, FetcherSelector, RelayFetcher
from indexarr.infrastructure.probing import ReachabilityProber
from indexarr.infrastructure.search import IndexerSearchEngine

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Runtime:
    """Everything a command needs, sharing one HTTP client."""

    config: AppConfig
    http_client: httpx.AsyncClient
    registry: DefinitionRegistry
    fetchers: FetcherSelector
    engine: IndexerSearchEngine
    aggregator: SearchAggregator
    prober: ReachabilityProber


def build_fetchers(config: AppConfig, http_client: httpx.AsyncClient) -> FetcherSelector:
    direct = DirectFetcher(
        http_client,
        user_agent=config.http_user_agent,
        timeout_seconds=config.http_timeout_seconds,
        follow_redirects=config.http_follow_redirects,
    )
    relay = (
        RelayFetcher(
            http_client,
            config.relay_url,
            max_timeout_ms=config.relay_max_timeout_ms,
        )
        if config.relay_url
        else None
    )
    return FetcherSelector(direct, relay)


@asynccontextmanager
async def runtime(
    config: AppConfig,
    *,
    use_relay: bool | None = None,
) -> AsyncIterator[Runtime]:
    """Build the runtime; the HTTP client is closed on exit.

    Order matters:
        1. HTTP client (shared by both fetch paths)
        2. Definition registry
        3. Fetchers, search engine, aggregator, prober
    """
    http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout_seconds),
        headers={"User-Agent": config.http_user_agent},
        follow_redirects=config.http_follow_redirects,
    )
    log.debug("http_client_initialized")

    registry = DefinitionRegistry(config.definitions_dir)
    fetchers = build_fetchers(config, http_client)
    engine = IndexerSearchEngine(
        fetchers,
        config_fallback=config.search_config_fallback,
        use_relay=use_relay,
    )
    aggregator = SearchAggregator(
        engine,
        max_concurrent=config.search_max_concurrent,
        deadline_seconds=config.search_deadline_seconds,
    )
    prober = ReachabilityProber(fetchers, config_fallback=config.search_config_fallback)
    log.debug("runtime_ready", relay_configured=fetchers.relay_configured)

    try:
        yield Runtime(
            config=config,
            http_client=http_client,
            registry=registry,
            fetchers=fetchers,
            engine=engine,
            aggregator=aggregator,
            prober=prober,
        )
    finally:
        await http_client.aclose()
        log.debug("http_client_closed")
