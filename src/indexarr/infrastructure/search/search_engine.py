"""Run one indexer definition against its site."""

from __future__ import annotations

from dataclasses import replace
from typing import Mapping

import structlog

from indexarr.domain.entities import Candidate
from indexarr.domain.indexers import (
    IndexerDefinition,
    SearchBlock,
    SearchPath,
    UnresolvedTemplateError,
    validate_definition,
)
from indexarr.infrastructure.fetching import FetcherSelector
from indexarr.infrastructure.scraping import apply_filters, parse_details_page, parse_rows
from indexarr.infrastructure.templating import build_target_url, render

log = structlog.get_logger(__name__)


class IndexerSearchEngine:
    """Single-indexer search: render the path, fetch, parse rows.

    Flow:
        1. Validate the definition
        2. Apply keyword filters
        3. Render the first applicable search path (base link on failure)
        4. Fetch directly or through the relay
        5. Parse rows into candidates

    Errors are raised as ``IndexerError`` subclasses; isolating them per
    definition is the aggregator's job.

    Args:
        fetchers: Chooses direct or relay fetching per definition.
        config: Values bound to ``.Config.<name>``, overlaying setting defaults.
        config_fallback: Substituted for configuration keys nobody provides.
        use_relay: Force (True) or forbid (False) the relay; None follows
            each definition's settings.
    """

    def __init__(
        self,
        fetchers: FetcherSelector,
        *,
        config: Mapping[str, str] | None = None,
        config_fallback: str = "guest",
        use_relay: bool | None = None,
    ) -> None:
        self._fetchers = fetchers
        self._config = dict(config or {})
        self._fallback = config_fallback
        self._use_relay = use_relay

    def _bindings(self, definition: IndexerDefinition) -> dict[str, str]:
        return {**definition.setting_defaults(), **self._config}

    def _query_inputs(
        self,
        definition: IndexerDefinition,
        search: SearchBlock,
        path: SearchPath,
        keywords: str,
    ) -> dict[str, str]:
        merged = {**search.inputs, **path.inputs} if path.inherit_inputs else dict(path.inputs)
        bindings = self._bindings(definition)
        rendered: dict[str, str] = {}
        for name, template in merged.items():
            try:
                rendered[name] = render(
                    template,
                    keywords,
                    bindings,
                    fallback=self._fallback,
                    encode_keywords=False,
                )
            except UnresolvedTemplateError as e:
                log.warning(
                    "search_input_unresolved",
                    indexer=definition.id,
                    input=name,
                    fragment=e.fragment,
                )
        return rendered

    async def search(
        self,
        definition: IndexerDefinition,
        keywords: str,
        category: str | None = None,
    ) -> list[Candidate]:
        """Search *definition*'s site for *keywords*.

        Raises:
            DefinitionError: the definition is not usable for search.
            FetchError: the document could not be retrieved.
            ParseError: the document could not be parsed.
        """
        validate_definition(definition)
        search = definition.search
        assert search is not None

        filtered = apply_filters(keywords, search.keywords_filters)
        url = build_target_url(
            definition,
            filtered,
            self._config,
            fallback=self._fallback,
            category=category,
        )

        path = search.first_path(category)
        method = path.method.upper() if path else "GET"
        params = self._query_inputs(definition, search, path, filtered) if path else {}

        fetcher = self._fetchers.for_definition(definition, self._use_relay)
        log.debug(
            "indexer_search_started",
            indexer=definition.id,
            url=url,
            method=method,
            via_relay=fetcher.via_relay,
        )
        document = await fetcher.fetch(url, method=method, params=params or None)
        candidates = parse_rows(document, definition)

        log.info(
            "indexer_search_completed",
            indexer=definition.id,
            keywords=keywords,
            results=len(candidates),
        )
        return candidates

    async def resolve_download(
        self,
        definition: IndexerDefinition,
        candidate: Candidate,
    ) -> Candidate:
        """Replace *candidate*'s link with the one found on its details page.

        Returns *candidate* unchanged when the definition has no download
        rule or there is no page to visit.

        Raises:
            FetchError: the details page could not be retrieved.
            DownloadLinkNotFoundError: no download selector matched.
        """
        rule = definition.download
        if rule is None or not rule.selectors:
            return candidate

        page = candidate.details or (None if candidate.is_magnet else candidate.magnet)
        if not page:
            return candidate

        fetcher = self._fetchers.for_definition(definition, self._use_relay)
        document = await fetcher.fetch(page, method=rule.method.upper())
        link = parse_details_page(document, rule, definition.base_link)

        log.debug("download_resolved", indexer=definition.id, page=page, link=link)
        return replace(candidate, magnet=link)
