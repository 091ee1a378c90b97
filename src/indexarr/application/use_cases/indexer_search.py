"""Aggregated search use case: fan out, merge, rank, select."""

from __future__ import annotations

import asyncio
from typing import Iterable, Sequence

import structlog

from indexarr.domain.entities import (
    Candidate,
    FailureKind,
    IndexerFailure,
    SearchBadRequest,
    SearchOutcome,
    SearchSelection,
)
from indexarr.domain.indexers import (
    DefinitionError,
    FetchError,
    IndexerDefinition,
    IndexerError,
    ParseError,
    RelayError,
    TemplateError,
)
from indexarr.domain.ports import SearchEnginePort

log = structlog.get_logger(__name__)

_Slot = list[Candidate] | IndexerFailure | None


def _failure_kind(exc: Exception) -> FailureKind:
    if isinstance(exc, (DefinitionError, TemplateError)):
        return "definition"
    if isinstance(exc, RelayError):
        return "relay"
    if isinstance(exc, FetchError):
        return "network"
    if isinstance(exc, ParseError):
        return "parse"
    return "unexpected"


def rank(candidates: Iterable[Candidate]) -> list[Candidate]:
    """Order by seeders descending; ties keep their incoming order."""
    return sorted(candidates, key=lambda c: -c.seeders)


def select(ranked: Sequence[Candidate], min_seeders: int) -> Candidate | None:
    """First candidate of *ranked* meeting *min_seeders*, or None."""
    return next((c for c in ranked if c.seeders >= min_seeders), None)


class SearchAggregator:
    """Searches several definitions and picks the best candidate.

    Flow:
        1. Validate the request
        2. Search every definition with bounded concurrency
        3. Reassemble per-definition results in input order
        4. Stable-sort by seeders, select the first meeting the threshold

    A failing or cancelled definition contributes no candidates and is
    reported in ``SearchSelection.failures``; it never aborts the search.
    """

    def __init__(
        self,
        engine: SearchEnginePort,
        *,
        max_concurrent: int = 5,
        deadline_seconds: float | None = None,
    ) -> None:
        """Initialize aggregator.

        Args:
            engine: Single-indexer search engine.
            max_concurrent: Maximum definitions searched at once.
            deadline_seconds: Default overall deadline; None waits for all.
        """
        self._engine = engine
        self._max_concurrent = max(1, max_concurrent)
        self._deadline = deadline_seconds

    async def search(
        self,
        definitions: Sequence[IndexerDefinition],
        keywords: str,
        min_seeders: int = 0,
        *,
        category: str | None = None,
        deadline_seconds: float | None = None,
        indexer_ids: Sequence[str] | None = None,
        resolve_download: bool = False,
    ) -> SearchSelection:
        """Run *keywords* against *definitions* and select the best candidate.

        Args:
            definitions: Definitions to search, in tie-break order.
            keywords: Raw search keywords.
            min_seeders: Minimum seeders for the selected candidate.
            category: Restrict each definition to paths serving this category.
            deadline_seconds: Overall deadline overriding the default.
            indexer_ids: Only search definitions with these ids.
            resolve_download: Visit the selected candidate's details page
                to replace its link.

        Returns:
            SearchSelection with outcome FOUND, NO_RESULTS or BELOW_THRESHOLD.

        Raises:
            SearchBadRequest: no definitions to search or negative min_seeders.
        """
        if min_seeders < 0:
            raise SearchBadRequest(f"min_seeders must be >= 0, got {min_seeders}")

        chosen = list(definitions)
        if indexer_ids:
            wanted = set(indexer_ids)
            chosen = [d for d in chosen if d.id in wanted]
        if not chosen:
            raise SearchBadRequest("no indexer definitions to search")

        deadline = deadline_seconds if deadline_seconds is not None else self._deadline
        slots = await self._fan_out(chosen, keywords, category, deadline)

        merged: list[Candidate] = []
        failures: list[IndexerFailure] = []
        for slot in slots:
            if isinstance(slot, IndexerFailure):
                failures.append(slot)
            elif slot is not None:
                merged.extend(slot)

        ranked = rank(merged)
        selected = select(ranked, min_seeders)

        if not ranked:
            outcome = SearchOutcome.NO_RESULTS
        elif selected is None:
            outcome = SearchOutcome.BELOW_THRESHOLD
        else:
            outcome = SearchOutcome.FOUND
            if resolve_download:
                selected, ranked = await self._resolve(chosen, selected, ranked)

        log.info(
            "aggregated_search_completed",
            keywords=keywords,
            indexers=len(chosen),
            failed=len(failures),
            results=len(ranked),
            outcome=outcome.value,
            min_seeders=min_seeders,
        )
        return SearchSelection(
            outcome=outcome,
            ranked=tuple(ranked),
            selected=selected,
            min_seeders=min_seeders,
            failures=tuple(failures),
        )

    async def _fan_out(
        self,
        definitions: list[IndexerDefinition],
        keywords: str,
        category: str | None,
        deadline: float | None,
    ) -> list[_Slot]:
        """Search all definitions; slot *i* holds definition *i*'s outcome."""
        semaphore = asyncio.Semaphore(self._max_concurrent)
        slots: list[_Slot] = [None] * len(definitions)

        async def _search_one(index: int, definition: IndexerDefinition) -> None:
            async with semaphore:
                try:
                    slots[index] = await self._engine.search(definition, keywords, category)
                except IndexerError as e:
                    log.warning(
                        "indexer_search_failed",
                        indexer=definition.id,
                        error_type=type(e).__name__,
                        error=str(e),
                    )
                    slots[index] = IndexerFailure(definition.id, _failure_kind(e), str(e))
                except Exception as e:
                    log.error(
                        "indexer_search_crashed",
                        indexer=definition.id,
                        exc_info=True,
                    )
                    slots[index] = IndexerFailure(definition.id, "unexpected", str(e))

        tasks = [
            asyncio.create_task(_search_one(i, d)) for i, d in enumerate(definitions)
        ]
        try:
            _done, pending = await asyncio.wait(tasks, timeout=deadline)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        if pending:
            log.warning(
                "aggregated_search_deadline_exceeded",
                deadline_seconds=deadline,
                cancelled=len(pending),
            )
        for i, definition in enumerate(definitions):
            if slots[i] is None:
                slots[i] = IndexerFailure(
                    definition.id,
                    "cancelled",
                    f"deadline of {deadline}s exceeded",
                )
        return slots

    async def _resolve(
        self,
        definitions: list[IndexerDefinition],
        selected: Candidate,
        ranked: list[Candidate],
    ) -> tuple[Candidate, list[Candidate]]:
        definition = next((d for d in definitions if d.id == selected.indexer), None)
        if definition is None:
            return selected, ranked
        try:
            resolved = await self._engine.resolve_download(definition, selected)
        except IndexerError as e:
            log.warning(
                "download_resolution_failed",
                indexer=definition.id,
                title=selected.title,
                error=str(e),
            )
            return selected, ranked
        ranked = [resolved if c is selected else c for c in ranked]
        return resolved, ranked
