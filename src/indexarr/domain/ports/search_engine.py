"""Port for single-indexer search execution."""

from __future__ import annotations

from typing import Protocol

from indexarr.domain.entities.search import Candidate
from indexarr.domain.indexers.definition import IndexerDefinition


class SearchEnginePort(Protocol):
    """Async interface for running one definition against its site."""

    async def search(
        self,
        definition: IndexerDefinition,
        keywords: str,
        category: str | None = None,
    ) -> list[Candidate]: ...

    async def resolve_download(
        self, definition: IndexerDefinition, candidate: Candidate
    ) -> Candidate: ...
