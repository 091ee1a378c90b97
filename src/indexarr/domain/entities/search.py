"""Search result entities.

Pure value objects without framework dependencies or I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Literal

FailureKind = Literal[
    "definition", "network", "relay", "parse", "cancelled", "unexpected"
]


@dataclass(frozen=True)
class Candidate:
    """A normalized, validated release extracted from one result row."""

    title: str
    magnet: str
    indexer: str
    size: str | None = None
    seeders: int = 0
    leechers: int = 0
    published_at: datetime | None = None
    details: str | None = None

    @property
    def is_magnet(self) -> bool:
        return self.magnet.startswith("magnet:")


@dataclass(frozen=True)
class IndexerFailure:
    """Why one definition contributed no candidates to an aggregated search."""

    indexer: str
    kind: FailureKind
    message: str


class SearchOutcome(str, Enum):
    FOUND = "found"
    NO_RESULTS = "no_results"
    BELOW_THRESHOLD = "below_threshold"


@dataclass(frozen=True)
class SearchSelection:
    """Aggregator output. Recomputed on every search, never cached."""

    outcome: SearchOutcome
    ranked: tuple[Candidate, ...] = ()
    selected: Candidate | None = None
    min_seeders: int = 0
    failures: tuple[IndexerFailure, ...] = ()

    @property
    def total_results(self) -> int:
        return len(self.ranked)

    @property
    def found(self) -> bool:
        return self.outcome is SearchOutcome.FOUND


class SearchError(Exception):
    """Base error for aggregated search use cases."""


class SearchBadRequest(SearchError):
    """The caller supplied an unusable request (e.g. zero definitions)."""
