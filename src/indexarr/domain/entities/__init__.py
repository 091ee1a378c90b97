from .probe import ProbeResult
from .search import (
    Candidate,
    FailureKind,
    IndexerFailure,
    SearchBadRequest,
    SearchError,
    SearchOutcome,
    SearchSelection,
)

__all__ = [
    "Candidate",
    "FailureKind",
    "IndexerFailure",
    "ProbeResult",
    "SearchBadRequest",
    "SearchError",
    "SearchOutcome",
    "SearchSelection",
]
