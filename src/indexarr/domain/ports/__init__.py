from .fetcher import DocumentFetcherPort
from .search_engine import SearchEnginePort

__all__ = [
    "DocumentFetcherPort",
    "SearchEnginePort",
]
