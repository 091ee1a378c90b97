from .search_engine import IndexerSearchEngine

__all__ = ["IndexerSearchEngine"]
