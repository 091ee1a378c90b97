from .indexer_search import SearchAggregator, rank, select

__all__ = ["SearchAggregator", "rank", "select"]
