"""Indexer definition interpreter: search, rank and probe torrent index sites."""

__version__ = "0.1.0"
