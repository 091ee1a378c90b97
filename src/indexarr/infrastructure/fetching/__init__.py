from .direct import DEFAULT_USER_AGENT, DirectFetcher
from .relay import RelayFetcher, RelayResponse, RelaySolution
from .selector import FetcherSelector

__all__ = [
    "DEFAULT_USER_AGENT",
    "DirectFetcher",
    "FetcherSelector",
    "RelayFetcher",
    "RelayResponse",
    "RelaySolution",
]
