from .prober import NO_LINKS_REASON, ReachabilityProber

__all__ = ["NO_LINKS_REASON", "ReachabilityProber"]
