from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one reachability probe.

    ``reason`` is empty for healthy probes and otherwise a message meant to
    be shown to an operator verbatim.
    """

    indexer: str
    ok: bool
    started_at: datetime
    duration_ms: float
    target_url: str | None = None
    reason: str = ""
    http_status: int | None = None
    via_relay: bool = False
