"""Type conversion utilities."""

from __future__ import annotations

from datetime import datetime, timezone


def to_int(raw: str | int | None, default: int = 0) -> int:
    """Convert a table cell to a non-negative int, *default* if invalid.

    Handles various formats:
        - None → default
        - int → int (negative → default)
        - " 123 " → 123
        - "1,234" → 1234
        - "" → default
        - "n/a" → default

    Args:
        raw: Input value (str, int, or None).
        default: Value returned when conversion fails.

    Returns:
        Non-negative integer.
    """
    if raw is None:
        return default

    if isinstance(raw, bool):
        return default

    if isinstance(raw, int):
        return raw if raw >= 0 else default

    txt = raw.strip().replace(",", "")
    if not txt:
        return default
    try:
        value = int(txt)
    except ValueError:
        return default
    return value if value >= 0 else default


def to_datetime(raw: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if not raw:
        return None
    txt = raw.strip()
    if txt.endswith("Z"):
        txt = txt[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(txt)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
