"""URL joining rules shared by the resolver, the row parser and the prober."""

from __future__ import annotations

from urllib.parse import urljoin

_ABSOLUTE_PREFIXES: tuple[str, ...] = ("http://", "https://", "magnet:")


def is_absolute_link(value: str) -> bool:
    """True for absolute http(s) URIs and ``magnet:`` URIs."""
    return value.lower().startswith(_ABSOLUTE_PREFIXES)


def join_url(base: str, path: str) -> str:
    """Join *path* onto *base* with exactly one separating slash.

    Exactly one trailing slash is trimmed from *base*; *path* is attached
    with a single ``/`` whether or not it already starts with one.

        >>> join_url("https://example.com/", "/download/x.torrent")
        'https://example.com/download/x.torrent'
        >>> join_url("https://example.com", "download/x.torrent")
        'https://example.com/download/x.torrent'
    """
    if base.endswith("/"):
        base = base[:-1]
    if path.startswith("/"):
        return base + path
    return f"{base}/{path}"


def resolve_link(base: str, value: str) -> str:
    """Return *value* unchanged when absolute, else resolved against *base*.

    Network-path references (``//host/path``) take the scheme of *base*.
    """
    if not value or is_absolute_link(value):
        return value
    if value.startswith("//"):
        return urljoin(base, value)
    return join_url(base, value)
