"""Indexer interpreter exceptions."""

from __future__ import annotations

from enum import Enum


class IndexerError(Exception):
    """Base class for all indexer-interpreter errors."""


class DefinitionProblem(str, Enum):
    MISSING_LINKS = "missing_links"
    MISSING_ROW_SELECTOR = "missing_row_selector"
    MALFORMED_FIELD = "malformed_field"


class DefinitionError(IndexerError):
    """Raised when an indexer definition is incomplete or malformed."""

    def __init__(
        self,
        indexer: str,
        problem: DefinitionProblem,
        detail: str = "",
    ) -> None:
        self.indexer = indexer
        self.problem = problem
        self.detail = detail
        msg = f"indexer '{indexer}': {problem.value}"
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)


class DefinitionLoadError(IndexerError):
    """Raised when a definition file cannot be read or fails schema validation."""


class DefinitionNotFoundError(IndexerError):
    """Raised when a definition id is not known to the registry."""


class DuplicateDefinitionError(IndexerError):
    """Raised when two definition files resolve to the same id."""


class TemplateError(IndexerError):
    """Base class for path-template failures."""


class UnresolvedTemplateError(TemplateError):
    """Raised when placeholder syntax survives rendering."""

    def __init__(self, template: str, fragment: str) -> None:
        self.template = template
        self.fragment = fragment
        super().__init__(f"unresolved template action {fragment!r} in {template!r}")


class FetchError(IndexerError):
    """Base class for document fetch failures."""


class NetworkError(FetchError):
    """Direct fetch failed (transport error or non-2xx status)."""

    def __init__(self, url: str, message: str, status_code: int | None = None) -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class RelayError(FetchError):
    """Anti-bot relay failed or reported a non-"ok" status."""

    def __init__(self, message: str, status: str | None = None) -> None:
        self.status = status
        self.relay_message = message
        super().__init__(message)


class ParseError(IndexerError):
    """Base class for document parsing failures."""


class UnreadableDocumentError(ParseError):
    """The document could not be parsed into a queryable tree."""


class FragmentUnreadableError(ParseError):
    """A document fragment could not be queried (corrupt tree or bad selector)."""


class DownloadLinkNotFoundError(ParseError):
    """No download selector produced a value on a details page."""
