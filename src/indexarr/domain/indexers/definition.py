# src/indexarr/domain/indexers/definition.py
"""Pure domain models for indexer definitions (framework-free)."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Mapping

RELAY_SETTING_TYPE = "info_flaresolverr"


class FilterName(str, Enum):
    """Closed catalog of string filters a definition may chain."""

    RE_REPLACE = "re_replace"
    REPLACE = "replace"
    TRIM = "trim"
    PREPEND = "prepend"
    APPEND = "append"
    TOLOWER = "tolower"
    TOUPPER = "toupper"
    SPLIT = "split"
    REGEXP = "regexp"
    QUERYSTRING = "querystring"
    URLDECODE = "urldecode"
    URLENCODE = "urlencode"

    @classmethod
    def lookup(cls, raw: str) -> FilterName | None:
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class FilterSpec:
    """One filter invocation: a catalog name (or the unknown raw name) + args."""

    name: FilterName | str
    args: tuple[str, ...] = ()

    @property
    def known(self) -> bool:
        return isinstance(self.name, FilterName)


@dataclass(frozen=True)
class SelectorRule:
    """
    Leaf extraction instruction.

    ``attribute`` unset means "use element text". ``case`` is an override
    table applied to the extracted value before ``filters`` run.
    """

    selector: str = ""
    attribute: str | None = None
    optional: bool = False
    default: str | None = None
    case: Mapping[str, str] = field(default_factory=dict)
    remove: str | None = None
    text: str | None = None
    filters: tuple[FilterSpec, ...] = ()


@dataclass(frozen=True)
class RowRule:
    """How to find the repeated result rows of a search page."""

    selector: str = ""
    after: int = 0
    remove: str | None = None
    filters: tuple[FilterSpec, ...] = ()


@dataclass(frozen=True)
class SearchPath:
    """
    A search URL path template.

    Example:
      - path: "search/{{ .Keywords }}/1/"
        method: get
        categories: ["Movies"]
    """

    path: str
    method: Literal["get", "post"] = "get"
    categories: tuple[str, ...] = ()
    inputs: Mapping[str, str] = field(default_factory=dict)
    inherit_inputs: bool = True
    follow_redirect: bool = False

    def applies_to(self, category: str | None) -> bool:
        if category is None or not self.categories:
            return True
        return category in self.categories


@dataclass(frozen=True)
class SearchBlock:
    paths: tuple[SearchPath, ...] = ()
    inputs: Mapping[str, str] = field(default_factory=dict)
    keywords_filters: tuple[FilterSpec, ...] = ()
    rows: RowRule = field(default_factory=RowRule)
    fields: Mapping[str, SelectorRule] = field(default_factory=dict)

    def first_path(self, category: str | None = None) -> SearchPath | None:
        """Return the first path serving *category*, in declaration order."""
        for path in self.paths:
            if path.applies_to(category):
                return path
        return None


@dataclass(frozen=True)
class DownloadRule:
    """Selectors used to pull a magnet/torrent link out of a details page."""

    selectors: tuple[SelectorRule, ...] = ()
    method: Literal["get", "post"] = "get"


@dataclass(frozen=True)
class CategoryMapping:
    id: str
    cat: str
    desc: str | None = None
    default: bool = False


@dataclass(frozen=True)
class SearchModes:
    search: tuple[str, ...] = ("q",)
    tv_search: tuple[str, ...] = ()
    movie_search: tuple[str, ...] = ()
    music_search: tuple[str, ...] = ()
    book_search: tuple[str, ...] = ()


@dataclass(frozen=True)
class Capabilities:
    categories: Mapping[str, str] = field(default_factory=dict)
    category_mappings: tuple[CategoryMapping, ...] = ()
    modes: SearchModes = field(default_factory=SearchModes)
    allow_raw_search: bool = False


@dataclass(frozen=True)
class SettingsField:
    name: str
    type: str
    label: str | None = None
    default: str | None = None
    options: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class LoginBlock:
    """Login description. Carried as data only; sessions are not executed."""

    method: str | None = None
    path: str | None = None
    submit_path: str | None = None
    inputs: Mapping[str, str] = field(default_factory=dict)
    captcha_type: str | None = None


@dataclass(frozen=True)
class IndexerDefinition:
    """
    Declarative description of how to query and scrape one site.

    Only validated definitions (see ``validate_definition``) should be
    handed to the search engine or the prober.
    """

    id: str
    name: str
    links: tuple[str, ...] = ()
    description: str | None = None
    language: str = "en-US"
    type: Literal["public", "semi-private", "private"] = "public"
    encoding: str = "UTF-8"
    legacy_links: tuple[str, ...] = ()
    request_delay: float | None = None
    follow_redirect: bool = False
    caps: Capabilities = field(default_factory=Capabilities)
    settings: tuple[SettingsField, ...] = ()
    login: LoginBlock | None = None
    search: SearchBlock | None = None
    download: DownloadRule | None = None

    @property
    def base_link(self) -> str:
        return self.links[0] if self.links else ""

    @property
    def wants_relay(self) -> bool:
        return any(s.type == RELAY_SETTING_TYPE for s in self.settings)

    def setting_defaults(self) -> dict[str, str]:
        return {s.name: s.default for s in self.settings if s.default is not None}
