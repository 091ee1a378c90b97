"""Pydantic validation models for indexer definition YAML files.

The models follow the site-definition format field for field, but are
lenient about YAML scalars: numbers and booleans written where strings
are expected are coerced to strings. Keys this interpreter does not use
(headers, error blocks, cookies, ...) are ignored.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

RESOURCE_KIND = "Indexer"


def _scalar(v: Any) -> Any:
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, (int, float)):
        return str(v)
    return v


def _str_list(v: Any) -> Any:
    if v is None:
        return []
    if not isinstance(v, list):
        return [_scalar(v)]
    return [_scalar(x) for x in v]


def _str_map(v: Any) -> Any:
    if v is None:
        return {}
    if not isinstance(v, dict):
        return v
    return {str(_scalar(k)): _scalar(val) if val is not None else "" for k, val in v.items()}


class _Model(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class FilterBlock(_Model):
    name: str
    args: List[str] = Field(default_factory=list)

    @field_validator("args", mode="before")
    @classmethod
    def _coerce_args(cls, v: Any) -> Any:
        return _str_list(v)


class SelectorBlock(_Model):
    selector: str = ""
    attribute: Optional[str] = None
    optional: bool = False
    default: Optional[str] = None
    case: Dict[str, str] = Field(default_factory=dict)
    remove: Optional[str] = None
    text: Optional[str] = None
    filters: List[FilterBlock] = Field(default_factory=list)

    @field_validator("default", "text", mode="before")
    @classmethod
    def _coerce_scalar(cls, v: Any) -> Any:
        return _scalar(v)

    @field_validator("case", mode="before")
    @classmethod
    def _coerce_case(cls, v: Any) -> Any:
        return _str_map(v)

    @field_validator("attribute", "remove")
    @classmethod
    def _blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()


class RowsBlock(_Model):
    selector: str = ""
    after: int = 0
    remove: Optional[str] = None
    filters: List[FilterBlock] = Field(default_factory=list)

    @field_validator("after")
    @classmethod
    def _validate_after(cls, v: int) -> int:
        if v < 0:
            raise ValueError("rows.after must be >= 0")
        return v


class SearchPathBlock(_Model):
    """
    One search path.

    Example:
      - path: "search/{{ .Keywords }}/1/"
        method: get
        categories: ["Movies"]
    """

    path: str
    method: Literal["get", "post"] = "get"
    categories: List[str] = Field(default_factory=list)
    inputs: Dict[str, str] = Field(default_factory=dict)
    inherit_inputs: bool = Field(default=True, alias="inheritinputs")
    follow_redirect: bool = Field(default=False, alias="followredirect")

    @field_validator("method", mode="before")
    @classmethod
    def _lower_method(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("categories", mode="before")
    @classmethod
    def _coerce_categories(cls, v: Any) -> Any:
        return _str_list(v)

    @field_validator("inputs", mode="before")
    @classmethod
    def _coerce_inputs(cls, v: Any) -> Any:
        return _str_map(v)


class SearchBlockModel(_Model):
    path: Optional[str] = None
    paths: List[SearchPathBlock] = Field(default_factory=list)
    inputs: Dict[str, str] = Field(default_factory=dict)
    keywords_filters: List[FilterBlock] = Field(
        default_factory=list, alias="keywordsfilters"
    )
    rows: RowsBlock = Field(default_factory=RowsBlock)
    fields: Dict[str, SelectorBlock] = Field(default_factory=dict)

    @field_validator("inputs", mode="before")
    @classmethod
    def _coerce_inputs(cls, v: Any) -> Any:
        return _str_map(v)

    @field_validator("fields", mode="before")
    @classmethod
    def _shorthand_fields(cls, v: Any) -> Any:
        # "title: a.name" is shorthand for "title: {selector: a.name}"
        if not isinstance(v, dict):
            return v
        return {
            name: {"selector": rule} if isinstance(rule, str) else rule
            for name, rule in v.items()
        }

    @model_validator(mode="after")
    def _legacy_path(self) -> "SearchBlockModel":
        if self.path and not self.paths:
            self.paths = [SearchPathBlock(path=self.path)]
        return self


class DownloadBlockModel(_Model):
    method: Literal["get", "post"] = "get"
    selectors: List[SelectorBlock] = Field(default_factory=list)

    @field_validator("method", mode="before")
    @classmethod
    def _lower_method(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v


class CategoryMappingModel(_Model):
    id: str
    cat: str
    desc: Optional[str] = None
    default: bool = False

    @field_validator("id", "cat", mode="before")
    @classmethod
    def _coerce_scalar(cls, v: Any) -> Any:
        return _scalar(v)


class ModesModel(_Model):
    search: List[str] = Field(default_factory=lambda: ["q"])
    tv_search: List[str] = Field(default_factory=list, alias="tv-search")
    movie_search: List[str] = Field(default_factory=list, alias="movie-search")
    music_search: List[str] = Field(default_factory=list, alias="music-search")
    book_search: List[str] = Field(default_factory=list, alias="book-search")


class CapsModel(_Model):
    categories: Dict[str, str] = Field(default_factory=dict)
    category_mappings: List[CategoryMappingModel] = Field(
        default_factory=list, alias="categorymappings"
    )
    modes: ModesModel = Field(default_factory=ModesModel)
    allow_raw_search: bool = Field(default=False, alias="allowrawsearch")

    @field_validator("categories", mode="before")
    @classmethod
    def _coerce_categories(cls, v: Any) -> Any:
        return _str_map(v)


class SettingsFieldModel(_Model):
    name: str
    type: str
    label: Optional[str] = None
    default: Optional[str] = None
    options: Dict[str, str] = Field(default_factory=dict)

    @field_validator("default", mode="before")
    @classmethod
    def _coerce_default(cls, v: Any) -> Any:
        return _scalar(v)

    @field_validator("options", mode="before")
    @classmethod
    def _coerce_options(cls, v: Any) -> Any:
        return _str_map(v)


class LoginModel(_Model):
    method: Optional[str] = None
    path: Optional[str] = None
    submit_path: Optional[str] = Field(default=None, alias="submitpath")
    inputs: Dict[str, str] = Field(default_factory=dict)
    captcha: Optional[Dict[str, Any]] = None

    @field_validator("inputs", mode="before")
    @classmethod
    def _coerce_inputs(cls, v: Any) -> Any:
        return _str_map(v)


class IndexerDefinitionPydantic(_Model):
    """
    Pydantic validation model for one indexer definition.

    After validation, this is converted to
    domain.indexers.definition.IndexerDefinition.
    """

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: Optional[str] = None
    language: str = "en-US"
    type: Literal["public", "semi-private", "private"] = "public"
    encoding: str = "UTF-8"
    links: List[str] = Field(default_factory=list)
    legacy_links: List[str] = Field(default_factory=list, alias="legacylinks")
    request_delay: Optional[float] = Field(default=None, alias="requestDelay")
    follow_redirect: bool = Field(default=False, alias="followredirect")

    caps: CapsModel = Field(default_factory=CapsModel)
    settings: List[SettingsFieldModel] = Field(default_factory=list)
    login: Optional[LoginModel] = None
    search: Optional[SearchBlockModel] = None
    download: Optional[DownloadBlockModel] = None

    @field_validator("id", "name")
    @classmethod
    def _strip(cls, v: str) -> str:
        return v.strip()

    @field_validator("request_delay", mode="before")
    @classmethod
    def _blank_delay(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("links", "legacy_links")
    @classmethod
    def _strip_links(cls, v: List[str]) -> List[str]:
        return [link.strip() for link in v if link and link.strip()]


class IndexerResource(_Model):
    """Resource-wrapped definition (``kind: Indexer`` with a ``spec``)."""

    api_version: str = Field(alias="apiVersion")
    kind: Literal["Indexer"]
    metadata: Dict[str, Any] = Field(default_factory=dict)
    spec: Dict[str, Any]


def is_resource_document(data: Dict[str, Any]) -> bool:
    return data.get("kind") == RESOURCE_KIND and "spec" in data
