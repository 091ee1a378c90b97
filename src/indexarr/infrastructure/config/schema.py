"""Pydantic configuration models with validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


def _normalize_path(value: Any) -> Path:
    """
    Normalize a path-like value without causing filesystem side-effects.

    This function MUST NOT create directories or files.
    """
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (definitions/http/relay/search/probe/logging).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="indexarr", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # Definitions (YAML section: definitions.dir)
    definitions_dir: Path = Field(
        default=Path("./definitions"),
        validation_alias=AliasChoices(
            "definitions_dir",
            AliasPath("definitions", "dir"),
        ),
        description="Directory containing indexer definition YAML files.",
    )

    # HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=30.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Per-request timeout in seconds for direct fetches.",
    )
    http_follow_redirects: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "http_follow_redirects",
            AliasPath("http", "follow_redirects"),
        ),
        description="Whether direct fetches follow redirects.",
    )
    http_user_agent: str = Field(
        default="Prowlarr/1.0 (Text-Mode-Operator)",
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for direct fetches; some sites require this value.",
    )

    # Anti-bot relay (YAML section: relay.*)
    relay_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "relay_url",
            AliasPath("relay", "url"),
        ),
        description="FlareSolverr-compatible relay base URL. Unset disables the relay.",
    )
    relay_max_timeout_ms: int = Field(
        default=60_000,
        validation_alias=AliasChoices(
            "relay_max_timeout_ms",
            AliasPath("relay", "max_timeout_ms"),
        ),
        description="maxTimeout sent to the relay (milliseconds).",
    )

    # Search (YAML section: search.*)
    search_max_concurrent: int = Field(
        default=5,
        validation_alias=AliasChoices(
            "search_max_concurrent",
            AliasPath("search", "max_concurrent"),
        ),
        description="Max definitions searched in parallel.",
    )
    search_deadline_seconds: Optional[float] = Field(
        default=60.0,
        validation_alias=AliasChoices(
            "search_deadline_seconds",
            AliasPath("search", "deadline_seconds"),
        ),
        description="Overall deadline for an aggregated search. None waits for all.",
    )
    search_config_fallback: str = Field(
        default="guest",
        validation_alias=AliasChoices(
            "search_config_fallback",
            AliasPath("search", "config_fallback"),
        ),
        description="Value substituted for missing .Config.<name> template keys.",
    )

    # Probe (YAML section: probe.*)
    probe_concurrency: int = Field(
        default=5,
        validation_alias=AliasChoices(
            "probe_concurrency",
            AliasPath("probe", "concurrency"),
        ),
        description="Max parallel reachability probes.",
    )

    # Logging
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    @field_validator("definitions_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Path:
        return _normalize_path(v)

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @field_validator("relay_max_timeout_ms")
    @classmethod
    def _validate_relay_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("relay_max_timeout_ms must be > 0")
        return v

    @field_validator("search_max_concurrent", "probe_concurrency")
    @classmethod
    def _validate_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("concurrency limits must be >= 1")
        return v

    @field_validator("search_deadline_seconds")
    @classmethod
    def _validate_deadline(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("search_deadline_seconds must be > 0")
        return v

    @field_validator("relay_url")
    @classmethod
    def _blank_relay(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "definitions": {"dir": str(self.definitions_dir)},
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "follow_redirects": self.http_follow_redirects,
                "user_agent": self.http_user_agent,
            },
            "relay": {
                "url": self.relay_url,
                "max_timeout_ms": self.relay_max_timeout_ms,
            },
            "search": {
                "max_concurrent": self.search_max_concurrent,
                "deadline_seconds": self.search_deadline_seconds,
                "config_fallback": self.search_config_fallback,
            },
            "probe": {"concurrency": self.probe_concurrency},
            "logging": {"level": self.log_level, "format": self.log_format},
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Intended usage:
    - load.py creates EnvOverrides() to read INDEXARR_* variables,
      converts to dict of set values, merges into YAML/defaults,
      then validates AppConfig.

    Supported env var examples (flat, explicit):
    - INDEXARR_DEFINITIONS_DIR
    - INDEXARR_RELAY_URL
    - INDEXARR_SEARCH_MAX_CONCURRENT
    - INDEXARR_LOG_LEVEL
    """

    model_config = SettingsConfigDict(
        env_prefix="INDEXARR_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    definitions_dir: Optional[Path] = None

    http_timeout_seconds: Optional[float] = None
    http_follow_redirects: Optional[bool] = None
    http_user_agent: Optional[str] = None

    relay_url: Optional[str] = None
    relay_max_timeout_ms: Optional[int] = None

    search_max_concurrent: Optional[int] = None
    search_deadline_seconds: Optional[float] = None
    search_config_fallback: Optional[str] = None

    probe_concurrency: Optional[int] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    @field_validator("definitions_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
