"""Definition registry with lazy loading and in-memory caching."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml

from indexarr.domain.indexers import (
    DefinitionLoadError,
    DefinitionNotFoundError,
    DuplicateDefinitionError,
    IndexerDefinition,
)

from .loader import load_definition, unwrap_document

log = structlog.get_logger(__name__)

DEFINITION_SUFFIXES = frozenset({".yaml", ".yml"})


class DefinitionRegistry:
    """
    Lazy-loading indexer definition registry.

    discover():
      - indexes files only (no YAML parsing)

    get()/load_all()/list_ids():
      - may load/parse on demand and cache results
    """

    def __init__(self, directory: Path) -> None:
        self._directory = directory
        self._discovered: bool = False
        self._paths: list[Path] = []
        self._cache: dict[str, IndexerDefinition] = {}

    @property
    def directory(self) -> Path:
        return self._directory

    def discover(self) -> None:
        if self._discovered:
            return

        self._discovered = True
        self._paths = []

        if not self._directory.is_dir():
            log.warning("definition_directory_not_found", directory=str(self._directory))
            return

        self._paths = [
            path
            for path in sorted(self._directory.iterdir(), key=lambda p: p.name)
            if path.is_file() and path.suffix.lower() in DEFINITION_SUFFIXES
        ]

        log.info(
            "definitions_discovered",
            count=len(self._paths),
            directory=str(self._directory),
        )
        if not self._paths:
            log.warning("no_definitions_found", directory=str(self._directory))

    def list_ids(self) -> list[str]:
        self.discover()

        seen: set[str] = set()
        for path in self._paths:
            definition_id = self._peek_id(path)
            # duplicates are surfaced on load_all()
            if definition_id is not None:
                seen.add(definition_id)
        return sorted(seen)

    def get(self, definition_id: str) -> IndexerDefinition:
        self.discover()

        cached = self._cache.get(definition_id)
        if cached is not None:
            return cached

        for path in self._paths:
            if self._peek_id(path) != definition_id:
                continue
            return self._load(path)

        raise DefinitionNotFoundError(f"Indexer definition '{definition_id}' not found")

    def load_all(
        self,
        *,
        strict: bool = True,
        only_public: bool = False,
    ) -> list[IndexerDefinition]:
        """
        Load every discovered definition, sorted by id.

        With ``strict`` (default) load errors propagate; otherwise broken
        files are logged and skipped. Duplicate ids always raise.
        """
        self.discover()

        loaded: dict[str, IndexerDefinition] = {}
        for path in self._paths:
            try:
                definition = self._load(path)
            except DefinitionLoadError:
                if strict:
                    raise
                log.warning("definition_skipped", definition_file=str(path))
                continue

            if definition.id in loaded:
                raise DuplicateDefinitionError(
                    f"Indexer definition id '{definition.id}' already exists"
                )
            loaded[definition.id] = definition

        definitions = sorted(loaded.values(), key=lambda d: d.id)
        if only_public:
            definitions = [d for d in definitions if d.type == "public"]
        return definitions

    def _load(self, path: Path) -> IndexerDefinition:
        definition = load_definition(path)
        cached = self._cache.get(definition.id)
        if cached is not None:
            return cached
        self._cache[definition.id] = definition
        log.debug("definition_loaded", indexer=definition.id, definition_file=path.name)
        return definition

    def _peek_id(self, path: Path) -> str | None:
        """Read the definition id without full validation."""
        try:
            data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, yaml.YAMLError):
            return None
        if not isinstance(data, dict):
            return None
        try:
            data = unwrap_document(data)
        except ValueError:
            return None
        definition_id = data.get("id")
        if isinstance(definition_id, str) and definition_id.strip():
            return definition_id.strip()
        return None
