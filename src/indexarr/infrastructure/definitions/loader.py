from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from indexarr.domain.indexers import DefinitionLoadError, IndexerDefinition
from indexarr.infrastructure.definitions.adapters import to_domain_definition
from indexarr.infrastructure.definitions.validation_schema import (
    IndexerDefinitionPydantic,
    IndexerResource,
    is_resource_document,
)

log = structlog.get_logger(__name__)


def unwrap_document(data: dict[str, Any]) -> dict[str, Any]:
    """Return the bare definition mapping from either accepted shape.

    Resource-wrapped documents carry the definition under ``spec``; the
    resource name stands in for a missing ``id``.
    """
    if not is_resource_document(data):
        return data
    resource = IndexerResource.model_validate(data)
    spec = dict(resource.spec)
    name = resource.metadata.get("name")
    if not spec.get("id") and isinstance(name, str):
        spec["id"] = name
    return spec


def parse_definition(data: Any) -> IndexerDefinition:
    """Validate an already-decoded YAML document into a domain definition.

    Raises:
        DefinitionLoadError: the document does not match the schema.
    """
    if data is None:
        raise DefinitionLoadError("YAML document is empty")
    if not isinstance(data, dict):
        raise DefinitionLoadError("YAML root must be a mapping/object")
    try:
        pydantic_model = IndexerDefinitionPydantic.model_validate(unwrap_document(data))
    except ValidationError as e:
        raise DefinitionLoadError(str(e)) from e
    return to_domain_definition(pydantic_model)


def load_definition(path: Path) -> IndexerDefinition:
    """Load and validate a YAML definition file, returning the domain model."""
    try:
        raw = path.read_text(encoding="utf-8")
        data = yaml.safe_load(raw)
        return parse_definition(data)
    except (OSError, UnicodeDecodeError) as e:
        log.error(
            "definition_load_failed",
            definition_file=str(path),
            error_type=type(e).__name__,
            error_message=str(e),
        )
        raise DefinitionLoadError(str(e)) from e
    except yaml.YAMLError as e:
        log.error(
            "definition_validation_failed",
            definition_file=str(path),
            error_type=type(e).__name__,
            error_message=str(e),
        )
        raise DefinitionLoadError(str(e)) from e
    except DefinitionLoadError as e:
        log.error(
            "definition_validation_failed",
            definition_file=str(path),
            error_type="ValidationError",
            error_message=str(e),
        )
        raise
