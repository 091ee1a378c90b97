"""Structural validation of indexer definitions."""

from __future__ import annotations

from .definition import IndexerDefinition
from .exceptions import DefinitionError, DefinitionProblem

REQUIRED_FIELDS: tuple[str, ...] = ("title", "download")


def validate_definition(definition: IndexerDefinition) -> IndexerDefinition:
    """Return *definition* unchanged if it is usable for search.

    Raises:
        DefinitionError: missing links, missing row selector, or a field
            rule that can never produce a value.
    """
    if not definition.links or not definition.links[0].strip():
        raise DefinitionError(definition.id, DefinitionProblem.MISSING_LINKS)

    search = definition.search
    if search is None or not search.rows.selector.strip():
        raise DefinitionError(definition.id, DefinitionProblem.MISSING_ROW_SELECTOR)

    for name in REQUIRED_FIELDS:
        if name not in search.fields:
            raise DefinitionError(
                definition.id,
                DefinitionProblem.MALFORMED_FIELD,
                f"missing required field '{name}'",
            )

    for name, rule in search.fields.items():
        if not rule.selector and rule.text is None and rule.default is None:
            raise DefinitionError(
                definition.id,
                DefinitionProblem.MALFORMED_FIELD,
                f"field '{name}' has neither selector, text nor default",
            )

    return definition
