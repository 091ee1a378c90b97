from .definition import (
    Capabilities,
    CategoryMapping,
    DownloadRule,
    FilterName,
    FilterSpec,
    IndexerDefinition,
    LoginBlock,
    RowRule,
    SearchBlock,
    SearchModes,
    SearchPath,
    SelectorRule,
    SettingsField,
)
from .exceptions import (
    DefinitionError,
    DefinitionLoadError,
    DefinitionNotFoundError,
    DefinitionProblem,
    DownloadLinkNotFoundError,
    DuplicateDefinitionError,
    FetchError,
    FragmentUnreadableError,
    IndexerError,
    NetworkError,
    ParseError,
    RelayError,
    TemplateError,
    UnreadableDocumentError,
    UnresolvedTemplateError,
)
from .validation import validate_definition

__all__ = [
    "Capabilities",
    "CategoryMapping",
    "DefinitionError",
    "DefinitionLoadError",
    "DefinitionNotFoundError",
    "DefinitionProblem",
    "DownloadLinkNotFoundError",
    "DownloadRule",
    "DuplicateDefinitionError",
    "FetchError",
    "FilterName",
    "FilterSpec",
    "FragmentUnreadableError",
    "IndexerDefinition",
    "IndexerError",
    "LoginBlock",
    "NetworkError",
    "ParseError",
    "RelayError",
    "RowRule",
    "SearchBlock",
    "SearchModes",
    "SearchPath",
    "SelectorRule",
    "SettingsField",
    "TemplateError",
    "UnreadableDocumentError",
    "UnresolvedTemplateError",
    "validate_definition",
]
