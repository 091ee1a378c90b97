from .loader import load_definition, parse_definition
from .registry import DefinitionRegistry

__all__ = [
    "DefinitionRegistry",
    "load_definition",
    "parse_definition",
]
