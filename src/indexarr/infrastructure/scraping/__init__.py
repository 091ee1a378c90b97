from .filters import apply_filter, apply_filters
from .row_parser import parse_details_page, parse_document, parse_rows
from .selector_engine import extract

__all__ = [
    "apply_filter",
    "apply_filters",
    "extract",
    "parse_details_page",
    "parse_document",
    "parse_rows",
]
