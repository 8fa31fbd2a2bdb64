"""
XML parsing modules for re3data API responses.

- Detail documents use the r3d namespace (version in the namespace URI)
- Listing responses carry identifiers and ready-made detail links
- Parsing is strict: malformed documents raise DocumentParseError
"""

from .xml_parser import (
    DocumentParseError,
    XPathEvaluationError,
    parse_document,
    build_namespaces,
    xpath_values,
    first_value,
    all_values,
    count_matches,
)
from .listing_parser import extract_detail_urls

__all__ = [
    # Errors
    'DocumentParseError',
    'XPathEvaluationError',
    # XML access
    'parse_document',
    'build_namespaces',
    'xpath_values',
    'first_value',
    'all_values',
    'count_matches',
    # Listing
    'extract_detail_urls',
]
