"""
Business logic layer services for re3data-explorer.

This module contains the services behind the aggregation pipeline:
- RegistryClient: HTTP transport for registry XML documents
- DiscoveryService: Listing query → detail URLs
- ExtractionService: Detail document → extraction records
- normalization: Records → Result Table (missing marker, flags, explosion)
- export_service: CSV persistence
"""

from re3data_explorer.services.registry_client import RegistryClient, RegistryAPIError
from re3data_explorer.services.discovery import DiscoveryService, DiscoveryError
from re3data_explorer.services.extraction import (
    ExtractionService,
    ExtractionResult,
    ItemExtractionError,
    extract_records,
    identifier_from_url,
)
from re3data_explorer.services.normalization import (
    MISSING,
    normalize_table,
    explode_column,
    derive_flags,
    mark_missing,
    serialize_multivalue,
)
from re3data_explorer.services.export_service import (
    save_table_csv,
    load_table_csv,
    save_failures_csv,
)

__all__ = [
    'RegistryClient',
    'RegistryAPIError',
    'DiscoveryService',
    'DiscoveryError',
    'ExtractionService',
    'ExtractionResult',
    'ItemExtractionError',
    'extract_records',
    'identifier_from_url',
    'MISSING',
    'normalize_table',
    'explode_column',
    'derive_flags',
    'mark_missing',
    'serialize_multivalue',
    'save_table_csv',
    'load_table_csv',
    'save_failures_csv',
]
