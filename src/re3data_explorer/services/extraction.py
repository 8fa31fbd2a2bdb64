"""
Extraction Service

Fetches one repository detail document and turns it into extraction records:
- Single-valued fields: first match, or "" when absent (never an error)
- Multi-valued fields: list of matches, de-duplicated in first-seen order
- Repeating groups (e.g., APIs): one record per occurrence, counted first
  and then addressed by position

Records carry lists for multi-valued fields; joining into delimited strings
only happens when a table is written to CSV.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import unquote, urlparse
import logging

from lxml import etree

from re3data_explorer.config import get_config
from re3data_explorer.models.extraction import ExtractionSpec
from re3data_explorer.parsers.xml_parser import (
    all_values,
    build_namespaces,
    count_matches,
    first_value,
    parse_document,
)
from re3data_explorer.services.registry_client import RegistryClient
from re3data_explorer.validators import INDEX_PLACEHOLDER

logger = logging.getLogger(__name__)


Record = Dict[str, Any]


class ItemExtractionError(RuntimeError):
    """Raised when a single detail document cannot be fetched or parsed."""

    def __init__(self, message: str, url: str, identifier: str):
        super().__init__(message)
        self.url = url
        self.identifier = identifier


@dataclass
class ExtractionResult:
    """Result of extracting a single detail document."""
    url: str
    identifier: str
    status: str  # 'success', 'failed'
    records: List[Record] = field(default_factory=list)
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == 'success'


def identifier_from_url(url: str) -> str:
    """
    Registry identifier taken from the last path segment of a detail URL.

    Example:
        >>> identifier_from_url('https://www.re3data.org/api/v1/repository/r3d100010134')
        'r3d100010134'
    """
    segments = [s for s in urlparse(url).path.split('/') if s]
    return unquote(segments[-1]) if segments else url


def extract_records(
    root: etree._Element,
    spec: ExtractionSpec,
    url: str,
    namespaces: Optional[Dict[str, str]] = None
) -> List[Record]:
    """
    Extract records from a parsed detail document.

    Args:
        root: Root element of the detail document
        spec: ExtractionSpec naming the output columns and their XPaths
        url: Detail URL (identifier fallback and log context)
        namespaces: Prefix → URI map for the XPaths

    Returns:
        One record without a repeating group. With a repeating group, one
        record per occurrence; a document without occurrences yields [].

    Example:
        >>> records = extract_records(root, spec, url, {'r3d': R3D})
        >>> records[0]['type']
        ['institutional', 'disciplinary']
    """
    identifier = first_value(root, spec.id_field.xpath, namespaces)
    if not identifier:
        identifier = identifier_from_url(url)
        logger.warning(
            f"No identifier found at {spec.id_field.xpath} in {url}, "
            f"using '{identifier}' from the URL"
        )

    base: Record = {spec.id_field.name: identifier}
    for field_spec in spec.fields:
        if field_spec.multiple:
            base[field_spec.name] = all_values(
                root, field_spec.xpath, namespaces, deduplicate=field_spec.deduplicate
            )
        else:
            base[field_spec.name] = first_value(root, field_spec.xpath, namespaces)

    group = spec.repeating_group
    if group is None:
        return [base]

    occurrences = count_matches(root, group.count_xpath, namespaces)
    if occurrences == 0:
        logger.debug(f"{identifier}: no occurrences of {group.count_xpath}, no records emitted")
        return []

    records = []
    for index in range(1, occurrences + 1):
        values = {
            f.name: first_value(root, f.xpath.replace(INDEX_PLACEHOLDER, str(index)), namespaces)
            for f in group.fields
        }

        if not values[group.key]:
            logger.warning(
                f"{identifier}: occurrence {index}/{occurrences} of {group.count_xpath} "
                f"has no '{group.key}' value, skipping"
            )
            continue

        record = {k: list(v) if isinstance(v, list) else v for k, v in base.items()}
        record.update(values)
        records.append(record)

    logger.debug(f"{identifier}: {len(records)} of {occurrences} occurrence(s) extracted")
    return records


class ExtractionService:
    """
    Service for per-repository extraction.

    Usage:
        service = ExtractionService(client=RegistryClient())
        records = service.extract(url, use_case.extraction)

        # Or capture failures instead of raising
        result = service.extract_safely(url, use_case.extraction)
        if not result.ok:
            print(result.identifier, result.error)
    """

    def __init__(self, client: RegistryClient, namespaces: Optional[Dict[str, str]] = None):
        """
        Initialize the extraction service.

        Args:
            client: RegistryClient used for detail requests
            namespaces: Default prefix → URI map (default: config/use_cases.yaml)
        """
        self._client = client
        self._namespaces = namespaces if namespaces is not None else get_config().namespaces

    def extract(self, url: str, spec: ExtractionSpec) -> List[Record]:
        """
        Fetch one detail document and extract its records.

        Raises:
            ItemExtractionError: If fetching, parsing or XPath evaluation fails
        """
        try:
            body = self._client.get_document(url)
            root = parse_document(body, source=url)
            namespaces = build_namespaces(root, self._namespaces)
            return extract_records(root, spec, url, namespaces)
        except (RuntimeError, ValueError) as e:
            raise ItemExtractionError(
                f"Extraction failed for {url}: {type(e).__name__}: {e}",
                url=url,
                identifier=identifier_from_url(url)
            ) from e

    def extract_safely(self, url: str, spec: ExtractionSpec) -> ExtractionResult:
        """
        Extract one document, capturing a failure in the result instead of raising.

        Returns:
            ExtractionResult with status 'success' and the records, or
            status 'failed' with the error message and the original error type
        """
        try:
            records = self.extract(url, spec)
        except ItemExtractionError as e:
            cause = e.__cause__ or e
            return ExtractionResult(
                url=url,
                identifier=e.identifier,
                status='failed',
                error=str(cause),
                error_type=type(cause).__name__
            )

        identifier = records[0][spec.id_field.name] if records else identifier_from_url(url)
        return ExtractionResult(
            url=url,
            identifier=identifier,
            status='success',
            records=records
        )
