"""
Discovery Service

Enumerates the repositories matching a listing query and returns their
detail URLs.

- Exactly one listing request per run (the registry returns the complete
  result set in a single response)
- Any transport or parse failure is fatal: there is nothing to fall back to
- Zero matches is a valid result (empty URL list)
"""

from typing import List, Optional
import logging

from re3data_explorer.config import AppConfig, get_app_config
from re3data_explorer.models.requests import ListingRequest
from re3data_explorer.parsers.listing_parser import extract_detail_urls
from re3data_explorer.parsers.xml_parser import parse_document
from re3data_explorer.services.registry_client import RegistryClient


logger = logging.getLogger(__name__)


class DiscoveryError(RuntimeError):
    """Raised when the listing request fails; aborts the whole run."""


class DiscoveryService:
    """
    Service for discovering repository detail URLs.

    Usage:
        service = DiscoveryService(client=RegistryClient())
        request = ListingRequest(
            facets={"subjects[]": "205 Medicine"},
            mode="links"
        )
        urls = service.discover(request)
    """

    def __init__(self, client: RegistryClient, config: Optional[AppConfig] = None):
        """
        Initialize the discovery service.

        Args:
            client: RegistryClient used for the listing request
            config: AppConfig providing default endpoints (default: global config)
        """
        self._client = client
        self._config = config or get_app_config()

    def discover(self, request: ListingRequest) -> List[str]:
        """
        Run the listing query and return detail URLs.

        Args:
            request: ListingRequest with facet filters and URL extraction mode

        Returns:
            Absolute detail URLs in listing order

        Raises:
            DiscoveryError: If the request fails or the response cannot be parsed

        Example:
            >>> urls = service.discover(ListingRequest(mode='identifiers'))
            >>> urls[0]
            'https://www.re3data.org/api/v1/repository/r3d100000001'
        """
        listing_url = request.listing_url or self._config.registry_listing_url
        detail_url_template = (
            request.detail_url_template or self._config.registry_detail_url_template
        )
        params = request.query_params()

        logger.info(
            f"Querying listing {listing_url} with {len(params)} facet filter value(s): {params}"
        )

        try:
            body = self._client.get_document(listing_url, params=params or None)
            root = parse_document(body, source=listing_url)
            urls = extract_detail_urls(root, request, listing_url, detail_url_template)
        except (RuntimeError, ValueError) as e:
            logger.error(f"Discovery failed for {listing_url}: {e}")
            raise DiscoveryError(
                f"Discovery failed for {listing_url}: {type(e).__name__}: {e}"
            ) from e

        if not urls:
            logger.warning(
                f"Listing {listing_url} returned no repositories for filters {params}"
            )
        else:
            logger.info(f"Discovered {len(urls)} repositories")

        return urls
