"""
Registry Client

Thin HTTP transport for the re3data API:
- One GET per call, bounded by a per-request timeout
- No retries and no caching; every URL is fetched exactly once per run
- Transport failures and non-2xx responses raise RegistryAPIError
"""

from typing import Optional, Sequence, Tuple, Union
import logging

import requests

from re3data_explorer.config import get_app_config

logger = logging.getLogger(__name__)


QueryParams = Union[Sequence[Tuple[str, str]], dict, None]


class RegistryAPIError(RuntimeError):
    """Raised when a registry request fails or returns an error status."""

    def __init__(self, message: str, url: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class RegistryClient:
    """
    HTTP client for registry XML documents.

    Usage:
        with RegistryClient() as client:
            body = client.get_document(
                "https://www.re3data.org/api/beta/repositories",
                params=[("subjects[]", "205 Medicine")]
            )
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the client.

        Args:
            timeout: Per-request timeout in seconds (default: AppConfig.request_timeout)
            user_agent: User-Agent header (default: AppConfig.user_agent)
            session: Pre-built requests.Session (mainly for tests)
        """
        config = get_app_config()
        self.timeout = timeout or config.request_timeout
        self._session = session or requests.Session()
        self._session.headers.update({
            "User-Agent": user_agent or config.user_agent,
            "Accept": "application/xml, text/xml;q=0.9, */*;q=0.1",
        })

    def get_document(self, url: str, params: QueryParams = None) -> bytes:
        """
        Fetch one XML document.

        Args:
            url: Absolute URL
            params: Query parameters; a list of pairs keeps repeated keys

        Returns:
            Raw response body

        Raises:
            RegistryAPIError: On connection errors, timeouts or non-2xx status
        """
        logger.debug(f"GET {url} params={params}")

        try:
            response = self._session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise RegistryAPIError(
                f"Request to {url} failed: {type(e).__name__}: {e}",
                url=url
            ) from e

        if not response.ok:
            snippet = (response.text or "")[:200]
            raise RegistryAPIError(
                f"Registry API error {response.status_code} for {response.url or url}: {snippet}",
                url=url,
                status_code=response.status_code
            )

        return response.content

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
