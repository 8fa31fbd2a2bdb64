"""
Turn a registry listing response into detail URLs.

Two response shapes occur in practice:

    <list>
      <repository>
        <id>r3d100010134</id>
        <name>PANGAEA</name>
        <link href="https://www.re3data.org/api/beta/repository/r3d100010134" rel="self"/>
      </repository>
    </list>

Either the link attributes are used directly, or the bare identifiers are
interpolated into a detail URL template. Callers always get absolute URLs.
"""

from typing import List
from urllib.parse import quote, urljoin
import logging

from lxml import etree

from re3data_explorer.models.requests import ListingRequest
from re3data_explorer.parsers.xml_parser import xpath_values
from re3data_explorer.validators import validate_url_template

logger = logging.getLogger(__name__)


def extract_detail_urls(
    root: etree._Element,
    request: ListingRequest,
    listing_url: str,
    detail_url_template: str
) -> List[str]:
    """
    Extract the detail URL sequence from a parsed listing response.

    Args:
        root: Root element of the listing response
        request: ListingRequest describing how URLs are encoded
        listing_url: URL the listing was fetched from (base for relative links)
        detail_url_template: Template with an {identifier} placeholder

    Returns:
        Absolute detail URLs, duplicates removed, first-seen order kept.
        An empty list when nothing matches (not an error).

    Example:
        >>> root = parse_document(b'<list><repository><id>r3d1</id></repository></list>')
        >>> request = ListingRequest(mode='identifiers')
        >>> extract_detail_urls(root, request, 'https://www.re3data.org/api/beta/repositories',
        ...                     'https://www.re3data.org/api/v1/repository/{identifier}')
        ['https://www.re3data.org/api/v1/repository/r3d1']

    Raises:
        ValueError: If the template cannot be filled (no {identifier}, or
                    other placeholders)
    """
    tokens = xpath_values(root, request.selector_xpath)

    if request.mode == 'links':
        urls = [urljoin(listing_url, token) for token in tokens]
    else:
        validate_url_template(detail_url_template)
        try:
            urls = [detail_url_template.format(identifier=quote(token, safe='')) for token in tokens]
        except (KeyError, IndexError) as e:
            raise ValueError(
                f"Detail URL template '{detail_url_template}' has an unknown placeholder: {e}"
            ) from e

    unique_urls = list(dict.fromkeys(urls))

    if len(unique_urls) != len(urls):
        logger.debug(
            f"Dropped {len(urls) - len(unique_urls)} duplicate detail URL(s) from listing"
        )

    return unique_urls
