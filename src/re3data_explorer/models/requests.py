"""
Request models for the discovery stage.

These Pydantic models provide a type-safe, validated description of the
listing query sent to the registry.
"""

from typing import Dict, List, Literal, Optional, Tuple
from pydantic import BaseModel, Field, field_validator, ConfigDict

from re3data_explorer.validators import (
    validate_xpath,
    validate_url_template,
    validate_facet_filters
)


class ListingRequest(BaseModel):
    """
    Request model for the registry listing endpoint.

    The listing response is turned into detail URLs in one of two ways:
    - mode='links': link attribute values already present in the response
      (e.g., <link href="https://www.re3data.org/api/beta/repository/r3d100010134"/>)
    - mode='identifiers': bare identifier tokens interpolated into a
      detail URL template

    Attributes:
        facets: Facet filters, key → one-or-more values (e.g., {'subjects[]': ['205 Medicine']})
        listing_url: Optional override of the configured listing endpoint
        mode: How detail URLs are read from the response
        link_xpath: XPath selecting link values (mode='links')
        identifier_xpath: XPath selecting identifier tokens (mode='identifiers')
        detail_url_template: Optional override of the configured detail template

    Example:
        >>> request = ListingRequest(
        ...     facets={'subjects[]': '34 Geosciences (including Geography)',
        ...             'dataUploads[]': 'open'},
        ...     mode='links'
        ... )
        >>> request.query_params()
        [('subjects[]', '34 Geosciences (including Geography)'), ('dataUploads[]', 'open')]

    Raises:
        ValidationError: If any field fails validation
    """

    facets: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Facet filters sent as query parameters to the listing endpoint"
    )

    listing_url: Optional[str] = Field(
        default=None,
        description="Listing endpoint override (defaults to AppConfig.registry_listing_url)"
    )

    mode: Literal['links', 'identifiers'] = Field(
        default='links',
        description="Read ready-made links or interpolate identifiers into a template"
    )

    link_xpath: str = Field(
        default="//@href",
        description="XPath selecting detail links in the listing response"
    )

    identifier_xpath: str = Field(
        default="//id",
        description="XPath selecting identifier tokens in the listing response"
    )

    detail_url_template: Optional[str] = Field(
        default=None,
        description="Detail URL template override with an {identifier} placeholder"
    )

    @field_validator('facets', mode='before')
    @classmethod
    def validate_facets(cls, v):
        """Normalize single facet values to lists."""
        if v is None:
            return {}
        if not isinstance(v, dict):
            raise ValueError(f"Facet filters must be a mapping, got: {type(v).__name__}")
        return validate_facet_filters(v)

    @field_validator('detail_url_template')
    @classmethod
    def validate_template(cls, v: Optional[str]) -> Optional[str]:
        """Validate the template only when an override is given."""
        if v is None:
            return v
        return validate_url_template(v)

    _validate_link_xpath = field_validator('link_xpath')(validate_xpath)
    _validate_identifier_xpath = field_validator('identifier_xpath')(validate_xpath)

    model_config = ConfigDict(frozen=True)

    @property
    def selector_xpath(self) -> str:
        """XPath used for the active mode."""
        return self.link_xpath if self.mode == 'links' else self.identifier_xpath

    def query_params(self) -> List[Tuple[str, str]]:
        """
        Query parameters for the listing request.

        One (key, value) pair per facet value, in declaration order, so
        repeated keys such as 'subjects[]' are sent once per value.
        """
        return [(key, value) for key, values in self.facets.items() for value in values]
