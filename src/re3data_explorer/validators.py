"""
Reusable field validators for Pydantic models.

These validators check the pieces of an aggregation preset (XPath
expressions, URL templates, facet filters, column names) and can be used
with the Pydantic @field_validator decorator.
"""

import re
from typing import Dict, List, Union
from lxml import etree


INDEX_PLACEHOLDER = "{index}"

_COLUMN_NAME = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')
_NAMESPACE_PREFIX = re.compile(r'(?<![:\w.-])([A-Za-z_][\w.-]*):(?!:)')


def validate_xpath(expr: str) -> str:
    """
    Validate that an XPath expression compiles.

    Expressions used inside a repeating group carry an {index} placeholder;
    they are compiled with the placeholder replaced by 1. Namespace prefixes
    are bound to placeholder URIs for the check; the real URIs come from the
    document at evaluation time.

    Args:
        expr: XPath expression (e.g., '//r3d:repositoryName')

    Returns:
        The expression unchanged

    Raises:
        ValueError: If the expression is empty or not valid XPath

    Example:
        >>> validate_xpath('//r3d:type')
        '//r3d:type'
        >>> validate_xpath('(//r3d:api)[{index}]/@apiType')
        '(//r3d:api)[{index}]/@apiType'
        >>> validate_xpath('//[')  # Raises ValueError
    """
    if not expr or not expr.strip():
        raise ValueError("XPath expression must not be empty")

    try:
        expr_to_check = expr.replace(INDEX_PLACEHOLDER, '1')
        namespaces = {p: f'urn:prefix:{p}' for p in _NAMESPACE_PREFIX.findall(expr_to_check)}
        etree.XPath(expr_to_check, namespaces=namespaces)
    except etree.XPathError as e:
        raise ValueError(f"Invalid XPath expression '{expr}': {e}") from e

    return expr


def validate_url_template(template: str) -> str:
    """
    Validate a detail URL template.

    Raises:
        ValueError: If the template is not an http(s) URL or lacks {identifier}

    Example:
        >>> validate_url_template('https://www.re3data.org/api/v1/repository/{identifier}')
        'https://www.re3data.org/api/v1/repository/{identifier}'
    """
    if not template.startswith(('http://', 'https://')):
        raise ValueError(
            f"URL template must start with http:// or https://, got: '{template}'"
        )

    if '{identifier}' not in template:
        raise ValueError(
            f"URL template must contain an {{identifier}} placeholder, got: '{template}'"
        )

    return template


def validate_facet_filters(
    facets: Dict[str, Union[str, List[str]]]
) -> Dict[str, List[str]]:
    """
    Validate and normalize listing facet filters.

    Single string values are wrapped in a list so every facet maps to
    one-or-more values.

    Raises:
        ValueError: If a key is empty or a value is empty

    Example:
        >>> validate_facet_filters({'subjects[]': '205 Medicine'})
        {'subjects[]': ['205 Medicine']}
    """
    normalized = {}

    for key, values in facets.items():
        if not key or not str(key).strip():
            raise ValueError("Facet filter keys must not be empty")

        if isinstance(values, str):
            values = [values]

        values = [str(v) for v in values]
        empty = [v for v in values if not v.strip()]
        if not values or empty:
            raise ValueError(
                f"Facet filter '{key}' needs at least one non-empty value, got: {values}"
            )

        normalized[str(key)] = values

    return normalized


def validate_column_name(name: str) -> str:
    """
    Validate an output column name.

    Raises:
        ValueError: If the name is not a plain identifier

    Example:
        >>> validate_column_name('repository_name')
        'repository_name'
        >>> validate_column_name('repository name')  # Raises ValueError
    """
    if not name or not _COLUMN_NAME.match(name):
        raise ValueError(
            f"Column name must be a plain identifier (letters, digits, underscore), "
            f"got: '{name}'"
        )

    return name
