"""
Low-level XML parsing utilities for re3data API responses.

Key observations about the registry documents:
1. Detail documents live in the r3d namespace; the namespace URI carries the
   schema version (e.g., http://www.re3data.org/schema/2-2)
2. Most fields may occur zero, one or many times
3. API descriptors carry their type as an attribute (<r3d:api apiType="REST">)
"""

from typing import Dict, List, Optional, Union
from lxml import etree


class DocumentParseError(ValueError):
    """Raised when a response body is empty or not well-formed XML."""


class XPathEvaluationError(ValueError):
    """Raised when an XPath cannot be evaluated (e.g., unknown namespace prefix)."""


def parse_document(content: Union[bytes, str], source: Optional[str] = None) -> etree._Element:
    """
    Parse an XML response body.

    Unlike recover-mode parsing, malformed documents are rejected: a broken
    listing response must abort discovery instead of silently yielding
    fewer repositories.

    Args:
        content: Raw response body
        source: URL or path used in error messages

    Returns:
        Root element of the document

    Raises:
        DocumentParseError: If the body is empty or not well-formed

    Example:
        >>> root = parse_document(b'<list><repository><id>r3d100010134</id></repository></list>')
        >>> root.tag
        'list'
    """
    where = f" from {source}" if source else ""

    if content is None or not content.strip():
        raise DocumentParseError(f"Empty XML document{where}")

    if isinstance(content, str):
        content = content.encode('utf-8')

    parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=True)
    try:
        return etree.fromstring(content, parser)
    except etree.XMLSyntaxError as e:
        raise DocumentParseError(f"Malformed XML document{where}: {e}") from e


def build_namespaces(
    root: etree._Element,
    defaults: Optional[Dict[str, str]] = None
) -> Dict[str, str]:
    """
    Merge configured namespace prefixes with those declared by the document.

    Prefixes declared by the document win, so a schema version bump
    (r3d → .../schema/3-0) does not break configured XPaths. The default
    (unprefixed) namespace is ignored because XPath 1.0 cannot address it.

    Example:
        >>> root = parse_document(b'<r3d:re3data xmlns:r3d="http://www.re3data.org/schema/3-0"/>')
        >>> build_namespaces(root, {'r3d': 'http://www.re3data.org/schema/2-2'})
        {'r3d': 'http://www.re3data.org/schema/3-0'}
    """
    namespaces = dict(defaults or {})
    for prefix, uri in root.nsmap.items():
        if prefix:
            namespaces[prefix] = uri
    return namespaces


def _evaluate(root: etree._Element, expr: str, namespaces: Optional[Dict[str, str]]):
    try:
        return root.xpath(expr, namespaces=namespaces or {})
    except etree.XPathError as e:
        raise XPathEvaluationError(f"Cannot evaluate XPath '{expr}': {e}") from e


def _to_text(item) -> str:
    if isinstance(item, etree._Element):
        return ''.join(item.itertext()).strip()
    if isinstance(item, bool):
        # false() counts as no match
        return 'true' if item else ''
    if isinstance(item, float) and item.is_integer():
        return str(int(item))
    return str(item).strip()


def xpath_values(
    root: etree._Element,
    expr: str,
    namespaces: Optional[Dict[str, str]] = None
) -> List[str]:
    """
    Evaluate an XPath and return all matches as stripped strings.

    - Elements are rendered as their full text content
    - Attribute and text() results are used as-is
    - Scalar results (string(), count()) become a one-item list
    - Boolean results become 'true', or no value for false
    - Empty strings are dropped

    Raises:
        XPathEvaluationError: If the expression cannot be evaluated
    """
    result = _evaluate(root, expr, namespaces)

    if not isinstance(result, list):
        result = [result]

    values = []
    for item in result:
        text = _to_text(item)
        if text:
            values.append(text)
    return values


def first_value(
    root: etree._Element,
    expr: str,
    namespaces: Optional[Dict[str, str]] = None
) -> str:
    """First match of expr, or an empty string when nothing matches."""
    values = xpath_values(root, expr, namespaces)
    return values[0] if values else ""


def all_values(
    root: etree._Element,
    expr: str,
    namespaces: Optional[Dict[str, str]] = None,
    deduplicate: bool = True
) -> List[str]:
    """
    All matches of expr.

    With deduplicate=True, repeated identical values are dropped (exact
    string equality) while keeping first-seen order.

    Example:
        >>> root = parse_document(b'<r><t>other</t><t>other</t><t>institutional</t></r>')
        >>> all_values(root, '//t')
        ['other', 'institutional']
    """
    values = xpath_values(root, expr, namespaces)
    if not deduplicate:
        return values
    return list(dict.fromkeys(values))


def count_matches(
    root: etree._Element,
    expr: str,
    namespaces: Optional[Dict[str, str]] = None
) -> int:
    """
    Number of nodes matched by expr.

    A numeric result (e.g., from count(...)) is returned as an int.
    """
    result = _evaluate(root, expr, namespaces)

    if isinstance(result, list):
        return len(result)
    if isinstance(result, bool):
        return int(result)
    if isinstance(result, float):
        return int(result)

    raise XPathEvaluationError(
        f"XPath '{expr}' returned a {type(result).__name__}, expected nodes or a number"
    )
