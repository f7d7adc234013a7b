"""Helpers for building MediaWiki API URLs and reading their XML replies (``format=xml``)."""

import xml.etree.ElementTree as ET
from urllib.parse import quote
from xml.parsers import expat

from domain.model.errors import XmlParseError

PREFIX_SEARCH_QUERY = "action=query&list=allpages&aplimit=40&format=xml"
ARTICLE_QUERY = "action=parse&prop=text|revid|sections&format=xml&redirects"


def build_api_url(site_url: str, query: str, name: str, value: str) -> str:
    """Return ``<site_url>/api.php?<query>&<name>=<value>``.

    value is percent-encoded in full; in particular ``+`` is sent as ``%2B``,
    which the API would otherwise read as a space.
    """
    return f"{site_url.rstrip('/')}/api.php?{query}&{name}={quote(value, safe='')}"


def parse_envelope(body: bytes) -> ET.Element:
    """Parse an API reply and return its root element.

    Raises:
        XmlParseError: with the expat message and the line/column of the error.
    """
    try:
        return ET.fromstring(body)
    except ET.ParseError as e:
        line, column = e.position
        message = expat.ErrorString(e.code) if e.code else str(e)
        raise XmlParseError(message, line, column) from e


def find_path(root: ET.Element, *names: str) -> ET.Element | None:
    """Follow a chain of child names starting with the root's own tag.

    ``find_path(root, "api", "parse")`` returns the ``<parse>`` child of an
    ``<api>`` root, or None if any step is missing.
    """
    if not names or root.tag != names[0]:
        return None
    node = root
    for name in names[1:]:
        node = node.find(name)
        if node is None:
            return None
    return node


def element_text(element: ET.Element) -> str:
    """Concatenated text content of element and its descendants."""
    return "".join(element.itertext())


def to_int(text: str | None, default: int = 0) -> int:
    if text is None:
        return default
    try:
        return int(text)
    except ValueError:
        return default
