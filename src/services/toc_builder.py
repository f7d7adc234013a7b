"""Table of contents synthesis for MediaWiki articles.

Since the Vector 2022 redesign, Wikipedia's ``action=parse`` reply no longer
carries the table of contents in the article HTML. The body only holds an
empty placeholder::

    <meta property="mw:PageProp/toc" />

while the headings are listed flat in the ``<sections>`` element. This module
rebuilds the classic nested ToC (Wiktionary's markup) from that list and
puts it where the placeholder was.
"""

import html
import logging
import xml.etree.ElementTree as ET
from typing import Iterable

from domain.model.errors import TableOfContentsError
from domain.model.section import Section

logger = logging.getLogger(__name__)

EMPTY_TOC_PLACEHOLDER = '<meta property="mw:PageProp/toc" />'

# Attributes are single-quoted; the link passes only match double-quoted hrefs.
TOC_HEADER = (
    "<div id='toc' class='toc' role='navigation' aria-labelledby='mw-toc-heading'>"
    "<div class='toctitle'><h2 id='mw-toc-heading'>Contents</h2></div>"
)
TOC_FOOTER = "</ul>\n</div>"


class TableOfContentsBuilder:
    """Turns a flat list of sections into nested ``<ul>`` markup.

    The builder tracks the depth of the innermost open list. Each section
    may go one level deeper, stay, or climb back any number of levels.
    Skipping a level cannot be represented and aborts the build.
    """

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._level = 0

    def build(self, sections: Iterable[Section]) -> str:
        """Return the complete ToC markup.

        Raises:
            TableOfContentsError: if a section level is malformed or skips a level.
        """
        self._parts = [TOC_HEADER]
        self._level = 0

        count = 0
        for section in sections:
            self._open_item(_parse_level(section.toclevel))
            # linkAnchor carries the URL-fragment escaping; anchor is the element id.
            self._parts.append(f"<a href='#{html.escape(section.link_anchor)}'>")
            self._parts.append(html.escape(section.number, quote=False))
            self._parts.append(" ")
            self._parts.append(section.line)
            self._parts.append("</a>")
            count += 1

        if not count:
            raise TableOfContentsError("no sections")

        self._close_items(1)
        self._parts.append(TOC_FOOTER)
        return "".join(self._parts)

    def _open_item(self, level: int) -> None:
        if level > self._level + 1:
            raise TableOfContentsError(
                f"unsupported sections level increase by more than one: from {self._level} to {level}"
            )
        if level == self._level + 1:
            # The previous item stays open so the deeper list nests inside it.
            self._parts.append("\n<ul>\n")
            self._level = level
        else:
            self._close_items(level)
        self._parts.append("<li>")

    def _close_items(self, level: int) -> None:
        self._parts.append("</li>\n")
        while level < self._level:
            self._parts.append("</ul>\n</li>\n")
            self._level -= 1


def _parse_level(text: str) -> int:
    try:
        level = int(text)
    except ValueError:
        raise TableOfContentsError(f"sections level is not an integer: {text!r}") from None
    if level <= 0:
        raise TableOfContentsError(f"unsupported nonpositive sections level: {level}")
    return level


def sections_from_element(sections_element: ET.Element) -> list[Section]:
    return [Section.from_attributes(s.attrib) for s in sections_element.findall("s")]


def generate_toc_if_empty(parse_node: ET.Element | None, article: str) -> str:
    """Replace the empty ToC placeholder in article with a generated ToC.

    Returns article unchanged when there is no placeholder, when the reply
    has no usable section list, or when the list cannot be nested.
    """
    pos = article.find(EMPTY_TOC_PLACEHOLDER)
    if pos == -1:
        return article

    sections_element = parse_node.find("sections") if parse_node is not None else None
    if sections_element is None:
        logger.warning("MediaWiki: empty table of contents and missing sections element")
        return article

    logger.debug("MediaWiki: generating table of contents from the sections element")
    try:
        toc = TableOfContentsBuilder().build(sections_from_element(sections_element))
    except TableOfContentsError as e:
        logger.warning("MediaWiki: table of contents not generated", extra={"reason": str(e)})
        return article

    return article[:pos] + toc + article[pos + len(EMPTY_TOC_PLACEHOLDER):]
