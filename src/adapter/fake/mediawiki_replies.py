"""Canned MediaWiki API replies for tests."""

from xml.sax.saxutils import escape, quoteattr


def make_parse_reply(
    html: str,
    pageid: int = 1,
    revid: int = 100,
    title: str = "Page",
    sections: list[dict[str, str]] | None = None,
) -> bytes:
    """``action=parse&format=xml`` reply carrying html and optional sections."""
    parts = [
        '<?xml version="1.0"?><api>',
        f'<parse title={quoteattr(title)} pageid="{pageid}" revid="{revid}">',
        f'<text xml:space="preserve">{escape(html)}</text>',
    ]
    if sections is not None:
        parts.append("<sections>")
        for section in sections:
            attrs = " ".join(f"{name}={quoteattr(value)}" for name, value in section.items())
            parts.append(f"<s {attrs} />")
        parts.append("</sections>")
    parts.append("</parse></api>")
    return "".join(parts).encode("utf-8")


def make_missing_page_reply(title: str = "Missing") -> bytes:
    """Reply for a title with no page (revid 0)."""
    return (
        f'<?xml version="1.0"?><api><parse title={quoteattr(title)} pageid="0" revid="0">'
        '<text xml:space="preserve"></text></parse></api>'
    ).encode("utf-8")


def make_error_reply(code: str = "missingtitle", info: str = "The page you specified doesn't exist.") -> bytes:
    """API error envelope; it has no ``parse`` node."""
    return f'<?xml version="1.0"?><api><error code={quoteattr(code)} info={quoteattr(info)} /></api>'.encode("utf-8")


def make_allpages_reply(titles: list[str]) -> bytes:
    """``list=allpages&format=xml`` reply."""
    pages = "".join(f'<p pageid="{i + 1}" ns="0" title={quoteattr(t)} />' for i, t in enumerate(titles))
    return f'<?xml version="1.0"?><api><query><allpages>{pages}</allpages></query></api>'.encode("utf-8")
