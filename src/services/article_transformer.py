"""Rewrites MediaWiki article HTML into a fragment that works outside the wiki.

The ``text`` node of an ``action=parse`` reply is meant to be shown on the
wiki itself: links are root-relative, media URLs are scheme-relative, audio
uses ``<audio>`` players and the ToC may be missing. ArticleTransformer runs
a fixed sequence of text passes over it. Each pass is one regex or substring
scan over the whole text; later passes rely on the output of earlier ones,
so the order below must not change.

    1. internal links: escape ``:``, move ``#fragment`` to ``?gdanchor=``
    2. ``index.php`` links made absolute
    3. ``<audio>`` players replaced by a play icon link
    4. Wikimedia ``.ogg``/``.oga`` links registered as audio
    5. scheme-relative ``src``/``href``/``url(`` given the site scheme
    6. root-relative ``src`` made absolute
    7. ``/wiki/`` prefix dropped from links
    8. underscores in link targets turned into spaces, query string included
    9. ``File:`` links sent through ``index.php?title=``
   10. scheme-relative ``srcset`` entries given the site scheme
   11. table of contents generated if the reply left it empty

Running the passes again on their own output changes nothing.
"""

import logging
import re
import xml.etree.ElementTree as ET
from urllib.parse import urlsplit, urlunsplit

from port.audio_links import AudioLinkRegistryPort
from services.toc_builder import generate_toc_if_empty

logger = logging.getLogger(__name__)

# Served by the host application, not by the wiki.
PLAY_ICON_SRC = "qrcx://localhost/icons/playsound.png"

_INTERNAL_LINK_RE = re.compile(r'<a\s+href="/([^"]+)"')
_INDEX_PHP_LINK_RE = re.compile(r'<a\shref="(/(?:\w*/)*index\.php\?)')
_AUDIO_TAG_RE = re.compile(r"<audio\s.+?</audio>", re.IGNORECASE | re.DOTALL)
_AUDIO_SOURCE_RE = re.compile(r'<source\s+src="([^"]+)', re.IGNORECASE)
_AUDIO_FILE_LINK_RE = re.compile(
    r'<a\s+href="(//upload\.wikimedia\.org/wikipedia/[^"\'&]*\.og[ga](?:\.mp3|))"'
)
_LINK_TARGET_RE = re.compile(r'<a\s+href="([^/:">#]+)')
_FILE_LINK_RE = re.compile(r'<a\s+href="([^:/"]*file%3A[^/"]+")', re.IGNORECASE)
_SRCSET_RE = re.compile(r' srcset\s*=\s*"/[^"]+"')

RTL_WRAPPER = '<div class="mwiki" dir="rtl">'
LTR_WRAPPER = '<div class="mwiki">'


class ArticleTransformer:
    """Turns one article's raw HTML into a displayable fragment."""

    def __init__(
        self,
        site_url: str,
        owner_id: str,
        audio_links: AudioLinkRegistryPort,
        rtl: bool = False,
    ):
        """
        Args:
            site_url: Directory holding api.php, e.g. ``https://en.wikipedia.org/w``.
            owner_id: Dictionary id passed to the audio link registry.
            audio_links: Registry receiving every audio link found.
            rtl: Wrap the fragment in a right-to-left container.
        """
        parts = urlsplit(site_url)
        self.site_url = site_url.rstrip("/")
        self.scheme = parts.scheme or "https"
        self.root_url = urlunsplit((self.scheme, parts.netloc, "/", "", ""))
        self.owner_id = owner_id
        self.audio_links = audio_links
        self.rtl = rtl

    def transform(self, article: str, parse_node: ET.Element | None = None) -> bytes:
        """Rewrite article and wrap it in the directional container, UTF-8 encoded."""
        body = self.rewrite(article, parse_node)
        wrapper = RTL_WRAPPER if self.rtl else LTR_WRAPPER
        return f"{wrapper}{body}</div>".encode("utf-8")

    def rewrite(self, article: str, parse_node: ET.Element | None = None) -> str:
        """Apply every pass in order. parse_node supplies the section list for the ToC."""
        article = self.rewrite_internal_links(article)
        article = self.absolutize_index_php_links(article)
        article = self.replace_audio_tags(article)
        article = self.register_audio_file_links(article)
        article = self.fix_scheme_relative_urls(article)
        article = self.fix_root_relative_sources(article)
        article = self.strip_wiki_prefix(article)
        article = self.underscores_to_spaces(article)
        article = self.repair_file_links(article)
        article = self.fix_srcset_urls(article)
        # Last: the generated ToC needs none of the rewrites above.
        return generate_toc_if_empty(parse_node, article)

    # ── Passes ──────────────────────────────────────────────

    def rewrite_internal_links(self, article: str) -> str:
        return _INTERNAL_LINK_RE.sub(_rewrite_internal_link, article)

    def absolutize_index_php_links(self, article: str) -> str:
        return _INDEX_PHP_LINK_RE.sub(
            lambda m: f'<a href="{self.root_url}{m.group(1)[1:]}', article
        )

    def replace_audio_tags(self, article: str) -> str:
        return _AUDIO_TAG_RE.sub(_replace_audio_tag, article)

    def register_audio_file_links(self, article: str) -> str:
        def replace(m: re.Match) -> str:
            url = f"{self.scheme}:{m.group(1)}"
            markup = self.audio_links.register_and_wrap(f'"{url}"', self.owner_id)
            return f'{markup}<a href="{url}"'

        return _AUDIO_FILE_LINK_RE.sub(replace, article)

    def fix_scheme_relative_urls(self, article: str) -> str:
        prefix = f"{self.scheme}://"
        article = article.replace(' src="//', f' src="{prefix}')
        article = article.replace(' href="//', f' href="{prefix}')
        # CSS backgrounds, e.g. url("//upload.wikimedia.org/.../Lock-green.svg")
        return article.replace('url("//', f'url("{prefix}')

    def fix_root_relative_sources(self, article: str) -> str:
        return article.replace('src="/', f'src="{self.root_url}')

    def strip_wiki_prefix(self, article: str) -> str:
        return article.replace('<a href="/wiki/', '<a href="')

    def underscores_to_spaces(self, article: str) -> str:
        """Underscores become spaces up to the first "/", ":", "#" or quote.

        Query strings are not excluded, so ``Foo_bar?use_lang=en`` becomes
        ``Foo bar?use lang=en``. Existing hosts depend on this output.
        """
        def replace(m: re.Match) -> str:
            head = m.group(0)[:m.start(1) - m.start(0)]
            return head + m.group(1).replace("_", " ")

        return _LINK_TARGET_RE.sub(replace, article)

    def repair_file_links(self, article: str) -> str:
        return _FILE_LINK_RE.sub(
            lambda m: f'<a href="{self.site_url}/index.php?title={m.group(1)}', article
        )

    def fix_srcset_urls(self, article: str) -> str:
        prefix = f"{self.scheme}://"
        return _SRCSET_RE.sub(lambda m: m.group(0).replace("//", prefix), article)


def _rewrite_internal_link(m: re.Match) -> str:
    link = m.group(1)
    if "://" in link:
        return m.group(0)

    # ":" would be read as a namespace or scheme separator by the host.
    link = link.replace(":", "%3A")

    n = link.find("#", 1)
    if n > 0:
        anchor = link[n + 1:].replace("_", "%5F")
        link = f"{link[:n]}?gdanchor={anchor}"

    return f'<a href="/{link}"'


def _replace_audio_tag(m: re.Match) -> str:
    source = _AUDIO_SOURCE_RE.search(m.group(0))
    if source is None:
        return m.group(0)
    return (
        f'<a href="{source.group(1)}">'
        f'<img src="{PLAY_ICON_SRC}" border="0" align="absmiddle" alt="Play"/></a>'
    )
