"""MediaWiki dictionary — a configured wiki exposed as a dictionary.

A MediaWikiDictionary holds a site's configuration and creates the two
request types; the requests do all network work themselves.

    dictionaries = make_dictionaries(sites, HttpxTransport(), InMemoryAudioLinkRegistry())
    request = dictionaries[0].get_article("cat", ["cats"])
    await request.wait_finished()
"""

import logging
from pathlib import Path
from typing import Iterable

from domain.model.errors import NotFoundError
from domain.model.request import (
    DataRequest,
    DataRequestInstant,
    WordSearchRequest,
    WordSearchRequestInstant,
)
from domain.model.site import MediaWikiSite
from port.audio_links import AudioLinkRegistryPort
from port.transport import TransportPort
from services.article_request import ARTICLE_TIMEOUT_SECONDS, ArticleFetchRequest
from services.article_transformer import ArticleTransformer
from services.prefix_search import PrefixSearchRequest
from utils.language_metadata import code2_to_int, is_rtl_language, language_code_from_url

logger = logging.getLogger(__name__)

# Longer terms are never page titles; the API rejects or times out on them.
MAX_TERM_LENGTH = 80

WIKTIONARY_ICON = "wiktionary.png"
WIKIPEDIA_ICON = "wikipedia.png"


class MediaWikiDictionary:
    """Dictionary backed by a MediaWiki site's ``api.php``."""

    def __init__(
        self,
        id: str,
        name: str,
        url: str,
        transport: TransportPort,
        audio_links: AudioLinkRegistryPort,
        icon: str = "",
        timeout: float = ARTICLE_TIMEOUT_SECONDS,
    ):
        self.id = id
        self.name = name
        self.url = url.rstrip("/")
        self.icon = icon
        self._transport = transport
        self._audio_links = audio_links
        self._timeout = timeout
        self.language_code = language_code_from_url(self.url)
        self.lang_id = code2_to_int(self.language_code) if self.language_code else 0

    @classmethod
    def from_site(
        cls,
        site: MediaWikiSite,
        transport: TransportPort,
        audio_links: AudioLinkRegistryPort,
        timeout: float = ARTICLE_TIMEOUT_SECONDS,
    ) -> "MediaWikiDictionary":
        return cls(site.id, site.name, site.url, transport, audio_links, icon=site.icon, timeout=timeout)

    # Monolingual: articles are glosses in the site's own language.
    @property
    def lang_from(self) -> int:
        return self.lang_id

    @property
    def lang_to(self) -> int:
        return self.lang_id

    @property
    def is_rtl(self) -> bool:
        return is_rtl_language(self.language_code)

    @property
    def properties(self) -> dict[str, str]:
        return {}

    @property
    def article_count(self) -> int:
        return 0

    @property
    def word_count(self) -> int:
        return 0

    def resolve_icon(self, config_dir: Path | None = None) -> str:
        """Path of the configured icon if it exists, else a stock icon name."""
        if self.icon and config_dir is not None:
            candidate = config_dir / self.icon
            if candidate.is_file():
                return str(candidate.resolve())
        return WIKTIONARY_ICON if "tionary" in self.url else WIKIPEDIA_ICON

    def prefix_match(self, word: str, max_results: int = 0) -> WordSearchRequest:
        """Search titles starting at word. Terms over 80 characters yield an empty result."""
        if len(word) > MAX_TERM_LENGTH:
            return WordSearchRequestInstant()
        return PrefixSearchRequest(word, self.url, self._transport, max_results=max_results)

    def get_article(self, word: str, alts: list[str] | None = None) -> DataRequest:
        """Fetch the articles for word and its alternates, merged in that order."""
        if len(word) > MAX_TERM_LENGTH:
            return DataRequestInstant()
        transformer = ArticleTransformer(self.url, self.id, self._audio_links, rtl=self.is_rtl)
        return ArticleFetchRequest(
            word, list(alts or []), self.url, self._transport, transformer, timeout=self._timeout
        )


def make_dictionaries(
    sites: Iterable[MediaWikiSite],
    transport: TransportPort,
    audio_links: AudioLinkRegistryPort,
    timeout: float = ARTICLE_TIMEOUT_SECONDS,
) -> list[MediaWikiDictionary]:
    """Create a dictionary for every enabled site."""
    dictionaries = [
        MediaWikiDictionary.from_site(site, transport, audio_links, timeout=timeout)
        for site in sites
        if site.enabled
    ]
    logger.debug("MediaWiki dictionaries created", extra={"count": len(dictionaries)})
    return dictionaries


def find_dictionary(dictionaries: Iterable[MediaWikiDictionary], dictionary_id: str) -> MediaWikiDictionary:
    """Return the dictionary with the given id.

    Raises:
        NotFoundError: if no dictionary has that id.
    """
    for dictionary in dictionaries:
        if dictionary.id == dictionary_id:
            return dictionary
    raise NotFoundError(f"MediaWiki site '{dictionary_id}' not found")
