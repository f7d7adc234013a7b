"""MediaWiki site configuration record."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MediaWikiSite:
    """A configured wiki the dictionary can query.

    url is the directory holding ``api.php``, e.g. ``https://en.wikipedia.org/w``.
    """

    id: str
    name: str
    url: str
    enabled: bool = True
    icon: str = ""
