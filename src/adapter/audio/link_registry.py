"""In-memory registry of pronunciation audio links.

Every audio link found while transforming an article is recorded for the
dictionary that produced it, so a host can offer "play first pronunciation"
per dictionary. The returned markup exposes the same information to scripts
running inside the article view.
"""

import logging
import threading

logger = logging.getLogger(__name__)


class InMemoryAudioLinkRegistry:
    """Thread-safe AudioLinkRegistryPort implementation."""

    def __init__(self):
        self._lock = threading.Lock()
        self._links: dict[str, list[str]] = {}
        self._first: str | None = None

    def register_and_wrap(self, url_expression: str, owner_id: str) -> str:
        """Record the link and return a script block announcing it.

        Args:
            url_expression: Quoted URL, e.g. ``"https://upload.wikimedia.org/x.ogg"``.
            owner_id: Id of the dictionary the article came from.

        Returns:
            Script markup, or an empty string for an empty expression.
        """
        url = url_expression.strip('"')
        if not url:
            return ""

        with self._lock:
            self._links.setdefault(owner_id, []).append(url)
            if self._first is None:
                self._first = url

        logger.debug("Registered audio link", extra={"owner_id": owner_id, "audio_url": url})
        return (
            '<script type="text/javascript">'
            f"gdAudioLinks.first = gdAudioLinks.first || {url_expression};"
            f"if(!gdAudioLinks['{owner_id}']){{gdAudioLinks['{owner_id}'] = {url_expression};}}"
            "</script>"
        )

    def links_for(self, owner_id: str) -> list[str]:
        with self._lock:
            return list(self._links.get(owner_id, []))

    def first_link(self) -> str | None:
        with self._lock:
            return self._first
