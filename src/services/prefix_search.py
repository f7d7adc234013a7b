"""Prefix search — lists page titles sorting at or after a given term."""

import asyncio
import logging

from domain.model.errors import TransportError, XmlParseError
from domain.model.request import WordSearchRequest
from port.transport import TransportPort
from utils.mediawiki_api import PREFIX_SEARCH_QUERY, build_api_url, find_path, parse_envelope

logger = logging.getLogger(__name__)

PREFIX_SEARCH_TIMEOUT_SECONDS = 10.0


class PrefixSearchRequest(WordSearchRequest):
    """Single ``list=allpages`` query.

    Cancellation and the completion callback may both try to finish the
    request. cancel() sets the finished flag before anything else, the
    callback checks it first, and finish() itself is idempotent.
    """

    def __init__(
        self,
        word: str,
        site_url: str,
        transport: TransportPort,
        max_results: int = 0,
        timeout: float = PREFIX_SEARCH_TIMEOUT_SECONDS,
    ):
        super().__init__()
        self._max_results = max_results

        logger.debug("MediaWiki: prefix search", extra={"term": word})
        url = build_api_url(site_url, PREFIX_SEARCH_QUERY, "apfrom", word)
        self._task: asyncio.Task | None = asyncio.get_running_loop().create_task(
            transport.get(url, timeout)
        )
        self._task.add_done_callback(self._download_finished)

    def _release(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
        logger.debug("MediaWiki: prefix search cancelled")

    def _download_finished(self, task: asyncio.Task) -> None:
        if self.is_finished():
            if not task.cancelled():
                task.exception()
            return
        self._task = None

        if task.cancelled():
            self.set_error_string("Operation canceled")
            self.finish()
            return

        try:
            root = parse_envelope(task.result())
        except (TransportError, XmlParseError) as e:
            self.set_error_string(str(e))
        except Exception as e:
            logger.error(
                "MediaWiki: prefix search failed",
                extra={"error": str(e)},
                exc_info=True,
            )
            self.set_error_string(str(e))
        else:
            pages = find_path(root, "api", "query", "allpages")
            if pages is not None:
                titles = [p.get("title", "") for p in pages.iter("p")]
                if self._max_results > 0:
                    titles = titles[:self._max_results]
                self.add_matches(titles)

        self.finish()
