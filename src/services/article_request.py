"""Article request — fans out one query per headword variant and merges the replies.

Merge algorithm:
    Every variant (headword first, then alternates in input order) gets a
    SubQuery whose transfer starts immediately. When any transfer completes,
    its SubQuery is marked finished; then finished SubQueries are popped from
    the front of the queue and processed until the front one is still in
    flight. Output therefore follows submission order whatever order the
    network answers in, and the request finishes when the queue is empty.

Completions arrive as done-callbacks on the event loop thread, and cancel()
hands its teardown to that thread too, so the queue and the page id set need
no locking. The output buffer is locked by DataRequest because consumers may
read it from other threads.
"""

import asyncio
import logging
from collections import deque

from domain.model.errors import TransportError, XmlParseError
from domain.model.page_ids import PageIdentitySet
from domain.model.request import DataRequest
from port.transport import TransportPort
from services.article_transformer import ArticleTransformer
from utils.mediawiki_api import (
    ARTICLE_QUERY,
    build_api_url,
    element_text,
    find_path,
    parse_envelope,
    to_int,
)

logger = logging.getLogger(__name__)

ARTICLE_TIMEOUT_SECONDS = 3.0


class SubQuery:
    """One in-flight transfer for a single variant.

    The task is the transport handle. It is released exactly once: after its
    reply has been merged, or when the request is cancelled.
    """

    def __init__(self, term: str, url: str, task: asyncio.Task):
        self.term = term
        self.url = url
        self.task: asyncio.Task | None = task
        self.finished = False

    def release(self) -> None:
        task, self.task = self.task, None
        if task is None:
            return
        if not task.done():
            task.cancel()
        elif not task.cancelled():
            # A failure that was never merged still counts as retrieved.
            task.exception()


class ArticleFetchRequest(DataRequest):
    """Fetches and merges the articles for a headword and its alternates.

    Must be created on a running event loop; transfers start in the constructor.
    """

    def __init__(
        self,
        word: str,
        alts: list[str],
        site_url: str,
        transport: TransportPort,
        transformer: ArticleTransformer,
        timeout: float = ARTICLE_TIMEOUT_SECONDS,
    ):
        super().__init__()
        self._loop = asyncio.get_running_loop()
        self._site_url = site_url
        self._transport = transport
        self._transformer = transformer
        self._timeout = timeout
        self._queries: deque[SubQuery] = deque()
        # The headword and an alternate may redirect to the same page.
        self._page_ids = PageIdentitySet()

        self._add_query(word)
        for alt in alts:
            self._add_query(alt)

    def pending_count(self) -> int:
        return len(self._queries)

    def _release(self) -> None:
        while self._queries:
            self._queries.popleft().release()

    def _add_query(self, term: str) -> None:
        logger.debug("MediaWiki: requesting article", extra={"term": term})
        url = build_api_url(self._site_url, ARTICLE_QUERY, "page", term)
        task = self._loop.create_task(self._transport.get(url, self._timeout))
        self._queries.append(SubQuery(term, url, task))
        task.add_done_callback(self._request_finished)

    def _request_finished(self, task: asyncio.Task) -> None:
        if self.is_finished():  # cancelled
            return

        for query in self._queries:
            if query.task is task:
                query.finished = True
                break
        else:
            return

        updated = False
        while self._queries and self._queries[0].finished:
            query = self._queries.popleft()
            try:
                updated = self._merge(query) or updated
            except Exception as e:
                logger.error(
                    "MediaWiki: failed to process article reply",
                    extra={"term": query.term, "error": str(e)},
                    exc_info=True,
                )
                self.set_error_string(str(e))
            finally:
                query.release()

        if not self._queries:
            self.finish()
        elif updated:
            self.update()

    def _merge(self, query: SubQuery) -> bool:
        """Process one reply. Returns True if an article was appended."""
        task = query.task
        if task.cancelled():
            self.set_error_string("Operation canceled")
            return False

        try:
            body = task.result()
            root = parse_envelope(body)
        except (TransportError, XmlParseError) as e:
            logger.debug(
                "MediaWiki: article query failed",
                extra={"term": query.term, "url": query.url, "error": str(e)},
            )
            self.set_error_string(str(e))
            return False

        parse_node = find_path(root, "api", "parse")
        # revid 0 is how the API says "no such page"
        if parse_node is None or parse_node.get("revid") == "0":
            return False

        if not self._page_ids.insert(to_int(parse_node.get("pageid"))):
            logger.debug("MediaWiki: skipping duplicate page", extra={"term": query.term})
            return False

        text_node = parse_node.find("text")
        if text_node is None:
            return False

        self.append_data(self._transformer.transform(element_text(text_node), parse_node))
        logger.debug("MediaWiki: article merged", extra={"term": query.term})
        return True
