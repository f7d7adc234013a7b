"""httpx transport adapter.

Implements TransportPort with a shared httpx.AsyncClient. Certificate
validation is disabled; wiki mirrors with self-signed certificates are
queried as well.
"""

import logging

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from domain.model.errors import TransportError

logger = logging.getLogger(__name__)

USER_AGENT = "wikigloss/0.1 (+https://www.mediawiki.org/wiki/API:Etiquette)"


class HttpxTransport:
    """Transport that fetches URLs with httpx."""

    def __init__(self, client: httpx.AsyncClient | None = None):
        self._client = client or httpx.AsyncClient(
            verify=False,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        )

    async def get(self, url: str, timeout: float) -> bytes:
        """Fetch url and return the body.

        Raises:
            TransportError: on connection failure, timeout or non-2xx status.
        """
        try:
            response = await _get_with_retry(self._client, url, timeout)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.warning(
                "MediaWiki request timed out",
                extra={"url": url, "timeout": timeout, "error_type": type(e).__name__},
            )
            raise TransportError("Operation timed out") from e
        except httpx.HTTPStatusError as e:
            logger.warning(
                "MediaWiki HTTP error",
                extra={"url": url, "status_code": e.response.status_code},
            )
            raise TransportError(
                f"HTTP {e.response.status_code} {e.response.reason_phrase}".rstrip()
            ) from e
        except httpx.RequestError as e:
            logger.warning(
                "MediaWiki request error",
                extra={"url": url, "error_type": type(e).__name__},
            )
            raise TransportError(str(e) or type(e).__name__) from e

        logger.debug(
            "MediaWiki request done",
            extra={"url": url, "bytes": len(response.content)},
        )
        return response.content

    async def aclose(self) -> None:
        await self._client.aclose()


@retry(
    retry=retry_if_exception_type(httpx.ConnectError),
    stop=stop_after_attempt(2),
    wait=wait_exponential(multiplier=0.2, max=1),
    reraise=True,
)
async def _get_with_retry(client: httpx.AsyncClient, url: str, timeout: float) -> httpx.Response:
    """GET url, retrying once when the connection could not be opened."""
    return await client.get(url, timeout=timeout)
