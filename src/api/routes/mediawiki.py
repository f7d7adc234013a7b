"""MediaWiki dictionary routes.

Endpoints:
- GET /mediawiki/sites: enabled dictionaries
- GET /mediawiki/{site_id}/prefix: titles sorting at or after a word
- GET /mediawiki/{site_id}/article: merged article fragment for a word and its alternates
- GET /mediawiki/{site_id}/article/stream: same fragment, streamed as each page arrives
"""

import asyncio
import logging
from typing import AsyncIterator

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse

from api.dependencies import get_dictionaries, get_settings
from api.models import ArticleResponse, PrefixMatchResponse, SiteResponse
from domain.model.errors import NotFoundError
from domain.model.request import DataRequest, Request
from services.mediawiki_dictionary import MediaWikiDictionary, find_dictionary
from utils.config import Settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/mediawiki", tags=["mediawiki"])

# Upper bound on a whole lookup; each article transfer has its own shorter timeout.
REQUEST_DEADLINE_SECONDS = 30.0


def _get_dictionary(site_id: str, dictionaries: list[MediaWikiDictionary]) -> MediaWikiDictionary:
    try:
        return find_dictionary(dictionaries, site_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


async def _wait(request: Request) -> None:
    """Wait for request to finish, cancelling it on deadline or client disconnect."""
    try:
        await asyncio.wait_for(request.wait_finished(), timeout=REQUEST_DEADLINE_SECONDS)
    except asyncio.TimeoutError:
        logger.warning("MediaWiki lookup exceeded deadline")
        raise HTTPException(status_code=504, detail="MediaWiki lookup timed out")
    finally:
        if not request.is_finished():
            request.cancel()


@router.get("/sites", response_model=list[SiteResponse])
async def list_sites(
    settings: Settings = Depends(get_settings),
    dictionaries: list[MediaWikiDictionary] = Depends(get_dictionaries),
):
    """List enabled MediaWiki dictionaries."""
    return [
        SiteResponse(
            id=d.id,
            name=d.name,
            url=d.url,
            language=d.language_code,
            rtl=d.is_rtl,
            icon=d.resolve_icon(settings.config_dir),
        )
        for d in dictionaries
    ]


@router.get("/{site_id}/prefix", response_model=PrefixMatchResponse)
async def prefix_match(
    site_id: str,
    word: str = Query(..., min_length=1, description="Prefix to search"),
    max_results: int = Query(40, ge=1, le=40, description="Maximum number of titles"),
    dictionaries: list[MediaWikiDictionary] = Depends(get_dictionaries),
):
    """Search page titles sorting at or after word."""
    dictionary = _get_dictionary(site_id, dictionaries)
    request = dictionary.prefix_match(word, max_results)
    await _wait(request)

    error = request.error_string()
    if error:
        logger.info("MediaWiki prefix search error", extra={"site_id": site_id, "term": word, "error": error})
    return PrefixMatchResponse(matches=request.matches(), error=error or None)


@router.get("/{site_id}/article", response_model=ArticleResponse)
async def get_article(
    site_id: str,
    word: str = Query(..., min_length=1, description="Headword"),
    alt: list[str] = Query(default=[], description="Alternate spellings, queried after the headword"),
    dictionaries: list[MediaWikiDictionary] = Depends(get_dictionaries),
):
    """Fetch the merged article for word and its alternates."""
    dictionary = _get_dictionary(site_id, dictionaries)
    request = dictionary.get_article(word, alt)
    await _wait(request)

    error = request.error_string()
    if error:
        logger.info("MediaWiki article error", extra={"site_id": site_id, "term": word, "error": error})
    return ArticleResponse(
        html=request.get_data().decode("utf-8"),
        has_data=request.has_any_data(),
        error=error or None,
    )


async def _stream_article(request: DataRequest) -> AsyncIterator[bytes]:
    sent = 0
    try:
        while True:
            finished = request.is_finished()
            chunk = request.get_data(sent)
            if chunk:
                sent += len(chunk)
                yield chunk
            if finished:
                break
            await request.wait_for_change()
    finally:
        if not request.is_finished():
            request.cancel()


@router.get("/{site_id}/article/stream")
async def stream_article(
    site_id: str,
    word: str = Query(..., min_length=1, description="Headword"),
    alt: list[str] = Query(default=[], description="Alternate spellings, queried after the headword"),
    dictionaries: list[MediaWikiDictionary] = Depends(get_dictionaries),
):
    """Stream the article fragment; each page is sent as soon as it is merged."""
    dictionary = _get_dictionary(site_id, dictionaries)
    request = dictionary.get_article(word, alt)
    return StreamingResponse(_stream_article(request), media_type="text/html; charset=utf-8")
