"""Health check endpoint."""

import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from api.dependencies import get_sites
from domain.model.site import MediaWikiSite

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health(
    sites: list[MediaWikiSite] = Depends(get_sites),
):
    """Health check: healthy when at least one MediaWiki site is enabled."""
    enabled = [site for site in sites if site.enabled]
    health_status = {
        "status": "healthy" if enabled else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
        "services": {
            "mediawiki": {
                "status": "healthy" if enabled else "unhealthy",
                "message": f"{len(enabled)} of {len(sites)} sites enabled",
            }
        },
    }

    if not enabled:
        logger.warning("No MediaWiki sites enabled")

    status_code = status.HTTP_200_OK if enabled else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(content=health_status, status_code=status_code)
