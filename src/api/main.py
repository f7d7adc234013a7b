"""FastAPI application entry point."""

import os
import sys
import logging
import tomllib
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Load environment variables from .env file
# Must be called before settings are read
load_dotenv()

# main.py is at src/api/main.py; src is two levels up
_src_path = Path(__file__).parent.parent
sys.path.insert(0, str(_src_path))

from api.dependencies import close_transport, get_settings
from api.routes import health, mediawiki
from utils.config import load_sites
from utils.logging import setup_structured_logging

settings = get_settings()
setup_structured_logging(settings.log_level)

logger = logging.getLogger(__name__)

_pyproject = _src_path.parent / "pyproject.toml"
if _pyproject.exists():
    with open(_pyproject, "rb") as f:
        VERSION = tomllib.load(f)["project"]["version"]
else:
    VERSION = "unknown"

SERVICE_NAME = "wikigloss"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: validate the site list on startup, close the HTTP client on shutdown."""
    sites = load_sites(settings.sites_file)
    enabled = sum(1 for site in sites if site.enabled)
    if enabled:
        logger.info("MediaWiki sites configured", extra={"enabled": enabled, "total": len(sites)})
    else:
        logger.warning("No MediaWiki sites enabled", extra={"total": len(sites)})

    yield  # App runs here

    await close_transport()


app = FastAPI(
    title=SERVICE_NAME,
    description="Article lookup and title search against MediaWiki sites",
    version=VERSION,
    lifespan=lifespan,
)

# "*" cannot be combined with credentials; explicit origins can.
cors_origins_env = os.getenv("CORS_ORIGINS", "*")
if cors_origins_env == "*":
    cors_origins = ["*"]
    allow_credentials = False
else:
    cors_origins = [origin.strip() for origin in cors_origins_env.split(",")]
    allow_credentials = True
    logger.info("CORS configured with specific origins", extra={"origins": cors_origins})

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=allow_credentials,
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(mediawiki.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": SERVICE_NAME,
        "version": VERSION,
        "status": "running"
    }


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=port,
        access_log=False
    )
