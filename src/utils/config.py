"""Settings and site list configuration.

Settings come from environment variables (``.env`` is loaded by the API entry
point):

    MEDIAWIKI_SITES_FILE       JSON list of site records; built-in defaults if unset
    MEDIAWIKI_TIMEOUT_SECONDS  article transfer timeout (default 3)
    MEDIAWIKI_CONFIG_DIR       directory searched for site icons
    LOG_LEVEL                  root log level (default INFO)

A sites file looks like::

    [
        {"id": "enwiki", "name": "English Wikipedia",
         "url": "https://en.wikipedia.org/w", "enabled": true, "icon": ""}
    ]
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field, TypeAdapter, field_validator

from domain.model.site import MediaWikiSite
from services.article_request import ARTICLE_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


class SiteRecord(BaseModel):
    """Persisted site entry."""
    id: str = Field(..., min_length=1, description="Stable dictionary id")
    name: str = Field(..., min_length=1, description="Display name")
    url: str = Field(..., description="Directory holding api.php")
    enabled: bool = Field(True, description="Only enabled sites become dictionaries")
    icon: str = Field("", description="Icon file name relative to the config directory")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("url must start with http:// or https://")
        return v.rstrip("/")

    def to_site(self) -> MediaWikiSite:
        return MediaWikiSite(id=self.id, name=self.name, url=self.url, enabled=self.enabled, icon=self.icon)


_SITE_LIST = TypeAdapter(list[SiteRecord])

DEFAULT_SITES: tuple[MediaWikiSite, ...] = (
    MediaWikiSite("ae6f89aac7151829681b85f035d54e48", "English Wikipedia", "https://en.wikipedia.org/w", True),
    MediaWikiSite("affcf9678e7bfe701c9b071f97eccba3", "English Wiktionary", "https://en.wiktionary.org/w", False),
    MediaWikiSite("8e0c1c2b6821dab8bdba8eb869ca7176", "Russian Wikipedia", "https://ru.wikipedia.org/w", False),
    MediaWikiSite("b09947600ae3902654f8ad4567ae8567", "Russian Wiktionary", "https://ru.wiktionary.org/w", False),
    MediaWikiSite("a8a66331a1242ca2aeb0b4aed361c41d", "German Wikipedia", "https://de.wikipedia.org/w", False),
    MediaWikiSite("21c64bca5ec10ba17ff19f3066bc962a", "German Wiktionary", "https://de.wiktionary.org/w", False),
    MediaWikiSite("96957cb2ad73a20c7a1d561fc83c253a", "Portuguese Wikipedia", "https://pt.wikipedia.org/w", False),
    MediaWikiSite("ed4c3929196afdd93cc08b9a903aad6a", "Portuguese Wiktionary", "https://pt.wiktionary.org/w", False),
    MediaWikiSite("f3b4ec8531e52ddf5b10d21e4577a7a2", "Greek Wikipedia", "https://el.wikipedia.org/w", False),
    MediaWikiSite("5d45232075d06e002dea72fe3e137da1", "Greek Wiktionary", "https://el.wiktionary.org/w", False),
)


def parse_sites(raw: object) -> list[MediaWikiSite]:
    """Validate decoded JSON and convert it to site records.

    Raises:
        pydantic.ValidationError: if an entry is malformed.
    """
    return [record.to_site() for record in _SITE_LIST.validate_python(raw)]


def load_sites(path: Path | None = None) -> list[MediaWikiSite]:
    """Load the site list from a JSON file, or return the defaults when path is None.

    Raises:
        FileNotFoundError: if path does not exist.
        json.JSONDecodeError: if the file is not valid JSON.
        pydantic.ValidationError: if an entry is malformed.
    """
    if path is None:
        return list(DEFAULT_SITES)
    if not path.exists():
        raise FileNotFoundError(f"Sites file '{path}' not found.")

    with path.open("r", encoding="utf-8") as handle:
        raw = json.load(handle)
    sites = parse_sites(raw)
    logger.info("Loaded MediaWiki sites", extra={"path": str(path), "count": len(sites)})
    return sites


@dataclass(frozen=True)
class Settings:
    sites_file: Path | None = None
    timeout_seconds: float = ARTICLE_TIMEOUT_SECONDS
    config_dir: Path | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        sites_file = os.getenv("MEDIAWIKI_SITES_FILE", "")
        config_dir = os.getenv("MEDIAWIKI_CONFIG_DIR", "")
        timeout = os.getenv("MEDIAWIKI_TIMEOUT_SECONDS", "")
        try:
            timeout_seconds = float(timeout) if timeout else ARTICLE_TIMEOUT_SECONDS
        except ValueError:
            logger.warning("Invalid MEDIAWIKI_TIMEOUT_SECONDS, using default", extra={"value": timeout})
            timeout_seconds = ARTICLE_TIMEOUT_SECONDS
        return cls(
            sites_file=Path(sites_file) if sites_file else None,
            timeout_seconds=timeout_seconds,
            config_dir=Path(config_dir) if config_dir else None,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
