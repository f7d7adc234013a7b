from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from adapter.audio.link_registry import InMemoryAudioLinkRegistry
from adapter.external.httpx_transport import HttpxTransport
from domain.model.site import MediaWikiSite
from port.audio_links import AudioLinkRegistryPort
from port.transport import TransportPort
from services.mediawiki_dictionary import MediaWikiDictionary, make_dictionaries
from utils.config import Settings, load_sites

_transport: HttpxTransport | None = None
_audio_links = InMemoryAudioLinkRegistry()


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()


@lru_cache
def _load_sites(path: Path | None) -> tuple[MediaWikiSite, ...]:
    return tuple(load_sites(path))


def get_sites(settings: Settings = Depends(get_settings)) -> list[MediaWikiSite]:
    return list(_load_sites(settings.sites_file))


def get_transport() -> TransportPort:
    global _transport
    if _transport is None:
        _transport = HttpxTransport()
    return _transport


async def close_transport() -> None:
    global _transport
    if _transport is not None:
        await _transport.aclose()
        _transport = None


def get_audio_links() -> AudioLinkRegistryPort:
    return _audio_links


def get_dictionaries(
    settings: Settings = Depends(get_settings),
    sites: list[MediaWikiSite] = Depends(get_sites),
    transport: TransportPort = Depends(get_transport),
    audio_links: AudioLinkRegistryPort = Depends(get_audio_links),
) -> list[MediaWikiDictionary]:
    return make_dictionaries(sites, transport, audio_links, timeout=settings.timeout_seconds)
