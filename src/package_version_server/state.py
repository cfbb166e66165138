"""Application state container.

AppState is created once at startup by ``build_state`` and handed to whatever
drives requests (the CLI today). The HTTP client lives exactly as long as the
context manager.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from package_version_server.cache import MetadataCache
from package_version_server.fetcher import RegistryFetcher, build_http_client
from package_version_server.service import PackageInfoService

if TYPE_CHECKING:
    import httpx

    from package_version_server.config import Settings


@dataclass
class AppState:
    """Holds all shared runtime state."""

    settings: Settings
    http_client: httpx.AsyncClient
    fetcher: RegistryFetcher
    cache: MetadataCache
    service: PackageInfoService


@asynccontextmanager
async def build_state(settings: Settings) -> AsyncIterator[AppState]:
    async with build_http_client(settings.registry) as client:
        fetcher = RegistryFetcher(client, settings.registry)
        cache = MetadataCache(fetcher, coalesce_requests=settings.cache.coalesce_requests)
        yield AppState(
            settings=settings,
            http_client=client,
            fetcher=fetcher,
            cache=cache,
            service=PackageInfoService(cache),
        )
