"""Structural interfaces shared between the request service and its collaborators."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from package_version_server.models.registry import FetchOptions, RegistryEntry


class FetcherProtocol(Protocol):
    async def fetch(
        self, package_name: str, options: FetchOptions | None = None
    ) -> RegistryEntry | None: ...


class CacheProtocol(Protocol):
    async def get(
        self, package_name: str, options: FetchOptions | None = None
    ) -> RegistryEntry | None: ...
