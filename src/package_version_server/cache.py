"""In-memory registry metadata cache with a fixed freshness window.

One ``asyncio.Lock`` guards the whole name → entry map. It is held for map
reads and single-slot writes only, never while the registry is being
queried, so a slow lookup for one package never delays another package or a
fresh hit for the same one.

Fetch failures leave the map untouched and are not remembered: the next
request for the same package simply tries again. Entries are frozen models, so
handing out the stored object is as safe as handing out a copy.

Concurrent misses for the same package each run their own fetch and the last
one to finish wins. With ``coalesce_requests`` enabled they share one
in-flight fetch instead.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import structlog

from package_version_server.models.registry import FetchOptions

if TYPE_CHECKING:
    from package_version_server.models.registry import RegistryEntry
    from package_version_server.protocols import FetcherProtocol

log = structlog.get_logger()

# How long registry data is served before the next request refetches it.
REFRESH_INTERVAL = timedelta(seconds=30)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class MetadataCache:
    """Name → ``RegistryEntry`` map implementing CacheProtocol."""

    def __init__(
        self,
        fetcher: FetcherProtocol,
        *,
        ttl: timedelta = REFRESH_INTERVAL,
        clock: Callable[[], datetime] = _utcnow,
        coalesce_requests: bool = False,
    ) -> None:
        self._fetcher = fetcher
        self._ttl = ttl
        self._clock = clock
        self._coalesce = coalesce_requests
        self._lock = asyncio.Lock()
        self._entries: dict[str, RegistryEntry] = {}
        self._in_flight: dict[str, asyncio.Task[RegistryEntry | None]] = {}
        # Strong references so detached fetches are not garbage collected mid-flight.
        self._tasks: set[asyncio.Task[RegistryEntry | None]] = set()

    async def get(
        self, package_name: str, options: FetchOptions | None = None
    ) -> RegistryEntry | None:
        """Return metadata for ``package_name``, fetching it when stale or missing.

        A fresh entry is served even if it was fetched without the full version
        catalog and ``options`` asks for it.
        """
        options = options or FetchOptions()

        async with self._lock:
            cached = self._entries.get(package_name)
            if cached is not None and cached.is_fresh(self._clock(), self._ttl):
                log.debug("cache_hit", package=package_name)
                return cached

            task = self._in_flight.get(package_name) if self._coalesce else None
            if task is None:
                task = self._start_fetch(package_name, options)
            else:
                log.debug("cache_join_in_flight", package=package_name)

        # The fetch outlives an abandoned caller and still publishes its result.
        return await asyncio.shield(task)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _start_fetch(
        self, package_name: str, options: FetchOptions
    ) -> asyncio.Task[RegistryEntry | None]:
        """Launch a detached fetch. Caller must hold the lock."""
        log.debug(
            "cache_miss",
            package=package_name,
            include_all_versions=options.include_all_versions,
        )
        task = asyncio.create_task(self._fetch_and_store(package_name, options))
        self._tasks.add(task)
        if self._coalesce:
            self._in_flight[package_name] = task

        def _done(finished: asyncio.Task[RegistryEntry | None]) -> None:
            self._tasks.discard(finished)
            if self._in_flight.get(package_name) is finished:
                del self._in_flight[package_name]

        task.add_done_callback(_done)
        return task

    async def _fetch_and_store(
        self, package_name: str, options: FetchOptions
    ) -> RegistryEntry | None:
        entry = await self._fetcher.fetch(package_name, options)
        if entry is None:
            return None
        async with self._lock:
            self._entries[package_name] = entry
        return entry
