"""Unit-specific fixtures (no network; registry calls go through fakes or respx)."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from package_version_server.cache import MetadataCache
from package_version_server.models.registry import FetchOptions, RegistryEntry
from tests.factories import make_entry


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeFetcher:
    """Records calls; ``gates`` hold a fetch open until the event is set."""

    def __init__(self, clock: FakeClock) -> None:
        self._clock = clock
        self.calls: list[tuple[str, FetchOptions | None]] = []
        self.gates: dict[str, asyncio.Event] = {}
        self.failing: set[str] = set()
        self.versions: tuple[str, ...] = ("4.17.1",)

    async def fetch(
        self, package_name: str, options: FetchOptions | None = None
    ) -> RegistryEntry | None:
        self.calls.append((package_name, options))
        gate = self.gates.get(package_name)
        if gate is not None:
            await gate.wait()
        if package_name in self.failing:
            return None
        return make_entry(*self.versions, fetched_at=self._clock())


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def fake_fetcher(clock: FakeClock) -> FakeFetcher:
    return FakeFetcher(clock)


@pytest.fixture()
def cache(fake_fetcher: FakeFetcher, clock: FakeClock) -> MetadataCache:
    return MetadataCache(fake_fetcher, clock=clock)
