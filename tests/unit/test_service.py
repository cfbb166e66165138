"""Unit tests for package_version_server.service."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from package_version_server.cache import MetadataCache
from package_version_server.extractor import extract_dependency
from package_version_server.models.document import Position
from package_version_server.models.registry import FetchOptions
from package_version_server.service import PackageInfoService, version_prefix

if TYPE_CHECKING:
    from tests.unit.conftest import FakeFetcher


@pytest.fixture()
def service(cache: MetadataCache) -> PackageInfoService:
    return PackageInfoService(cache)


def _pos(line: int, column: int) -> Position:
    return Position(line=line, column=column)


class TestVersionPrefix:
    @pytest.mark.parametrize(
        ("spec", "column", "expected"),
        [
            ("^4.17.1", 18, "4"),
            ("^4.17.1", 23, "4.17.1"),
            ("~4.1", 16, ""),
            (">=4.2", 19, "4"),
            ("4.17.1", 19, "4.1"),
        ],
    )
    def test_typed_text_without_operators(self, spec: str, column: int, expected: str) -> None:
        text = f'{{\n  "dependencies": {{\n    "express": "{spec}"\n  }}\n}}\n'
        position = _pos(2, column)
        result = extract_dependency(text, position)
        assert result is not None
        assert version_prefix(result, position) == expected


class TestHover:
    async def test_hover_on_name(
        self, service: PackageInfoService, fake_fetcher: FakeFetcher, manifest: str
    ) -> None:
        info = await service.hover(manifest, _pos(6, 8))
        assert info is not None
        assert info.package_name == "express"
        assert info.latest_version == "4.17.1"
        assert fake_fetcher.calls == [("express", FetchOptions())]

    async def test_hover_on_version_also_answers(
        self, service: PackageInfoService, manifest: str
    ) -> None:
        info = await service.hover(manifest, _pos(6, 19))
        assert info is not None
        assert info.package_name == "express"

    async def test_hover_outside_dependencies_skips_lookup(
        self, service: PackageInfoService, fake_fetcher: FakeFetcher, manifest: str
    ) -> None:
        assert await service.hover(manifest, _pos(3, 7)) is None
        assert fake_fetcher.calls == []

    async def test_hover_when_metadata_unavailable(
        self, service: PackageInfoService, fake_fetcher: FakeFetcher, manifest: str
    ) -> None:
        fake_fetcher.failing.add("express")
        assert await service.hover(manifest, _pos(6, 8)) is None


class TestComplete:
    async def test_complete_on_version(
        self, service: PackageInfoService, fake_fetcher: FakeFetcher
    ) -> None:
        fake_fetcher.versions = ("4.17.1", "4.16.0", "3.9.0")
        text = '{\n  "dependencies": {\n    "express": "^4"\n  }\n}\n'
        candidates = await service.complete(text, _pos(2, 18))
        assert [c.version_label for c in candidates] == ["4.17.1", "4.16.0"]
        assert fake_fetcher.calls == [("express", FetchOptions(include_all_versions=True))]

    async def test_complete_on_name_is_empty(
        self, service: PackageInfoService, fake_fetcher: FakeFetcher, manifest: str
    ) -> None:
        assert await service.complete(manifest, _pos(6, 8)) == []
        assert fake_fetcher.calls == []

    async def test_complete_when_metadata_unavailable(
        self, service: PackageInfoService, fake_fetcher: FakeFetcher, manifest: str
    ) -> None:
        fake_fetcher.failing.add("express")
        assert await service.complete(manifest, _pos(6, 19)) == []
