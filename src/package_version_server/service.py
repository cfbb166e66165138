"""Hover and completion requests: extractor → cache → presentation."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from package_version_server.extractor import extract, parse_document
from package_version_server.models.document import TokenKind
from package_version_server.models.registry import FetchOptions
from package_version_server.presentation import completion_candidates, hover_info

if TYPE_CHECKING:
    from package_version_server.models.document import ExtractionResult, Position
    from package_version_server.models.presentation import CompletionCandidate, HoverInfo
    from package_version_server.protocols import CacheProtocol

log = structlog.get_logger()

# Range operators typed in front of a version: "^4.1", "~4", ">=4", "v4"...
_SPECIFIER_OPERATORS = "^~=<>v \t"


def version_prefix(result: ExtractionResult, position: Position) -> str:
    """Version text typed before the cursor, without range operators."""
    offset = max(position.column - result.matched_range.start.column, 0)
    typed = result.version_spec_text.encode("utf-8")[:offset].decode("utf-8", errors="ignore")
    return typed.lstrip(_SPECIFIER_OPERATORS)


class PackageInfoService:
    """Answers editor requests for one manifest document at a time."""

    def __init__(self, cache: CacheProtocol) -> None:
        self._cache = cache

    async def hover(self, text: str, position: Position) -> HoverInfo | None:
        result = extract(parse_document(text), text, position)
        if result is None:
            return None

        entry = await self._cache.get(result.package_name, FetchOptions())
        if entry is None:
            log.info("metadata_unavailable", package=result.package_name)
            return None
        return hover_info(result.package_name, entry)

    async def complete(self, text: str, position: Position) -> list[CompletionCandidate]:
        result = extract(parse_document(text), text, position)
        if result is None or result.token_kind is not TokenKind.VERSION:
            return []

        entry = await self._cache.get(
            result.package_name, FetchOptions(include_all_versions=True)
        )
        if entry is None:
            log.info("metadata_unavailable", package=result.package_name)
            return []
        return completion_candidates(entry, version_prefix(result, position))
