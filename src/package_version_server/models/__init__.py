from __future__ import annotations

from package_version_server.models.document import (
    ExtractionResult,
    Position,
    Range,
    TokenKind,
)
from package_version_server.models.presentation import CompletionCandidate, HoverInfo
from package_version_server.models.registry import FetchOptions, RegistryEntry, VersionRecord

__all__ = [
    # document
    "Position",
    "Range",
    "TokenKind",
    "ExtractionResult",
    # registry
    "FetchOptions",
    "VersionRecord",
    "RegistryEntry",
    # presentation
    "HoverInfo",
    "CompletionCandidate",
]
