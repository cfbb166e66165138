"""Error types raised inside the registry fetch path."""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    REGISTRY_UNREACHABLE = "REGISTRY_UNREACHABLE"
    REGISTRY_HTTP_ERROR = "REGISTRY_HTTP_ERROR"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    INVALID_VERSION_RECORD = "INVALID_VERSION_RECORD"


class RegistryError(Exception):
    """A registry lookup that could not produce metadata.

    ``recoverable`` tells the caller whether repeating the same request later
    could plausibly succeed (transport trouble) or not (the registry answered
    with something unusable).
    """

    def __init__(self, code: ErrorCode, message: str, recoverable: bool = False) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.recoverable = recoverable

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"
