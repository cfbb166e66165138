from __future__ import annotations

from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, field_validator


class FetchOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    include_all_versions: bool = False


class VersionRecord(BaseModel):
    """One published version as reported by the registry."""

    model_config = ConfigDict(frozen=True)

    version: str  # Raw version string, already checked against semver grammar
    description: str
    homepage: str | None = None
    published_at: datetime

    @field_validator("published_at")
    @classmethod
    def validate_offset(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            raise ValueError("published_at must carry a UTC offset")
        return v


class RegistryEntry(BaseModel):
    """Result of one successful registry lookup.

    Never mutated; a refetch replaces the whole entry.
    """

    model_config = ConfigDict(frozen=True)

    fetched_at: datetime
    latest: VersionRecord
    versions: tuple[VersionRecord, ...] = ()  # Empty unless the full catalog was requested
    failed_version_ids: frozenset[str] = frozenset()

    def is_fresh(self, now: datetime, ttl: timedelta) -> bool:
        return now - self.fetched_at < ttl
