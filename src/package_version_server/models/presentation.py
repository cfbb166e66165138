from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class HoverInfo(BaseModel):
    """Everything a hover card shows about one package."""

    model_config = ConfigDict(frozen=True)

    package_name: str
    description: str
    latest_version: str
    published_at: datetime
    homepage: str | None = None


class CompletionCandidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    version_label: str
    published_at: datetime
