"""Editor-facing views of registry metadata."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import humanize

from package_version_server.models.presentation import CompletionCandidate, HoverInfo
from package_version_server.ranker import rank

if TYPE_CHECKING:
    from package_version_server.models.registry import RegistryEntry


def hover_info(package_name: str, entry: RegistryEntry) -> HoverInfo:
    latest = entry.latest
    return HoverInfo(
        package_name=package_name,
        description=latest.description,
        latest_version=latest.version,
        published_at=latest.published_at,
        homepage=latest.homepage,
    )


def render_hover_markdown(info: HoverInfo, now: datetime | None = None) -> str:
    """Markdown body of the hover card.

    The publish time is shown relative to ``now``, e.g. "published 3 years ago".
    """
    now = now or datetime.now(UTC)
    published = humanize.naturaltime(max(now - info.published_at, timedelta(0)))
    markdown = (
        f"**{info.package_name}**\n\n"
        f"{info.description}\n\n"
        f"Latest version: {info.latest_version} (published {published})"
    )
    if info.homepage:
        markdown += f"\n\n[{info.homepage}]({info.homepage})"
    return markdown


def completion_candidates(entry: RegistryEntry, prefix: str) -> list[CompletionCandidate]:
    return [
        CompletionCandidate(version_label=record.version, published_at=record.published_at)
        for record in rank(entry.versions, prefix)
    ]
