"""Unit tests for package_version_server.presentation."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from package_version_server.models.presentation import HoverInfo
from package_version_server.presentation import (
    completion_candidates,
    hover_info,
    render_hover_markdown,
)
from tests.factories import PUBLISHED, make_entry

NOW = datetime(2024, 5, 1, tzinfo=UTC)


class TestHover:
    def test_hover_info_from_entry(self) -> None:
        info = hover_info("express", make_entry("4.17.1", "4.16.0"))
        assert info.package_name == "express"
        assert info.latest_version == "4.17.1"
        assert info.description == "Fast web framework"
        assert info.homepage == "http://expressjs.com"
        assert info.published_at == PUBLISHED

    def test_markdown_with_homepage(self) -> None:
        info = hover_info("express", make_entry("4.17.1"))
        assert render_hover_markdown(info, now=NOW) == (
            "**express**\n\n"
            "Fast web framework\n\n"
            "Latest version: 4.17.1 (published 3 years ago)\n\n"
            "[http://expressjs.com](http://expressjs.com)"
        )

    def test_markdown_without_homepage(self) -> None:
        info = HoverInfo(
            package_name="left-pad",
            description="String left pad",
            latest_version="1.3.0",
            published_at=datetime(2018, 4, 9, tzinfo=UTC),
        )
        markdown = render_hover_markdown(info, now=NOW)
        assert markdown.endswith("Latest version: 1.3.0 (published 6 years ago)")
        assert "[" not in markdown

    def test_recent_publish_time(self) -> None:
        info = hover_info("express", make_entry("4.17.1"))
        markdown = render_hover_markdown(info, now=PUBLISHED + timedelta(days=2))
        assert "(published 2 days ago)" in markdown

    def test_publish_time_ahead_of_clock_reads_now(self) -> None:
        info = hover_info("express", make_entry("4.17.1"))
        markdown = render_hover_markdown(info, now=PUBLISHED - timedelta(minutes=5))
        assert "(published now)" in markdown


class TestCompletion:
    def test_candidates_ranked(self) -> None:
        entry = make_entry("4.17.1", "4.16.0", "3.9.0")
        candidates = completion_candidates(entry, "4")
        assert [c.version_label for c in candidates] == ["4.17.1", "4.16.0"]
        assert all(c.published_at == PUBLISHED for c in candidates)

    def test_shallow_entry_has_no_candidates(self) -> None:
        entry = make_entry("4.17.1").model_copy(update={"versions": ()})
        assert completion_candidates(entry, "") == []
