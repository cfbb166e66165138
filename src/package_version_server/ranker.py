"""Completion ordering for version catalogs.

Ordering is plain string comparison, not semver precedence: "10.0.0" sorts
before "9.0.0". Editors already show these candidates in this order, so keep it.
"""

from __future__ import annotations

from collections.abc import Iterable

from package_version_server.models.registry import VersionRecord


def rank(catalog: Iterable[VersionRecord], prefix: str) -> list[VersionRecord]:
    """Records whose version starts with ``prefix``, highest string first."""
    matching = [record for record in catalog if record.version.startswith(prefix)]
    return sorted(matching, key=lambda record: record.version, reverse=True)
