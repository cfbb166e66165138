"""Registry lookups: one GET per package, parsed into a ``RegistryEntry``.

``RegistryFetcher.fetch`` is the public boundary and never raises for registry
trouble: every ``RegistryError`` is logged and turned into ``None``, which the
caller reports as "metadata unavailable". The parsing helpers below raise, so
each failure mode stays individually testable.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any
from urllib.parse import quote

import httpx
import semantic_version
import structlog

from package_version_server import __version__
from package_version_server.config import RegistrySettings
from package_version_server.errors import ErrorCode, RegistryError
from package_version_server.models.registry import FetchOptions, RegistryEntry, VersionRecord

log = structlog.get_logger()

USER_AGENT = f"package-version-server/{__version__}"

# Date and time joined by T, t or a space; the offset is Z, z or +HH:MM / -HH:MM.
_RFC3339 = re.compile(
    r"\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:[Zz]|[+-]\d{2}:\d{2})"
)


def build_http_client(settings: RegistrySettings | None = None) -> httpx.AsyncClient:
    """Create the shared HTTP client used for every registry call."""
    settings = settings or RegistrySettings()
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        follow_redirects=True,
    )


# ---------------------------------------------------------------------------
# Registry selection
# ---------------------------------------------------------------------------


def select_registry(package_name: str, settings: RegistrySettings) -> str:
    """Pick the registry base URL for ``package_name``.

    ``@scope/name`` packages are routed through the scope table; unscoped names
    and unknown scopes go to the default registry.
    """
    if package_name.startswith("@") and "/" in package_name:
        scope = package_name.split("/", 1)[0]
        return settings.scopes.get(scope, settings.default_url)
    return settings.default_url


def package_url(package_name: str, settings: RegistrySettings) -> str:
    # "@types/node" → "%40types%2Fnode"
    return f"{select_registry(package_name, settings)}/{quote(package_name, safe='')}"


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------


def parse_semver(version: str) -> semantic_version.Version:
    """Parse a version string the way npm's loose mode does.

    Surrounding whitespace and a leading ``v`` or ``=`` are ignored.
    Pre-release and build suffixes are accepted, and numeric identifiers may
    carry leading zeros (``01.2.3``, ``1.0.0-rc.01``).
    """
    cleaned = version.strip().lstrip("=v").strip()
    main, plus, build = cleaned.partition("+")
    core, dash, prerelease = main.partition("-")
    normalized = _drop_leading_zeros(core) + dash + _drop_leading_zeros(prerelease) + plus + build
    try:
        return semantic_version.Version(normalized)
    except ValueError as exc:
        raise RegistryError(
            ErrorCode.INVALID_VERSION_RECORD, f"Not a semantic version: {version!r}"
        ) from exc


def _drop_leading_zeros(identifiers: str) -> str:
    # "01.2.03" → "1.2.3"; non-numeric identifiers are left alone
    return ".".join(
        (part.lstrip("0") or "0") if part.isascii() and part.isdigit() else part
        for part in identifiers.split(".")
    )


def parse_rfc3339(value: str) -> datetime:
    if not _RFC3339.fullmatch(value):
        raise RegistryError(ErrorCode.INVALID_VERSION_RECORD, f"Invalid timestamp: {value!r}")
    try:
        return datetime.fromisoformat(value.upper())
    except ValueError as exc:
        raise RegistryError(
            ErrorCode.INVALID_VERSION_RECORD, f"Invalid timestamp: {value!r}"
        ) from exc


def parse_version_record(document: Mapping[str, Any], version_info: Any) -> VersionRecord:
    """Build a ``VersionRecord`` from one ``versions[...]`` object.

    The publish date is looked up in the document's ``time`` map under the
    record's own ``version`` string.
    """
    if not isinstance(version_info, Mapping):
        raise RegistryError(ErrorCode.INVALID_VERSION_RECORD, "Version metadata is not an object")

    version = version_info.get("version")
    if not isinstance(version, str):
        raise RegistryError(ErrorCode.INVALID_VERSION_RECORD, "Missing 'version' string")
    parse_semver(version)

    description = version_info.get("description")
    if not isinstance(description, str):
        raise RegistryError(
            ErrorCode.INVALID_VERSION_RECORD, f"Missing 'description' for {version}"
        )

    homepage = version_info.get("homepage")
    if not isinstance(homepage, str):
        homepage = None

    times = document.get("time")
    published = times.get(version) if isinstance(times, Mapping) else None
    if not isinstance(published, str):
        raise RegistryError(
            ErrorCode.INVALID_VERSION_RECORD, f"No publish time recorded for {version}"
        )

    return VersionRecord(
        version=version,
        description=description,
        homepage=homepage,
        published_at=parse_rfc3339(published),
    )


def parse_registry_document(
    package_name: str,
    document: Any,
    options: FetchOptions,
    fetched_at: datetime,
) -> RegistryEntry:
    """Turn a registry JSON document into a ``RegistryEntry``.

    A broken ``latest`` record fails the whole document. With
    ``include_all_versions``, every other record is parsed on its own and
    failures are only collected by version key.
    """
    if not isinstance(document, Mapping):
        raise RegistryError(ErrorCode.INVALID_RESPONSE, "Registry response is not an object")

    dist_tags = document.get("dist-tags")
    latest_tag = dist_tags.get("latest") if isinstance(dist_tags, Mapping) else None
    if not isinstance(latest_tag, str):
        raise RegistryError(ErrorCode.INVALID_RESPONSE, "Missing dist-tags.latest")

    versions = document.get("versions")
    if not isinstance(versions, Mapping):
        raise RegistryError(ErrorCode.INVALID_RESPONSE, "Missing 'versions' object")

    try:
        latest = parse_version_record(document, versions.get(latest_tag))
    except RegistryError as exc:
        raise RegistryError(
            ErrorCode.INVALID_RESPONSE,
            f"Latest version {latest_tag} is unusable: {exc.message}",
        ) from exc

    catalog: list[VersionRecord] = []
    failed: list[str] = []
    if options.include_all_versions:
        for version_id, version_info in versions.items():
            try:
                catalog.append(parse_version_record(document, version_info))
            except RegistryError:
                failed.append(version_id)

    if failed:
        # latest always parses by now, so "all" means every historical record failed.
        historical = len(versions) - 1
        log.warning(
            "version_records_unparsable",
            package=package_name,
            extent="all" if len(failed) >= historical else "some",
            failed_versions=failed,
        )

    return RegistryEntry(
        fetched_at=fetched_at,
        latest=latest,
        versions=tuple(catalog),
        failed_version_ids=frozenset(failed),
    )


# ---------------------------------------------------------------------------
# Fetcher
# ---------------------------------------------------------------------------


def _utcnow() -> datetime:
    return datetime.now(UTC)


class RegistryFetcher:
    """Fetches package metadata from npm-compatible registries."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: RegistrySettings | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._client = client
        self._settings = settings or RegistrySettings()
        self._clock = clock

    async def fetch(
        self, package_name: str, options: FetchOptions | None = None
    ) -> RegistryEntry | None:
        """Fetch and parse ``package_name``. Returns ``None`` on any failure."""
        options = options or FetchOptions()
        try:
            document = await self._get_document(package_name)
            return parse_registry_document(package_name, document, options, self._clock())
        except RegistryError as exc:
            log.warning(
                "registry_fetch_failed",
                package=package_name,
                code=exc.code,
                recoverable=exc.recoverable,
                reason=exc.message,
            )
            return None

    async def _get_document(self, package_name: str) -> Any:
        url = package_url(package_name, self._settings)
        log.debug("registry_fetch", package=package_name, url=url)
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            raise RegistryError(
                ErrorCode.REGISTRY_UNREACHABLE,
                f"Request to {url} failed: {exc!r}",
                recoverable=True,
            ) from exc

        if not response.is_success:
            raise RegistryError(
                ErrorCode.REGISTRY_HTTP_ERROR,
                f"HTTP {response.status_code} from {url}",
                recoverable=response.status_code >= 500,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise RegistryError(
                ErrorCode.INVALID_RESPONSE, f"Response from {url} is not JSON"
            ) from exc
