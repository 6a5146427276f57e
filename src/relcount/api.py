"""GitHub and Flathub API client functions."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypedDict

import requests

from .errors import FetchError, NotFoundError, TransportError
from .types import Asset, InstallStats, Release

logger = logging.getLogger("relcount")

GITHUB_API_BASE = "https://api.github.com"
FLATHUB_API_BASE = "https://flathub.org/api/v2"

# GitHub's maximum page size; a shorter page is the last one
PAGE_SIZE = 100

DEFAULT_TIMEOUT = 30.0

GITHUB_HEADERS = {"Accept": "application/vnd.github.v3+json"}

# Exceptions raised while decoding a payload into typed records
_PAYLOAD_ERRORS = (
    ValueError,  # Malformed JSON or bad field value
    KeyError,  # Missing expected keys
    TypeError,  # Unexpected data types
)


class FetchResult(TypedDict):
    """Outcome of a combined GitHub + Flathub fetch."""

    releases: list[Release]
    install_stats: InstallStats | None
    flathub_error: str | None


# -----------------------------------------------------------------------------
# Payload Validation
# -----------------------------------------------------------------------------


def _require_int(data: dict[str, Any], key: str) -> int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{key!r} must be an integer, got {value!r}")
    return value


def _require_str(data: dict[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"{key!r} must be a string, got {value!r}")
    return value


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None or isinstance(value, str):
        return value
    raise TypeError(f"{key!r} must be a string or null, got {value!r}")


def _optional_int(data: dict[str, Any], key: str) -> int:
    """Return an integer field, 0 when missing or null."""
    if data.get(key) is None:
        return 0
    return _require_int(data, key)


def _require_object(data: Any, what: str) -> None:
    if not isinstance(data, dict):
        raise TypeError(f"{what} must be an object, got {data!r}")


def parse_asset(data: dict[str, Any]) -> Asset:
    """Validate one release asset from the GitHub API."""
    _require_object(data, "asset")
    return {
        "id": _require_int(data, "id"),
        "name": _require_str(data, "name"),
        "download_count": _require_int(data, "download_count"),
        "size": _require_int(data, "size"),
        "created_at": _require_str(data, "created_at"),
        "updated_at": _require_str(data, "updated_at"),
        "browser_download_url": _require_str(data, "browser_download_url"),
    }


def parse_release(data: dict[str, Any]) -> Release:
    """Validate one release from the GitHub API.

    `name` and `published_at` may be null (drafts and unnamed releases).
    """
    _require_object(data, "release")
    assets = data.get("assets") or []
    if not isinstance(assets, list):
        raise TypeError("'assets' must be a list")
    return {
        "id": _require_int(data, "id"),
        "tag_name": _require_str(data, "tag_name"),
        "name": _optional_str(data, "name"),
        "published_at": _optional_str(data, "published_at"),
        "assets": [parse_asset(a) for a in assets],
    }


def parse_install_stats(data: dict[str, Any], app_id: str) -> InstallStats:
    """Validate a Flathub stats payload."""
    per_day = data.get("installs_per_day") or {}
    if not isinstance(per_day, dict):
        raise TypeError("'installs_per_day' must be an object")
    return {
        "app_id": _optional_str(data, "id") or app_id,
        "installs_total": _require_int(data, "installs_total"),
        "installs_last_month": _optional_int(data, "installs_last_month"),
        "installs_last_7_days": _optional_int(data, "installs_last_7_days"),
        "installs_per_day": {str(k): int(v) for k, v in per_day.items()},
    }


# -----------------------------------------------------------------------------
# Fetchers
# -----------------------------------------------------------------------------


def _get_json(
    session: requests.Session,
    url: str,
    origin: str,
    not_found: str,
    timeout: float,
    **kwargs: Any,
) -> Any:
    """GET a URL and decode its JSON body, mapping failures to FetchError."""
    try:
        response = session.get(url, timeout=timeout, **kwargs)
    except requests.RequestException as e:
        raise TransportError(f"{origin} API error: {e}", origin=origin) from e

    if response.status_code == 404:
        raise NotFoundError(not_found, origin=origin)
    if not response.ok:
        raise TransportError(
            f"{origin} API error: {response.status_code} {response.reason}",
            origin=origin,
            status=response.status_code,
            reason=response.reason,
        )

    try:
        return response.json()
    except ValueError as e:
        raise TransportError(
            f"{origin} API error: invalid JSON response", origin=origin
        ) from e


def fetch_releases(
    owner: str,
    repo: str,
    base_url: str = GITHUB_API_BASE,
    session: requests.Session | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> list[Release]:
    """Fetch every release of a repository, one page at a time.

    Raises:
        NotFoundError: The repository does not exist.
        TransportError: Any other failure, including malformed payloads.
    """
    if session is None:
        with requests.Session() as owned:
            return fetch_releases(owner, repo, base_url, owned, timeout)

    url = f"{base_url.rstrip('/')}/repos/{owner}/{repo}/releases"
    releases: list[Release] = []
    page = 1

    while True:
        logger.debug("Fetching releases page %d for %s/%s", page, owner, repo)
        payload = _get_json(
            session,
            url,
            "GitHub",
            f'Repository "{owner}/{repo}" not found',
            timeout,
            params={"page": page, "per_page": PAGE_SIZE},
            headers=GITHUB_HEADERS,
        )
        if not isinstance(payload, list):
            raise TransportError("GitHub API error: expected a list of releases")
        try:
            batch = [parse_release(item) for item in payload]
        except _PAYLOAD_ERRORS as e:
            raise TransportError(f"GitHub API error: malformed release data ({e})") from e

        releases.extend(batch)
        if len(batch) < PAGE_SIZE:
            break
        page += 1

    logger.debug("Fetched %d releases for %s/%s", len(releases), owner, repo)
    return releases


def fetch_install_stats(
    app_id: str,
    base_url: str = FLATHUB_API_BASE,
    session: requests.Session | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> InstallStats:
    """Fetch Flathub install counters for an application id.

    Raises:
        NotFoundError: Flathub does not know the application.
        TransportError: Any other failure, including malformed payloads.
    """
    if session is None:
        with requests.Session() as owned:
            return fetch_install_stats(app_id, base_url, owned, timeout)

    payload = _get_json(
        session,
        f"{base_url.rstrip('/')}/stats/{app_id}",
        "Flathub",
        f'Flathub app "{app_id}" not found',
        timeout,
    )
    if not isinstance(payload, dict):
        raise TransportError("Flathub API error: expected an object", origin="Flathub")
    try:
        return parse_install_stats(payload, app_id)
    except _PAYLOAD_ERRORS as e:
        raise TransportError(
            f"Flathub API error: malformed stats data ({e})", origin="Flathub"
        ) from e


def fetch_dashboard_data(
    owner: str,
    repo: str,
    app_id: str | None = None,
    github_base: str = GITHUB_API_BASE,
    flathub_base: str = FLATHUB_API_BASE,
    timeout: float = DEFAULT_TIMEOUT,
) -> FetchResult:
    """Fetch releases and Flathub stats in parallel.

    A GitHub failure is raised. A Flathub failure is logged and reported in
    the result's `flathub_error` so the release data is still usable.
    """
    with ThreadPoolExecutor(max_workers=2) as executor:
        releases_future = executor.submit(
            fetch_releases, owner, repo, github_base, None, timeout
        )
        stats_future = (
            executor.submit(fetch_install_stats, app_id, flathub_base, None, timeout)
            if app_id
            else None
        )

        install_stats: InstallStats | None = None
        flathub_error: str | None = None
        if stats_future is not None:
            try:
                install_stats = stats_future.result()
            except FetchError as e:
                logger.warning("Error fetching Flathub stats for %s: %s", app_id, e)
                flathub_error = str(e)

        releases = releases_future.result()

    return {
        "releases": releases,
        "install_stats": install_stats,
        "flathub_error": flathub_error,
    }
