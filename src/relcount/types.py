"""Type definitions for relcount using TypedDict for known structures."""

from typing import TypedDict


class Asset(TypedDict):
    """A downloadable file attached to a GitHub release."""

    id: int
    name: str
    download_count: int
    size: int
    created_at: str
    updated_at: str
    browser_download_url: str


class Release(TypedDict):
    """A published GitHub release with its assets."""

    id: int
    tag_name: str
    name: str | None
    published_at: str | None
    assets: list[Asset]


class AssetDownloadRecord(TypedDict):
    """One asset flattened out of its release, with a computed extension."""

    name: str
    download_count: int
    extension: str
    published_date: str | None
    release_name: str


class InstallStats(TypedDict):
    """Flathub install counters for an application."""

    app_id: str
    installs_total: int
    installs_last_month: int
    installs_last_7_days: int
    installs_per_day: dict[str, int]


class ExtensionStat(TypedDict):
    """Downloads grouped by file extension."""

    extension: str
    count: int
    total_downloads: int


class OSStat(TypedDict):
    """Downloads attributed to an operating system."""

    os: str
    label: str
    extensions: list[str]
    total_downloads: int
    flathub_downloads: int | None


class TimeBucket(TypedDict):
    """Downloads of releases published within one day or month."""

    label: str
    total_downloads: int


class TopRelease(TypedDict):
    """A release ranked by its non-excluded downloads."""

    id: int
    name: str
    tag_name: str
    published_at: str | None
    total_downloads: int
    assets: list[Asset]


class DownloadSummary(TypedDict):
    """Headline totals shown above the charts."""

    total_downloads: int
    total_assets: int
    total_releases: int
    flathub_downloads: int
    grand_total: int
