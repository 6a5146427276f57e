"""Aggregation of release download counts into dashboard views.

Every function here is pure: it takes fetched releases (or records derived
from them) plus the user's settings and returns a freshly computed view.
"""

import re
from collections.abc import Iterable
from datetime import date, datetime, timedelta, timezone

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

from .types import (
    Asset,
    AssetDownloadRecord,
    DownloadSummary,
    ExtensionStat,
    InstallStats,
    OSStat,
    Release,
    TimeBucket,
    TopRelease,
)
from .utils import percentage

# -----------------------------------------------------------------------------
# Extension Constants
# -----------------------------------------------------------------------------

NO_EXTENSION = "no extension"

# Key under which Flathub installs are shown next to real file extensions
FLATPAK_EXTENSION = ".flatpak"

DEFAULT_EXCLUDED_EXTENSIONS = frozenset({".yml", ".yaml"})

_EXTENSION_PATTERN = re.compile(r"\.([^.]+)$")

# -----------------------------------------------------------------------------
# Operating System Constants
# -----------------------------------------------------------------------------

OS_EXTENSIONS: dict[str, list[str]] = {
    "windows": [".exe", ".msi"],
    "macos": [".dmg", ".pkg"],
    "linux": [".rpm", ".deb", ".pacman", ".appimage", ".xz"],
}

OS_LABELS = {
    "windows": "Windows",
    "macos": "macOS",
    "linux": "Linux",
    "other": "Other",
}

# -----------------------------------------------------------------------------
# Time Range Constants
# -----------------------------------------------------------------------------

TIME_RANGES = {
    "day": "Last 24 Hours",
    "week": "Last Week",
    "month": "Last Month",
    "365days": "Last 365 Days",
    "alltime": "All Time",
}

DEFAULT_TIME_RANGE = "month"

_MONTHLY_RANGES = ("365days", "alltime")

TOP_RELEASES_LIMIT = 10


# -----------------------------------------------------------------------------
# Flattening, Classification and Filtering
# -----------------------------------------------------------------------------


def classify_extension(filename: str) -> str:
    """Return the lower-cased, dot-prefixed suffix of a filename.

    Only the final segment counts ("archive.tar.gz" is ".gz"). Names without
    a suffix, including dotfiles such as ".gitignore", map to NO_EXTENSION.
    """
    match = _EXTENSION_PATTERN.search(filename)
    # ".gitignore" matches the pattern but has nothing before the dot
    if not match or match.start() == 0:
        return NO_EXTENSION
    return f".{match.group(1).lower()}"


def release_display_name(release: Release) -> str:
    """Return the release name, falling back to its tag."""
    return release["name"] or release["tag_name"]


def flatten_releases(releases: Iterable[Release]) -> list[AssetDownloadRecord]:
    """Turn nested releases into one record per asset, keeping order."""
    records: list[AssetDownloadRecord] = []
    for release in releases:
        release_name = release_display_name(release)
        for asset in release["assets"]:
            records.append(
                {
                    "name": asset["name"],
                    "download_count": asset["download_count"],
                    "extension": classify_extension(asset["name"]),
                    "published_date": release["published_at"],
                    "release_name": release_name,
                }
            )
    return records


def unique_extensions(records: Iterable[AssetDownloadRecord]) -> list[str]:
    """Return the sorted distinct extensions, ignoring any exclusions."""
    return sorted({r["extension"] for r in records})


def filter_records(
    records: Iterable[AssetDownloadRecord], excluded: Iterable[str]
) -> list[AssetDownloadRecord]:
    """Drop records whose extension is excluded, preserving order."""
    skip = frozenset(excluded)
    return [r for r in records if r["extension"] not in skip]


def toggle_extension(excluded: Iterable[str], extension: str) -> frozenset[str]:
    """Return a new exclusion set with extension added or removed."""
    current = set(excluded)
    if extension in current:
        current.discard(extension)
    else:
        current.add(extension)
    return frozenset(current)


# -----------------------------------------------------------------------------
# Aggregators
# -----------------------------------------------------------------------------


def extension_stats(
    records: Iterable[AssetDownloadRecord],
    install_stats: InstallStats | None = None,
) -> list[ExtensionStat]:
    """Group downloads by extension, largest total first.

    Flathub installs are folded in as a FLATPAK_EXTENSION entry when there
    are any.
    """
    totals: dict[str, ExtensionStat] = {}

    def add(extension: str, downloads: int) -> None:
        stat = totals.setdefault(
            extension, {"extension": extension, "count": 0, "total_downloads": 0}
        )
        stat["count"] += 1
        stat["total_downloads"] += downloads

    for record in records:
        add(record["extension"], record["download_count"])

    if install_stats and install_stats["installs_total"] > 0:
        add(FLATPAK_EXTENSION, install_stats["installs_total"])

    # sorted() is stable, ties keep first-seen order
    return sorted(totals.values(), key=lambda s: s["total_downloads"], reverse=True)


def os_stats(
    records: Iterable[AssetDownloadRecord],
    install_stats: InstallStats | None = None,
) -> list[OSStat]:
    """Attribute downloads to Windows, macOS, Linux or Other.

    Anything not in OS_EXTENSIONS counts once under "other". Flathub
    installs are added to Linux.
    """
    record_list = list(records)
    known: set[str] = set()
    result: list[OSStat] = []

    for os_name, extensions in OS_EXTENSIONS.items():
        known.update(extensions)
        total = sum(
            r["download_count"]
            for r in record_list
            if r["extension"].lower() in extensions
        )
        flathub: int | None = None
        if os_name == "linux" and install_stats is not None:
            flathub = install_stats["installs_total"]
            total += flathub
        result.append(
            {
                "os": os_name,
                "label": OS_LABELS[os_name],
                "extensions": list(extensions),
                "total_downloads": total,
                "flathub_downloads": flathub,
            }
        )

    result.append(
        {
            "os": "other",
            "label": OS_LABELS["other"],
            "extensions": [],
            "total_downloads": sum(
                r["download_count"]
                for r in record_list
                if r["extension"].lower() not in known
            ),
            "flathub_downloads": None,
        }
    )
    return result


def os_percentages(stats: list[OSStat]) -> dict[str, float]:
    """Share of the grand total (Flathub included) per OS, in percent."""
    grand_total = sum(s["total_downloads"] for s in stats)
    return {s["os"]: percentage(s["total_downloads"], grand_total) for s in stats}


def _parse_date(value: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp as UTC, None if unusable."""
    if not value:
        return None
    try:
        parsed = isoparse(value)
    except (ValueError, OverflowError):
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _range_start(
    time_range: str, now: datetime, dates: list[datetime]
) -> datetime:
    if time_range == "day":
        return now - timedelta(days=1)
    if time_range == "week":
        return now - timedelta(weeks=1)
    if time_range == "month":
        return now - relativedelta(months=1)
    if time_range == "365days":
        return now - timedelta(days=365)
    if dates:
        return min(min(dates), now)
    return now - timedelta(days=365)


def _each_day(start: date, end: date) -> list[date]:
    days = []
    current = start
    while current <= end:
        days.append(current)
        current += timedelta(days=1)
    return days


def _each_month(start: date, end: date) -> list[date]:
    months = []
    current = start.replace(day=1)
    while current <= end:
        months.append(current)
        current += relativedelta(months=1)
    return months


def time_series(
    records: Iterable[AssetDownloadRecord],
    time_range: str = DEFAULT_TIME_RANGE,
    now: datetime | None = None,
) -> list[TimeBucket]:
    """Bucket downloads by the publish date of their release.

    Daily buckets for "day", "week" and "month"; monthly buckets for
    "365days" and "alltime". Every bucket between the range start and now
    is present, zero-filled. Records with unparseable dates are skipped.

    Args:
        records: Filtered asset records.
        time_range: One of TIME_RANGES.
        now: Reference time, defaults to the current UTC time.

    Returns:
        Chronologically ordered list of buckets.
    """
    if time_range not in TIME_RANGES:
        raise ValueError(f"Unknown time range: {time_range}")

    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    else:
        now = now.astimezone(timezone.utc)

    dated = [
        (parsed, r["download_count"])
        for r in records
        if (parsed := _parse_date(r["published_date"])) is not None
    ]
    start = _range_start(time_range, now, [d for d, _ in dated])

    if time_range != "alltime":
        dated = [(d, count) for d, count in dated if d >= start]

    monthly = time_range in _MONTHLY_RANGES
    key_format = "%Y-%m" if monthly else "%Y-%m-%d"
    label_format = "%b %Y" if monthly else "%b %d"

    downloads_by_key: dict[str, int] = {}
    for published, count in dated:
        key = published.strftime(key_format)
        downloads_by_key[key] = downloads_by_key.get(key, 0) + count

    if monthly:
        buckets = _each_month(start.date(), now.date())
    else:
        buckets = _each_day(start.date(), now.date())

    return [
        {
            "label": bucket.strftime(label_format),
            "total_downloads": downloads_by_key.get(bucket.strftime(key_format), 0),
        }
        for bucket in buckets
    ]


def top_releases(
    releases: Iterable[Release],
    excluded: Iterable[str],
    limit: int = TOP_RELEASES_LIMIT,
) -> list[TopRelease]:
    """Rank releases by the downloads of their non-excluded assets.

    Ties keep the order the releases were fetched in.
    """
    skip = frozenset(excluded)
    ranked: list[TopRelease] = []
    for release in releases:
        assets = [
            a for a in release["assets"] if classify_extension(a["name"]) not in skip
        ]
        ranked.append(
            {
                "id": release["id"],
                "name": release_display_name(release),
                "tag_name": release["tag_name"],
                "published_at": release["published_at"],
                "total_downloads": sum(a["download_count"] for a in assets),
                "assets": assets,
            }
        )
    ranked.sort(key=lambda r: r["total_downloads"], reverse=True)
    return ranked[:limit]


def release_assets_by_downloads(release: TopRelease) -> list[Asset]:
    """Per-file breakdown of a ranked release, most downloaded first."""
    return sorted(release["assets"], key=lambda a: a["download_count"], reverse=True)


def download_summary(
    releases: list[Release],
    records: list[AssetDownloadRecord],
    install_stats: InstallStats | None = None,
) -> DownloadSummary:
    """Headline totals over the filtered records plus Flathub installs."""
    total = sum(r["download_count"] for r in records)
    flathub = install_stats["installs_total"] if install_stats else 0
    return {
        "total_downloads": total,
        "total_assets": len(records),
        "total_releases": len(releases),
        "flathub_downloads": flathub,
        "grand_total": total + flathub,
    }
