"""Dashboard state and the views derived from it."""

from dataclasses import dataclass, field
from datetime import datetime

from .api import FetchResult
from .stats import (
    DEFAULT_EXCLUDED_EXTENSIONS,
    DEFAULT_TIME_RANGE,
    download_summary,
    extension_stats,
    filter_records,
    flatten_releases,
    os_stats,
    time_series,
    toggle_extension,
    top_releases,
    unique_extensions,
)
from .types import (
    AssetDownloadRecord,
    DownloadSummary,
    ExtensionStat,
    InstallStats,
    OSStat,
    Release,
    TimeBucket,
    TopRelease,
)


@dataclass
class DashboardState:
    """Everything the views are computed from.

    `generation` identifies the latest request; results from older
    requests are dropped by `apply_result`.
    """

    repo: str = ""
    releases: list[Release] = field(default_factory=list)
    install_stats: InstallStats | None = None
    excluded: frozenset[str] = DEFAULT_EXCLUDED_EXTENSIONS
    time_range: str = DEFAULT_TIME_RANGE
    github_error: str | None = None
    flathub_error: str | None = None
    generation: int = 0

    def begin_request(self, repo: str) -> int:
        """Start a new fetch for repo and return its token."""
        self.generation += 1
        self.repo = repo
        self.releases = []
        self.install_stats = None
        self.github_error = None
        self.flathub_error = None
        return self.generation

    def apply_result(self, token: int, result: FetchResult) -> bool:
        """Store a fetch result unless a newer request has started."""
        if token != self.generation:
            return False
        self.releases = result["releases"]
        self.install_stats = result["install_stats"]
        self.flathub_error = result["flathub_error"]
        return True

    def apply_error(self, token: int, message: str) -> bool:
        """Record a fatal GitHub error unless a newer request has started."""
        if token != self.generation:
            return False
        self.releases = []
        self.install_stats = None
        self.github_error = message
        return True

    def toggle(self, extension: str) -> None:
        self.excluded = toggle_extension(self.excluded, extension)


@dataclass(frozen=True)
class DashboardViews:
    records: list[AssetDownloadRecord]
    filtered: list[AssetDownloadRecord]
    extensions: list[str]
    extension_stats: list[ExtensionStat]
    os_stats: list[OSStat]
    time_series: list[TimeBucket]
    top_releases: list[TopRelease]
    summary: DownloadSummary


def build_views(state: DashboardState, now: datetime | None = None) -> DashboardViews:
    """Recompute every view from the current state."""
    records = flatten_releases(state.releases)
    filtered = filter_records(records, state.excluded)
    return DashboardViews(
        records=records,
        filtered=filtered,
        extensions=unique_extensions(records),
        extension_stats=extension_stats(filtered, state.install_stats),
        os_stats=os_stats(filtered, state.install_stats),
        time_series=time_series(filtered, state.time_range, now=now),
        top_releases=top_releases(state.releases, state.excluded),
        summary=download_summary(state.releases, filtered, state.install_stats),
    )
