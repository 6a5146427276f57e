"""Shared fixtures for relcount tests."""

from typing import Any

import pytest


def build_asset(name: str, downloads: int, asset_id: int = 1) -> dict[str, Any]:
    return {
        "id": asset_id,
        "name": name,
        "download_count": downloads,
        "size": 1024,
        "created_at": "2024-01-01T00:00:00Z",
        "updated_at": "2024-01-01T00:00:00Z",
        "browser_download_url": f"https://github.com/o/r/releases/download/v1/{name}",
    }


def build_release(
    release_id: int,
    tag: str,
    published_at: str | None,
    assets: list[dict[str, Any]],
    name: str | None = None,
) -> dict[str, Any]:
    return {
        "id": release_id,
        "tag_name": tag,
        "name": name,
        "published_at": published_at,
        "assets": assets,
    }


@pytest.fixture
def make_asset():
    """Factory for GitHub asset payloads."""
    return build_asset


@pytest.fixture
def make_release():
    """Factory for GitHub release payloads."""
    return build_release


@pytest.fixture
def sample_releases():
    """Two releases: A with an installer and a yml, B with a dmg."""
    return [
        build_release(
            1,
            "v1.0.0",
            "2024-01-01T10:00:00Z",
            [build_asset("app.exe", 10, 11), build_asset("app.yml", 5, 12)],
            name="Release A",
        ),
        build_release(
            2,
            "v2.0.0",
            "2024-06-01T10:00:00Z",
            [build_asset("app.dmg", 20, 21)],
            name="Release B",
        ),
    ]


@pytest.fixture
def install_stats():
    """Flathub stats payload after validation."""
    return {
        "app_id": "com.example.App",
        "installs_total": 100,
        "installs_last_month": 30,
        "installs_last_7_days": 7,
        "installs_per_day": {"2024-06-01": 3},
    }
