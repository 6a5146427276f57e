"""Tests for export formats."""

import csv
import io
import json

import pytest

from relcount.export import export_csv, export_json, export_markdown
from relcount.stats import extension_stats, filter_records, flatten_releases, top_releases


@pytest.fixture
def views(sample_releases):
    excluded = {".yml", ".yaml"}
    records = filter_records(flatten_releases(sample_releases), excluded)
    return top_releases(sample_releases, excluded), extension_stats(records)


class TestExport:
    """Tests for CSV, JSON and Markdown export."""

    def test_csv(self, views):
        """CSV should contain a releases table and an extensions table."""
        rows = list(csv.reader(io.StringIO(export_csv(*views))))
        assert rows[0] == ["rank", "release", "tag", "published_at", "downloads"]
        assert rows[1] == ["1", "Release B", "v2.0.0", "2024-06-01T10:00:00Z", "20"]
        assert ["extension", "files", "downloads"] in rows
        assert [".exe", "1", "10"] in rows

    def test_json(self, views):
        """JSON should include per-release assets."""
        data = json.loads(export_json("o/r", *views))
        assert data["repository"] == "o/r"
        assert data["top_releases"][0]["name"] == "Release B"
        assert data["top_releases"][1]["assets"] == [{"name": "app.exe", "downloads": 10}]
        assert data["extensions"][0] == {"extension": ".dmg", "files": 1, "downloads": 20}

    def test_markdown(self, views):
        """Markdown should render both tables."""
        output = export_markdown(*views)
        assert "| 1 | Release B | v2.0.0 | 20 |" in output
        assert "| .dmg | 1 | 20 |" in output

    def test_markdown_escapes_pipes(self, make_release, make_asset):
        """A pipe in a release name or tag must not split the table cell."""
        releases = [make_release(1, "v1|rc", None, [make_asset("a.exe", 3)], name="a|b")]
        output = export_markdown(top_releases(releases, set()), [])
        assert "| 1 | a\\|b | v1\\|rc | 3 |" in output
