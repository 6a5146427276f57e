"""Tests for HTML dashboard generation."""

from datetime import datetime, timezone

from relcount.reports import (
    generate_html_report,
    make_svg_line_chart,
    make_svg_pie_chart,
    render_dashboard,
)
from relcount.state import DashboardState, build_views

NOW = datetime(2024, 7, 1, tzinfo=timezone.utc)


class TestCharts:
    """Tests for the SVG chart helpers."""

    def test_pie_chart_legend(self):
        """Legend entries include values and percentages."""
        svg = make_svg_pie_chart([(".dmg", 30), (".exe", 10)], "c")
        assert svg.startswith('<svg id="c"')
        assert ".dmg (30, 75.0%)" in svg
        assert svg.count("<path") == 2

    def test_pie_chart_single_slice(self):
        """A single slice is drawn as a full circle."""
        svg = make_svg_pie_chart([(".exe", 10)], "c")
        assert "<circle" in svg
        assert "<path" not in svg

    def test_pie_chart_empty(self):
        """No data renders a placeholder."""
        assert "No data" in make_svg_pie_chart([], "c")
        assert "No data" in make_svg_pie_chart([("x", 0)], "c")

    def test_pie_chart_groups_small_slices(self):
        """More than ten slices are grouped into Other."""
        data = [(f".e{i}", 20 - i) for i in range(15)]
        svg = make_svg_pie_chart(data, "c")
        assert "Other" in svg
        assert ".e14" not in svg

    def test_line_chart_points(self):
        """Every bucket is drawn as a point."""
        svg = make_svg_line_chart(["Jan", "Feb", "Mar"], [1, 0, 5], "t")
        assert svg.count("<circle") == 3
        assert "Mar: 5 downloads" in svg

    def test_line_chart_escapes_labels(self):
        """Labels are HTML-escaped."""
        svg = make_svg_line_chart(["<b>"], [1], "t")
        assert "&lt;b&gt;" in svg


class TestRenderDashboard:
    """Tests for the full dashboard."""

    def test_contains_sections(self, sample_releases, install_stats):
        """The dashboard shows every view for fetched data."""
        state = DashboardState(
            repo="owner/repo", releases=sample_releases, install_stats=install_stats
        )
        html = render_dashboard(state, build_views(state, now=NOW))

        assert "<!DOCTYPE html>" in html
        assert "owner/repo" in html
        assert 'id="extension-chart"' in html
        assert 'id="time-chart"' in html
        assert "Downloads by Operating System" in html
        assert "+100 from Flathub" in html
        assert "Top 2 Releases" in html
        assert "Jun 01, 2024" in html
        assert 'class="chip excluded">.yml' in html

    def test_error_banners(self):
        """GitHub and Flathub errors are labelled by origin."""
        state = DashboardState(
            repo="a/b",
            github_error='Repository "a/b" not found',
            flathub_error='Flathub app "<oops>" not found',
        )
        html = render_dashboard(state, build_views(state, now=NOW))

        assert "GitHub Error:" in html
        assert "Repository &quot;a/b&quot; not found" in html
        assert "Flathub Error:" in html
        assert "<strong>Flathub Error:</strong> Flathub app &quot;&lt;oops&gt;&quot; not found" in html
        assert "Top " not in html

    def test_escapes_release_names(self, make_release, make_asset):
        """Release names are escaped."""
        releases = [make_release(1, "v1", None, [make_asset("a.exe", 1)], name="<script>")]
        state = DashboardState(repo="a/b", releases=releases)
        html = render_dashboard(state, build_views(state, now=NOW))

        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_generate_writes_file(self, tmp_path, sample_releases):
        """generate_html_report writes the dashboard to disk."""
        state = DashboardState(repo="owner/repo", releases=sample_releases)
        output = tmp_path / "report.html"

        generate_html_report(state, build_views(state, now=NOW), str(output))

        content = output.read_text()
        assert "owner/repo" in content
        assert "Release B" in content
