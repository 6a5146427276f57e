"""HTML dashboard generation with SVG charts."""

import html
import logging
import math
from datetime import datetime

from .stats import TIME_RANGES, os_percentages, release_assets_by_downloads
from .state import DashboardState, DashboardViews
from .types import ExtensionStat, OSStat, TimeBucket, TopRelease

logger = logging.getLogger("relcount")

# -----------------------------------------------------------------------------
# Theme and Chart Constants
# -----------------------------------------------------------------------------

THEME_PRIMARY_COLOR = "#3b82f6"

DEFAULT_LINE_CHART_WIDTH = 700
DEFAULT_LINE_CHART_HEIGHT = 260
DEFAULT_PIE_CHART_SIZE = 240

# Maximum slices before grouping into "Other"
PIE_CHART_MAX_ITEMS = 10

OS_CARD_COLORS = {
    "windows": "#eff6ff",
    "macos": "#f9fafb",
    "linux": "#fff7ed",
    "other": "#faf5ff",
}


# -----------------------------------------------------------------------------
# CSS Styles
# -----------------------------------------------------------------------------


def _get_styles() -> str:
    """Return CSS styles for the dashboard."""
    return f"""
        body {{
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            max-width: 1200px;
            margin: 0 auto;
            padding: 20px;
            background: #f3f4f6;
        }}
        h1, h2, h3 {{
            color: #1f2937;
        }}
        .chart-container {{
            background: white;
            border-radius: 8px;
            padding: 20px;
            margin: 20px 0;
            box-shadow: 0 2px 4px rgba(0,0,0,0.1);
            overflow-x: auto;
        }}
        .charts-row {{
            display: grid;
            grid-template-columns: repeat(auto-fit, minmax(420px, 1fr));
            gap: 20px;
        }}
        table {{
            width: 100%;
            border-collapse: collapse;
            background: white;
        }}
        th, td {{
            padding: 10px;
            text-align: left;
            border-bottom: 1px solid #eee;
        }}
        th {{
            background: {THEME_PRIMARY_COLOR};
            color: white;
        }}
        .number {{
            text-align: right;
            font-family: monospace;
        }}
        .stats-grid {{
            display: grid;
            grid-template-columns: repeat(auto-fit, minmax(160px, 1fr));
            gap: 20px;
            margin: 20px 0;
        }}
        .stat-card {{
            background: white;
            border-radius: 8px;
            padding: 20px;
            box-shadow: 0 2px 4px rgba(0,0,0,0.1);
            text-align: center;
        }}
        .stat-value {{
            font-size: 24px;
            font-weight: bold;
            color: {THEME_PRIMARY_COLOR};
        }}
        .stat-label, .stat-note {{
            font-size: 12px;
            color: #666;
            margin-top: 5px;
        }}
        .chip {{
            display: inline-block;
            padding: 4px 10px;
            margin: 3px;
            border-radius: 999px;
            font-size: 13px;
            border: 1px solid #d1d5db;
            background: #f3f4f6;
        }}
        .chip.excluded {{
            background: #fee2e2;
            border-color: #fca5a5;
            color: #991b1b;
            text-decoration: line-through;
        }}
        .error-banner {{
            padding: 12px 16px;
            border-radius: 8px;
            margin: 12px 0;
            background: #fee2e2;
            border: 1px solid #fca5a5;
            color: #b91c1c;
        }}
        .error-banner.warning {{
            background: #fef9c3;
            border-color: #fde047;
            color: #a16207;
        }}
        details summary {{
            cursor: pointer;
        }}
        .generated {{
            color: #666;
            font-size: 0.9em;
            margin-top: 20px;
        }}
    """


def _render_html_document(title: str, body_content: str) -> str:
    """Render a complete HTML document."""
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{html.escape(title)}</title>
    <style>{_get_styles()}</style>
</head>
<body>
{body_content}
    <p class="generated">Generated on {timestamp}</p>
</body>
</html>
"""


# -----------------------------------------------------------------------------
# SVG Chart Components
# -----------------------------------------------------------------------------


def make_svg_pie_chart(
    data: list[tuple[str, int]], chart_id: str, size: int = DEFAULT_PIE_CHART_SIZE
) -> str:
    """Generate an SVG pie chart with a legend showing percentages."""
    if not data:
        return "<p>No data to display</p>"

    total = sum(v for _, v in data)
    if total == 0:
        return "<p>No data to display</p>"

    if len(data) > PIE_CHART_MAX_ITEMS:
        top_data = data[: PIE_CHART_MAX_ITEMS - 1]
        other_total = sum(v for _, v in data[PIE_CHART_MAX_ITEMS - 1 :])
        if other_total > 0:
            top_data.append(("Other", other_total))
        data = top_data

    cx, cy = size // 2, size // 2
    radius = size // 2 - 10
    legend_width = 220
    total_width = size + legend_width

    svg_parts = [
        f'<svg id="{chart_id}" viewBox="0 0 {total_width} {size}" '
        f'style="width:100%;max-width:{total_width}px;height:auto;font-family:system-ui,sans-serif;font-size:11px;">'
    ]

    start_angle: float = 0
    for i, (name, value) in enumerate(data):
        if value == 0:
            continue
        pct = value / total
        hue = (i * 360 // len(data)) % 360
        color = f"hsl({hue}, 70%, 50%)"

        if pct >= 1:
            # A single slice cannot be drawn as an arc
            svg_parts.append(f'<circle cx="{cx}" cy="{cy}" r="{radius}" fill="{color}"/>')
        else:
            end_angle = start_angle + pct * 360
            start_rad = math.radians(start_angle - 90)
            end_rad = math.radians(end_angle - 90)
            x1 = cx + radius * math.cos(start_rad)
            y1 = cy + radius * math.sin(start_rad)
            x2 = cx + radius * math.cos(end_rad)
            y2 = cy + radius * math.sin(end_rad)
            large_arc = 1 if pct > 0.5 else 0
            path = f"M {cx} {cy} L {x1:.1f} {y1:.1f} A {radius} {radius} 0 {large_arc} 1 {x2:.1f} {y2:.1f} Z"
            svg_parts.append(f'<path d="{path}" fill="{color}"/>')
            start_angle = end_angle

        ly = 20 + i * 22
        svg_parts.append(
            f'<rect x="{size + 10}" y="{ly - 9}" width="12" height="12" fill="{color}"/>'
        )
        svg_parts.append(
            f'<text x="{size + 28}" y="{ly}" fill="#333">'
            f"{html.escape(name)} ({value:,}, {pct * 100:.1f}%)</text>"
        )

    svg_parts.append("</svg>")
    return "\n".join(svg_parts)


def make_svg_line_chart(
    labels: list[str],
    values: list[int],
    chart_id: str,
    chart_width: int = DEFAULT_LINE_CHART_WIDTH,
    chart_height: int = DEFAULT_LINE_CHART_HEIGHT,
    color: str = THEME_PRIMARY_COLOR,
) -> str:
    """Generate a filled SVG line chart for one series.

    Every point is drawn; x-axis labels are thinned to at most eight.
    """
    if not labels:
        return "<p>No data to display</p>"

    margin = {"top": 20, "right": 20, "bottom": 40, "left": 70}
    plot_width = chart_width - margin["left"] - margin["right"]
    plot_height = chart_height - margin["top"] - margin["bottom"]
    max_val = max(values) or 1
    baseline = margin["top"] + plot_height

    def x_at(idx: int) -> float:
        if len(values) == 1:
            return margin["left"] + plot_width / 2
        return margin["left"] + idx / (len(values) - 1) * plot_width

    svg_parts = [
        f'<svg id="{chart_id}" viewBox="0 0 {chart_width} {chart_height}" '
        f'style="width:100%;max-width:{chart_width}px;height:auto;font-family:system-ui,sans-serif;font-size:11px;">'
    ]

    for i in range(5):
        y_val = max_val * (4 - i) / 4
        y_pos = margin["top"] + (i * plot_height / 4)
        svg_parts.append(
            f'<text x="{margin["left"] - 8}" y="{y_pos + 4}" '
            f'text-anchor="end" fill="#666">{int(y_val):,}</text>'
        )
        svg_parts.append(
            f'<line x1="{margin["left"]}" y1="{y_pos}" '
            f'x2="{chart_width - margin["right"]}" y2="{y_pos}" '
            f'stroke="#eee" stroke-width="1"/>'
        )

    step = max(1, math.ceil(len(labels) / 8))
    for idx in range(0, len(labels), step):
        svg_parts.append(
            f'<text x="{x_at(idx):.1f}" y="{chart_height - 12}" '
            f'text-anchor="middle" fill="#666">{html.escape(labels[idx])}</text>'
        )

    points = [
        f"{x_at(i):.1f},{baseline - (val / max_val) * plot_height:.1f}"
        for i, val in enumerate(values)
    ]
    area = [f"{x_at(0):.1f},{baseline}"] + points + [f"{x_at(len(values) - 1):.1f},{baseline}"]
    svg_parts.append(
        f'<polygon points="{" ".join(area)}" fill="{color}" fill-opacity="0.1"/>'
    )
    svg_parts.append(
        f'<polyline points="{" ".join(points)}" '
        f'fill="none" stroke="{color}" stroke-width="2"/>'
    )
    for point, label, val in zip(points, labels, values):
        x, y = point.split(",")
        svg_parts.append(
            f'<circle cx="{x}" cy="{y}" r="3" fill="{color}">'
            f"<title>{html.escape(label)}: {val:,} downloads</title></circle>"
        )

    svg_parts.append("</svg>")
    return "\n".join(svg_parts)


# -----------------------------------------------------------------------------
# Dashboard Sections
# -----------------------------------------------------------------------------


def _render_errors(state: DashboardState) -> str:
    parts = []
    if state.github_error:
        parts.append(
            f'<div class="error-banner"><strong>GitHub Error:</strong> '
            f"{html.escape(state.github_error)}</div>"
        )
    if state.flathub_error:
        parts.append(
            f'<div class="error-banner warning"><strong>Flathub Error:</strong> '
            f"{html.escape(state.flathub_error)}</div>"
        )
    return "\n".join(parts)


def _render_summary(views: DashboardViews, repo: str) -> str:
    summary = views.summary
    cards = [
        (f"{summary['total_downloads']:,}", "GitHub Downloads"),
        (f"{summary['total_assets']:,}", "Assets"),
        (f"{summary['total_releases']:,}", "Releases"),
    ]
    if summary["flathub_downloads"]:
        cards.append((f"{summary['flathub_downloads']:,}", "Flathub Installs"))
        cards.append((f"{summary['grand_total']:,}", "Combined Total"))

    card_html = "\n".join(
        f'        <div class="stat-card"><div class="stat-value">{value}</div>'
        f'<div class="stat-label">{label}</div></div>'
        for value, label in cards
    )
    return f"""    <h2>{html.escape(repo)}</h2>
    <div class="stats-grid">
{card_html}
    </div>
"""


def _render_extension_filter(extensions: list[str], excluded: frozenset[str]) -> str:
    if not extensions:
        return "<p>No file extensions found.</p>"
    chips = " ".join(
        f'<span class="chip{" excluded" if ext in excluded else ""}">{html.escape(ext)}</span>'
        for ext in extensions
    )
    return f"""    <div class="chart-container">
        <h2>File Extensions</h2>
        <p>Struck-through extensions are excluded from every statistic.</p>
        {chips}
    </div>
"""


def _render_extension_chart(stats: list[ExtensionStat]) -> str:
    data = [(s["extension"], s["total_downloads"]) for s in stats]
    return f"""        <div class="chart-container">
            <h2>Downloads by File Extension</h2>
            {make_svg_pie_chart(data, "extension-chart")}
        </div>
"""


def _render_time_chart(buckets: list[TimeBucket], time_range: str) -> str:
    labels = [b["label"] for b in buckets]
    values = [b["total_downloads"] for b in buckets]
    return f"""        <div class="chart-container">
            <h2>Downloads Over Time ({TIME_RANGES[time_range]})</h2>
            <p>{sum(values):,} downloads from releases published in this period</p>
            {make_svg_line_chart(labels, values, "time-chart")}
        </div>
"""


def _render_os_cards(stats: list[OSStat]) -> str:
    percentages = os_percentages(stats)
    cards = []
    for stat in stats:
        extensions = ", ".join(stat["extensions"])
        flathub = stat["flathub_downloads"]
        if flathub is not None:
            extensions = f"{extensions}, Flathub"
        note = (
            f'<div class="stat-note">+{flathub:,} from Flathub</div>'
            if flathub is not None
            else ""
        )
        cards.append(
            f'        <div class="stat-card" style="background:{OS_CARD_COLORS[stat["os"]]}">'
            f'<div class="stat-label">{stat["label"]}</div>'
            f'<div class="stat-value">{stat["total_downloads"]:,}</div>'
            f'<div class="stat-note">{percentages[stat["os"]]:.1f}%</div>'
            f'<div class="stat-note">{html.escape(extensions)}</div>{note}</div>'
        )
    return f"""    <div class="chart-container">
        <h2>Downloads by Operating System</h2>
        <div class="stats-grid">
{chr(10).join(cards)}
        </div>
    </div>
"""


def _format_date(value: str | None) -> str:
    if not value:
        return ""
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime("%b %d, %Y")
    except ValueError:
        return html.escape(value)


def _render_top_releases(releases: list[TopRelease]) -> str:
    if not releases:
        return ""

    rows = []
    for i, release in enumerate(releases, 1):
        name = html.escape(release["name"])
        if release["name"] != release["tag_name"]:
            name += f' <small>({html.escape(release["tag_name"])})</small>'
        files = "".join(
            f"<li>{html.escape(a['name'])}: {a['download_count']:,}</li>"
            for a in release_assets_by_downloads(release)
        )
        breakdown = (
            f"<details><summary>{len(release['assets'])} files</summary><ul>{files}</ul></details>"
            if files
            else ""
        )
        rows.append(
            f"""            <tr>
                <td>{i}</td>
                <td>{name}{breakdown}</td>
                <td>{_format_date(release["published_at"])}</td>
                <td class="number">{release["total_downloads"]:,}</td>
            </tr>"""
        )

    return f"""    <div class="chart-container">
        <h2>Top {len(releases)} Releases</h2>
        <table>
            <thead>
                <tr>
                    <th>#</th>
                    <th>Release</th>
                    <th>Published</th>
                    <th class="number">Downloads</th>
                </tr>
            </thead>
            <tbody>
{chr(10).join(rows)}
            </tbody>
        </table>
    </div>
"""


# -----------------------------------------------------------------------------
# Public Report Generation Functions
# -----------------------------------------------------------------------------


def render_dashboard(state: DashboardState, views: DashboardViews) -> str:
    """Render the complete dashboard as an HTML string."""
    body = ["    <h1>GitHub Releases Download Counter</h1>", _render_errors(state)]

    if state.releases:
        body.extend(
            [
                _render_summary(views, state.repo),
                _render_extension_filter(views.extensions, state.excluded),
                '    <div class="charts-row">',
                _render_extension_chart(views.extension_stats),
                _render_time_chart(views.time_series, state.time_range),
                "    </div>",
                _render_os_cards(views.os_stats),
                _render_top_releases(views.top_releases),
            ]
        )
    elif not state.github_error:
        body.append(f"    <p>No releases found for {html.escape(state.repo)}.</p>")

    title = f"{state.repo} - Download Statistics" if state.repo else "Download Statistics"
    return _render_html_document(title, "\n".join(body))


def generate_html_report(
    state: DashboardState, views: DashboardViews, output_file: str
) -> None:
    """Write a self-contained HTML dashboard with inline SVG charts."""
    with open(output_file, "w", encoding="utf-8") as f:
        f.write(render_dashboard(state, views))
    logger.info("Report generated: %s", output_file)
