"""Export functions for various formats."""

import csv
import io
import json
from datetime import datetime

from .types import ExtensionStat, TopRelease


def export_csv(
    releases: list[TopRelease],
    extensions: list[ExtensionStat],
    output: io.StringIO | None = None,
) -> str:
    """Export top releases and extension totals as two CSV tables."""
    if output is None:
        output = io.StringIO()

    writer = csv.writer(output)
    writer.writerow(["rank", "release", "tag", "published_at", "downloads"])
    for i, r in enumerate(releases, 1):
        writer.writerow(
            [i, r["name"], r["tag_name"], r["published_at"] or "", r["total_downloads"]]
        )

    writer.writerow([])
    writer.writerow(["extension", "files", "downloads"])
    for s in extensions:
        writer.writerow([s["extension"], s["count"], s["total_downloads"]])

    return output.getvalue()


def export_json(
    repo: str, releases: list[TopRelease], extensions: list[ExtensionStat]
) -> str:
    """Export top releases and extension totals as JSON."""
    export_data = {
        "generated": datetime.now().isoformat(),
        "repository": repo,
        "top_releases": [
            {
                "rank": i,
                "name": r["name"],
                "tag": r["tag_name"],
                "published_at": r["published_at"],
                "downloads": r["total_downloads"],
                "assets": [
                    {"name": a["name"], "downloads": a["download_count"]}
                    for a in r["assets"]
                ],
            }
            for i, r in enumerate(releases, 1)
        ],
        "extensions": [
            {
                "extension": s["extension"],
                "files": s["count"],
                "downloads": s["total_downloads"],
            }
            for s in extensions
        ],
    }
    return json.dumps(export_data, indent=2)


def _markdown_cell(value: str) -> str:
    return value.replace("|", "\\|")


def export_markdown(releases: list[TopRelease], extensions: list[ExtensionStat]) -> str:
    """Export top releases and extension totals as Markdown tables."""
    lines = [
        "| Rank | Release | Tag | Downloads |",
        "|------|---------|-----|----------:|",
    ]
    for i, r in enumerate(releases, 1):
        name = _markdown_cell(r["name"])
        tag = _markdown_cell(r["tag_name"])
        lines.append(f"| {i} | {name} | {tag} | {r['total_downloads']:,} |")

    lines.extend(
        [
            "",
            "| Extension | Files | Downloads |",
            "|-----------|------:|----------:|",
        ]
    )
    for s in extensions:
        lines.append(f"| {s['extension']} | {s['count']} | {s['total_downloads']:,} |")

    return "\n".join(lines)
