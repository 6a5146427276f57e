"""CLI argument parsing and command implementations."""

import argparse
import sys
import webbrowser
from pathlib import Path

import yaml
from tabulate import tabulate

from .api import fetch_dashboard_data
from .config import DEFAULT_CONFIG_FILE, Config, load_config, normalize_extension
from .db import DEFAULT_DB_FILE, clear_recent_repos, get_db, get_recent_repos, remember_repo
from .errors import FetchError, ValidationError
from .export import export_csv, export_json, export_markdown
from .logging import setup_logging
from .reports import generate_html_report
from .state import DashboardState, DashboardViews, build_views
from .stats import (
    TIME_RANGES,
    extension_stats,
    os_percentages,
    release_assets_by_downloads,
)
from .utils import make_sparkline, parse_repo_name

DEFAULT_REPORT_FILE = "report.html"


def _excluded_extensions(args: argparse.Namespace, config: Config) -> frozenset[str]:
    """Start from the configured exclusions, then apply --exclude/--include."""
    excluded = set(config["excluded_extensions"])
    excluded.update(normalize_extension(e) for e in args.exclude or [])
    excluded.difference_update(normalize_extension(e) for e in args.include or [])
    return frozenset(excluded)


def load_dashboard(
    args: argparse.Namespace,
) -> tuple[DashboardState, DashboardViews] | None:
    """Validate input, fetch both sources and compute the views.

    Returns None (after printing the reason) when the input or the config
    file is invalid, or the GitHub fetch fails. Flathub failures are printed
    and tolerated.
    """
    try:
        owner, repo = parse_repo_name(args.repo)
    except ValidationError as e:
        print(e)
        return None

    try:
        config = load_config(args.config)
    except (ValueError, yaml.YAMLError) as e:
        print(f"Invalid configuration in {args.config}: {e}")
        return None

    repo_name = f"{owner}/{repo}"
    app_id = args.flathub or config["flathub_apps"].get(repo_name)

    state = DashboardState(
        excluded=_excluded_extensions(args, config),
        time_range=args.range or config["time_range"],
    )
    token = state.begin_request(repo_name)

    print(f"Fetching releases for {repo_name}...")
    try:
        result = fetch_dashboard_data(
            owner,
            repo,
            app_id=app_id,
            github_base=config["github_api_base"],
            flathub_base=config["flathub_api_base"],
            timeout=config["timeout"],
        )
    except FetchError as e:
        state.apply_error(token, str(e))
        print(f"{e.origin} Error: {e}")
        return None

    state.apply_result(token, result)
    if state.flathub_error:
        print(f"Flathub Error: {state.flathub_error}")

    with get_db(args.database) as conn:
        remember_repo(conn, repo_name)

    return state, build_views(state)


def _print_summary(state: DashboardState, views: DashboardViews) -> None:
    summary = views.summary
    print(f"\n=== {state.repo} ===")
    print(f"  Downloads: {summary['total_downloads']:>12,}")
    print(f"  Assets:    {summary['total_assets']:>12,}")
    print(f"  Releases:  {summary['total_releases']:>12,}")
    if summary["flathub_downloads"]:
        print(f"  Flathub:   {summary['flathub_downloads']:>12,}")
        print(f"  Combined:  {summary['grand_total']:>12,}")
    if state.excluded:
        print(f"  Excluding: {', '.join(sorted(state.excluded))}")
    print()


def _print_top_releases(views: DashboardViews, show_assets: bool = False) -> None:
    if not views.top_releases:
        print("No releases found.")
        return

    rows = []
    for i, release in enumerate(views.top_releases, 1):
        rows.append(
            [i, release["name"], (release["published_at"] or "")[:10], f"{release['total_downloads']:,}"]
        )
        if show_assets:
            for asset in release_assets_by_downloads(release):
                rows.append(["", f"  {asset['name']}", "", f"{asset['download_count']:,}"])

    print("=== Top Releases ===")
    print(tabulate(rows, headers=["#", "Release", "Published", "Downloads"], tablefmt="simple"))
    print()


def cmd_show(args: argparse.Namespace) -> int:
    """Show command: print every statistic for a repository."""
    loaded = load_dashboard(args)
    if loaded is None:
        return 1
    state, views = loaded

    _print_summary(state, views)
    if not state.releases:
        print("No releases found.")
        return 0

    print("=== Downloads by Extension ===")
    rows = [[s["extension"], s["count"], f"{s['total_downloads']:,}"] for s in views.extension_stats]
    print(tabulate(rows, headers=["Extension", "Files", "Downloads"], tablefmt="simple"))
    print()

    print("=== Downloads by Operating System ===")
    percentages = os_percentages(views.os_stats)
    rows = []
    for stat in views.os_stats:
        bar = "#" * int(percentages[stat["os"]] / 2)
        rows.append(
            [stat["label"], f"{stat['total_downloads']:,}", f"{percentages[stat['os']]:.1f}%", bar]
        )
    print(tabulate(rows, headers=["OS", "Downloads", "Share", ""], tablefmt="simple"))
    print()

    values = [b["total_downloads"] for b in views.time_series]
    print(f"=== Downloads Over Time ({TIME_RANGES[state.time_range]}) ===")
    print(f"  Total: {sum(values):,}  Trend: [{make_sparkline(values, width=min(len(values), 30) or 1)}]")
    rows = [[b["label"], f"{b['total_downloads']:,}"] for b in views.time_series if b["total_downloads"]]
    if rows:
        print(tabulate(rows, headers=["Period", "Downloads"], tablefmt="simple"))
    print()

    _print_top_releases(views)
    return 0


def cmd_releases(args: argparse.Namespace) -> int:
    """Releases command: show the most downloaded releases."""
    loaded = load_dashboard(args)
    if loaded is None:
        return 1
    _, views = loaded
    _print_top_releases(views, show_assets=args.assets)
    return 0


def cmd_extensions(args: argparse.Namespace) -> int:
    """Extensions command: list every extension and whether it is excluded."""
    loaded = load_dashboard(args)
    if loaded is None:
        return 1
    state, views = loaded

    if not views.extensions:
        print("No file extensions found.")
        return 0

    totals = {s["extension"]: s for s in extension_stats(views.records)}
    rows = [
        [
            ext,
            totals[ext]["count"],
            f"{totals[ext]['total_downloads']:,}",
            "yes" if ext in state.excluded else "",
        ]
        for ext in views.extensions
    ]
    print(tabulate(rows, headers=["Extension", "Files", "Downloads", "Excluded"], tablefmt="simple"))
    return 0


def cmd_report(args: argparse.Namespace) -> int:
    """Report command: write the HTML dashboard."""
    loaded = load_dashboard(args)
    if loaded is None:
        return 1
    state, views = loaded

    generate_html_report(state, views, args.output)
    if not args.no_browser:
        print("Opening report in browser...")
        webbrowser.open_new_tab(Path(args.output).resolve().as_uri())
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    """Export command: export top releases and extension stats."""
    loaded = load_dashboard(args)
    if loaded is None:
        return 1
    state, views = loaded

    if args.format == "csv":
        output = export_csv(views.top_releases, views.extension_stats)
    elif args.format == "json":
        output = export_json(state.repo, views.top_releases, views.extension_stats)
    else:
        output = export_markdown(views.top_releases, views.extension_stats)

    if args.output:
        with open(args.output, "w") as f:
            f.write(output)
        print(f"Exported to {args.output}")
    else:
        print(output)
    return 0


def cmd_recent(args: argparse.Namespace) -> int:
    """Recent command: list or clear recently viewed repositories."""
    with get_db(args.database) as conn:
        if args.clear:
            clear_recent_repos(conn)
            print("Cleared recent repositories.")
            return 0
        repos = get_recent_repos(conn)

    if not repos:
        print("No recent repositories.")
        return 0
    for repo in repos:
        print(repo)
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        description="Count GitHub release downloads and Flathub installs.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-d",
        "--database",
        default=DEFAULT_DB_FILE,
        help=f"SQLite file holding recent repositories (default: {DEFAULT_DB_FILE})",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=DEFAULT_CONFIG_FILE,
        help=f"YAML configuration file (default: {DEFAULT_CONFIG_FILE})",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Show debug output")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only show warnings and errors")

    # options shared by every command that fetches a repository
    repo_options = argparse.ArgumentParser(add_help=False)
    repo_options.add_argument("repo", help="GitHub repository as owner/repo")
    repo_options.add_argument(
        "--flathub",
        metavar="APP_ID",
        help="Flathub application id whose installs are added to Linux",
    )
    repo_options.add_argument(
        "-x",
        "--exclude",
        action="append",
        metavar="EXT",
        help="Exclude an extension (repeatable, e.g. -x .sig)",
    )
    repo_options.add_argument(
        "-i",
        "--include",
        action="append",
        metavar="EXT",
        help="Include an extension excluded by default (repeatable)",
    )
    repo_options.add_argument(
        "-r",
        "--range",
        choices=list(TIME_RANGES),
        help="Time range for the downloads-over-time view (default: month)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    show_parser = subparsers.add_parser(
        "show",
        parents=[repo_options],
        help="Display download statistics in terminal",
    )
    show_parser.set_defaults(func=cmd_show)

    releases_parser = subparsers.add_parser(
        "releases",
        parents=[repo_options],
        help="Show the top 10 releases by downloads",
    )
    releases_parser.add_argument(
        "-a",
        "--assets",
        action="store_true",
        help="Break each release down by file",
    )
    releases_parser.set_defaults(func=cmd_releases)

    extensions_parser = subparsers.add_parser(
        "extensions",
        parents=[repo_options],
        help="List file extensions and whether they are excluded",
    )
    extensions_parser.set_defaults(func=cmd_extensions)

    report_parser = subparsers.add_parser(
        "report",
        parents=[repo_options],
        help="Generate HTML dashboard with charts",
    )
    report_parser.add_argument(
        "-o",
        "--output",
        default=DEFAULT_REPORT_FILE,
        help=f"Output HTML file (default: {DEFAULT_REPORT_FILE})",
    )
    report_parser.add_argument(
        "--no-browser",
        action="store_true",
        help="Don't open report in browser (useful for automation)",
    )
    report_parser.set_defaults(func=cmd_report)

    export_parser = subparsers.add_parser(
        "export",
        parents=[repo_options],
        help="Export statistics in various formats (csv, json, markdown)",
    )
    export_parser.add_argument(
        "-f",
        "--format",
        choices=["csv", "json", "markdown", "md"],
        default="csv",
        help="Export format (default: csv)",
    )
    export_parser.add_argument(
        "-o",
        "--output",
        help="Output file (default: stdout)",
    )
    export_parser.set_defaults(func=cmd_export)

    recent_parser = subparsers.add_parser(
        "recent",
        help="List recently viewed repositories",
    )
    recent_parser.add_argument(
        "--clear",
        action="store_true",
        help="Forget all recent repositories",
    )
    recent_parser.set_defaults(func=cmd_recent)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose, quiet=args.quiet)

    if args.command is None:
        parser.print_help()
        return 0

    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
