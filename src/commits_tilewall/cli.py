from __future__ import annotations

import argparse
import datetime as dt
import os
import sys
from pathlib import Path

from . import __version__
from .aggregate import collect_activity, window_start
from .errors import TilewallError
from .fonts import load_font
from .layout import DEFAULT_CELL, DEFAULT_GAP, default_range
from .models import Activity
from .render import RenderOptions, font_size_for_cell, output_filename, render_tilewall, save_image
from .themes import DEFAULT_THEME, get_theme, theme_names


def _parse_date(value: str) -> dt.date:
    try:
        return dt.date.fromisoformat(value.strip())
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from None


def _positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}") from None
    if n <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    return n


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="commits-tilewall",
        description="Render a calendar grid image of one author's commits across local git repositories.",
    )
    parser.add_argument("author", help="Author to count; case-insensitive substring of the commit author name or email.")
    parser.add_argument("repos", nargs="+", type=Path, help="Paths to git repositories.")
    parser.add_argument(
        "--theme",
        default=DEFAULT_THEME,
        help=f"Color theme: {', '.join(theme_names())} (default: {DEFAULT_THEME}).",
    )
    window = parser.add_mutually_exclusive_group()
    window.add_argument("--years", type=_positive_int, default=None, help="Only count the current year and the N-1 years before it.")
    window.add_argument("--since", type=_parse_date, default=None, help="Only count commits on or after this date (YYYY-MM-DD).")
    parser.add_argument("--jobs", type=_positive_int, default=max(1, min(8, (os.cpu_count() or 4))), help="Repositories read in parallel.")
    parser.add_argument("--no-merges", action="store_true", help="Skip merge commits.")
    parser.add_argument("--font", type=Path, default=None, help="TrueType/OpenType font file (default: ask fontconfig for a sans font).")
    parser.add_argument("--cell-size", type=_positive_int, default=DEFAULT_CELL, help="Size of one day cell in pixels.")
    parser.add_argument("--output-dir", type=Path, default=Path("."), help="Directory for the PNG (default: current directory).")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _print_failures(activity: Activity) -> None:
    if not activity.failures:
        return
    print(f"Skipped {len(activity.failures)} repositor{'y' if len(activity.failures) == 1 else 'ies'}:", file=sys.stderr)
    for err in activity.failures:
        print(f"  - {err}", file=sys.stderr)


def run(args: argparse.Namespace) -> int:
    # Theme and font are checked before any repository is read.
    theme = get_theme(args.theme)
    font = load_font(args.font, size=font_size_for_cell(args.cell_size))
    options = RenderOptions(theme=theme, font=font, cell=args.cell_size, gap=DEFAULT_GAP)

    since: dt.date | None = args.since
    if args.years is not None:
        since = window_start(args.years)

    author = args.author.strip()
    print(f"Reading {len(args.repos)} repositor{'y' if len(args.repos) == 1 else 'ies'} for author {author!r}...")
    activity = collect_activity(
        author,
        list(args.repos),
        since=since,
        jobs=args.jobs,
        include_merges=not args.no_merges,
    )
    _print_failures(activity)

    if not activity.repos:
        print("Error: none of the given paths could be read as a git repository.", file=sys.stderr)
        return 2

    if activity.first_day is not None and activity.last_day is not None:
        first_day = since if since is not None and since < activity.first_day else activity.first_day
        last_day = activity.last_day
        print(
            f"Found {activity.totals.commits} commits by {author!r} on {activity.active_days} days "
            f"({activity.first_day.isoformat()} -> {activity.last_day.isoformat()})."
        )
    else:
        first_day, last_day = default_range(since=since)
        print(f"No commits found for {author!r}; rendering an empty grid.")

    image = render_tilewall(
        activity.days,
        first_day,
        last_day,
        options,
        author=author,
        totals=activity.totals,
    )
    out_path = save_image(image, args.output_dir / output_filename(author))
    print(f"Wrote {out_path} ({image.width}x{image.height})")
    return 0


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = _build_parser()
    args = parser.parse_intermixed_args(argv)
    if not args.author.strip():
        parser.error("author must not be empty")
    try:
        return run(args)
    except TilewallError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
