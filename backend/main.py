"""
Worktime command line entry point

    worktime [--config PATH] [--data PATH]          launch the dashboard
    worktime summary [--days N]                     print the last N days
    worktime weeks                                  print per-week totals
"""

import argparse
import sys
from typing import List, Optional

from handlers import dispatch
from system.runtime import start_runtime
from tui.charts import LEGEND, format_minutes, render_bars


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="worktime", description="Track workday start/end, meetings and focus time"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="User config file (default: ~/.config/worktime/config.toml)",
    )
    parser.add_argument(
        "--data",
        default=None,
        help="Day record file, overrides storage.data_file",
    )

    subparsers = parser.add_subparsers(dest="command")
    summary = subparsers.add_parser("summary", help="Print the rolling window of recent days")
    summary.add_argument(
        "--days",
        type=int,
        default=None,
        help="Window size (default: charts.window_size)",
    )
    summary.add_argument("--width", type=int, default=72, help="Chart width in columns")
    subparsers.add_parser("weeks", help="Print totals per ISO week")
    return parser


def print_summary(ctx, days: Optional[int], width: int) -> int:
    payload = {"window_size": days} if days else None
    response = dispatch(ctx, "window_summaries", payload)
    if not response.success:
        print(f"⚠️  {response.message}")

    window = days or ctx.window_size
    print("=" * width)
    print(f"Last {window} days")
    print("=" * width)
    for line in render_bars(response.data or [], width):
        print(line)
    print()
    print(LEGEND)
    return 0 if response.success else 1


def print_weeks(ctx) -> int:
    response = dispatch(ctx, "weekly_summaries")
    if not response.success:
        print(f"❌ {response.message}")
        return 1

    if not response.data:
        print("No saved days")
        return 0

    for week in response.data:
        print(
            f"{week.week}  {week.days} days  "
            f"worked {format_minutes(week.worked_minutes):>9}  "
            f"meetings {format_minutes(week.meeting_minutes):>9}  "
            f"focus {format_minutes(week.focus_minutes):>9}"
        )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "summary":
        ctx = start_runtime(args.config, args.data, register_exit_handlers=False)
        return print_summary(ctx, args.days, args.width)
    if args.command == "weeks":
        ctx = start_runtime(args.config, args.data, register_exit_handlers=False)
        return print_weeks(ctx)

    # Imported here so the plain commands do not load Textual
    from tui.app import WorktimeApp

    ctx = start_runtime(args.config, args.data)
    # A fresh dashboard never has focus running
    ctx.focus_cache.write(False, 0)
    WorktimeApp(ctx).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
