"""lessismore CLI — run the tracker daemon and query or update the ledgers."""

import argparse
import json
import os
import signal
import sys
from dataclasses import asdict

from lessismore.app import Services, build_services
from lessismore.config import DATA_DIR, DB_PATH, LOG_PATH, PID_PATH
from lessismore.db import Database
from lessismore.models import FilterType, UsageCategory, format_duration


def _pid() -> int | None:
    if PID_PATH.exists():
        try:
            return int(PID_PATH.read_text().strip())
        except ValueError:
            pass
    return None


def _is_running() -> bool:
    pid = _pid()
    if pid is None:
        return False
    try:
        os.kill(pid, 0)
    except OSError:
        return False
    return True


def _signal_daemon(signum: int) -> bool:
    """Send a signal to the running daemon. Returns False if none is running."""
    if not _is_running():
        return False
    os.kill(_pid(), signum)
    return True


def _open() -> tuple[Database, Services]:
    db = Database()
    db.open()
    return db, build_services(db)


def _parse_filter(name: str) -> FilterType:
    filter_type = FilterType.parse(name)
    if filter_type is None:
        choices = ", ".join(f.value for f in FilterType)
        print(f"unknown filter {name!r} (choose from: {choices})", file=sys.stderr)
        sys.exit(2)
    return filter_type


def _signed_percent(value: float) -> str:
    return f"{value:+.0f}%"


# ── Subcommands ──────────────────────────────────────────────────────────


def cmd_run(args: argparse.Namespace) -> None:
    from lessismore.daemon import Daemon
    if _is_running():
        print(f"lessismore daemon is already running (pid {_pid()})")
        return
    Daemon().start()


def cmd_status(args: argparse.Namespace) -> None:
    db, services = _open()
    try:
        usage, streaks = services.usage, services.streaks
        running = _is_running()
        pid = _pid()

        print("\n  lessismore status")
        print("  ──────────────────\n")
        print(f"  Daemon       {'running' if running else 'stopped'}" +
              (f" (pid {pid})" if running and pid else ""))
        print(f"  Data dir     {DATA_DIR}")
        print(f"  Database     {DB_PATH}")
        print()
        print(f"  Today        {usage.formatted_time}  "
              f"({_signed_percent(usage.comparison_to_yesterday())} vs yesterday)")
        print(f"  Yesterday    {usage.yesterday.formatted_time}")
        print(f"  This week    {format_duration(usage.weekly_total_seconds())}")

        best = streaks.best_active_streak()
        if best:
            filter_type, days = best
            print(f"  Best streak  {days} day{'s' if days != 1 else ''} without {filter_type.display_name}")
        else:
            print("  Best streak  none")
        enabled = services.toggles.enabled_filters()
        print(f"  Filters on   {', '.join(f.display_name for f in enabled) or 'none'}")

        snapshot = services.publisher.sink.read()
        print(f"  Widget       {'updated ' + snapshot.last_update if snapshot else 'no snapshot yet'}")
        print(f"  Health log   {db.count('daemon_health'):,} events")
        print()
    finally:
        db.close()


def cmd_visit(args: argparse.Namespace) -> None:
    db, services = _open()
    try:
        category = services.report_location(args.url)
    finally:
        db.close()
    print(category.value)


def cmd_filter(args: argparse.Namespace) -> None:
    db, services = _open()
    try:
        if args.action == "list":
            for f in FilterType:
                state = "on " if services.toggles.is_enabled(f) else "off"
                streak = services.streaks.streak(f)
                days = services.streaks.current_streak_days(f)
                print(f"  [{state}] {f.value:<12} {f.display_name:<20} "
                      f"streak {days:>3}d  record {streak.longest_streak:>3}d")
            return

        filter_type = _parse_filter(args.name)
        if args.action == "enable":
            services.set_filter(filter_type, True)
            print(f"{filter_type.display_name} filter enabled")
        else:
            lost = services.set_filter(filter_type, False)
            print(f"{filter_type.display_name} filter disabled")
            if lost:
                record = services.streaks.longest_streak(filter_type)
                print(f"  streak of {lost} day{'s' if lost != 1 else ''} ended (record {record})")
    finally:
        db.close()
    _signal_daemon(signal.SIGHUP)


def cmd_stats(args: argparse.Namespace) -> None:
    db, services = _open()
    try:
        stats = services.statistics
        if args.real:
            stats.toggle_simulation_mode()
            if stats.is_simulation_mode:
                print("  no active filters yet — showing simulated statistics")
        now = services.clock.now()
        mode = "simulated" if stats.is_simulation_mode or not stats.has_real_data else "real"

        print(f"\n  Time saved ({mode})")
        print("  ──────────────────\n")
        for s in stats.sorted_statistics():
            print(f"  {s.filter_type.display_name:<20} {s.formatted_time(now):>12}"
                  f"  ({s.daily_minutes_saved} min/day)")
        print()
        print(f"  Total        {stats.formatted_total_time}")
        print(f"  Per week     {stats.weekly_minutes_saved} min")
        print(f"  Per month    {stats.monthly_minutes_saved} min")
        print(f"  Filters      {stats.active_filters_count}")
        print()
    finally:
        db.close()


def cmd_chart(args: argparse.Namespace) -> None:
    db, services = _open()
    try:
        stats = services.statistics
        if args.real:
            stats.toggle_simulation_mode()
        if not stats.should_show_chart():
            print("nothing saved yet — check back tomorrow")
            return
        data = stats.daily_chart_data()
        peak = max((m for _, m in data), default=0) or 1
        for day, minutes in data:
            bar = "█" * int(30 * minutes / peak)
            print(f"  {day:%a %d} {bar} {minutes} min")
    finally:
        db.close()


def cmd_usage(args: argparse.Namespace) -> None:
    db, services = _open()
    try:
        usage = services.usage
        if args.month:
            for bucket in usage.month_view():
                print(f"  week {bucket.week_number}  {bucket.formatted_time:>8}")
            print(f"\n  vs last week  {_signed_percent(usage.comparison_to_last_week())}")
            return
        for bucket in usage.week_view_chronological():
            seconds = bucket.seconds_by_category
            parts = ", ".join(
                f"{c.value} {format_duration(seconds[c])}"
                for c in UsageCategory
                if c in seconds
            )
            print(f"  {bucket.weekday} {bucket.day_key}  {bucket.formatted_time:>8}  {parts}")
    finally:
        db.close()


def cmd_snapshot(args: argparse.Namespace) -> None:
    db, services = _open()
    try:
        snapshot = services.publisher.publish()
    finally:
        db.close()
    if snapshot is None:
        print("failed to write snapshot — check: lessismore logs", file=sys.stderr)
        sys.exit(1)
    print(json.dumps(asdict(snapshot), indent=2))


def cmd_background(args: argparse.Namespace) -> None:
    if _signal_daemon(signal.SIGUSR1):
        print("tracking paused")
    else:
        print("lessismore daemon is not running")


def cmd_foreground(args: argparse.Namespace) -> None:
    if _signal_daemon(signal.SIGUSR2):
        print("tracking resumed")
    else:
        print("lessismore daemon is not running")


def cmd_logs(args: argparse.Namespace) -> None:
    if not LOG_PATH.exists():
        print(f"No log files found at {DATA_DIR}")
        return
    lines = LOG_PATH.read_text().splitlines()
    for line in lines[-args.lines:]:
        print(line)


# ── Main ─────────────────────────────────────────────────────────────────


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="lessismore",
        description="usage and streak accounting for filtered social browsing",
    )
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("run", help="run the tracker daemon in the foreground")
    sub.add_parser("status", help="show today's usage and the best streak")

    p_visit = sub.add_parser("visit", help="report the page currently being viewed")
    p_visit.add_argument("url")

    p_filter = sub.add_parser("filter", help="list or toggle content filters")
    p_filter.add_argument("action", choices=["list", "enable", "disable"])
    p_filter.add_argument("name", nargs="?", default="")

    p_stats = sub.add_parser("stats", help="show estimated time saved")
    p_stats.add_argument("--real", action="store_true",
                         help="show real statistics instead of the simulated week")

    p_chart = sub.add_parser("chart", help="show the 7-day time-saved chart")
    p_chart.add_argument("--real", action="store_true")

    p_usage = sub.add_parser("usage", help="show per-day usage for the trailing week")
    p_usage.add_argument("--month", action="store_true", help="group by week of month")

    sub.add_parser("snapshot", help="publish a widget snapshot now")
    sub.add_parser("background", help="tell the daemon the app went to the background")
    sub.add_parser("foreground", help="tell the daemon the app came to the foreground")

    p_logs = sub.add_parser("logs", help="show recent log output")
    p_logs.add_argument("-n", "--lines", type=int, default=30,
                        help="number of lines to show (default: 30)")

    args = parser.parse_args()

    commands = {
        "run": cmd_run,
        "status": cmd_status,
        "visit": cmd_visit,
        "filter": cmd_filter,
        "stats": cmd_stats,
        "chart": cmd_chart,
        "usage": cmd_usage,
        "snapshot": cmd_snapshot,
        "background": cmd_background,
        "foreground": cmd_foreground,
        "logs": cmd_logs,
    }

    if args.command in commands:
        commands[args.command](args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
