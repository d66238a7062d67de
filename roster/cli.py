"""Command-line interface for the duty roster."""

from __future__ import annotations

import argparse
import signal
import sys
import threading
from datetime import date

from roster.config import load_config
from roster.context import AppContext
from roster.domain.db import init_database, reset_database
from roster.domain.models import ALGORITHMS, FREQUENCY_UNITS, MEMBER_STATUSES, Activity, Member, SettingsPatch
from roster.errors import InvalidDateRange, RosterError
from roster.io.export_csv import export_members_csv, export_schedule_csv
from roster.io.import_csv import import_members_csv
from roster.io.snapshot import export_snapshot_file, import_snapshot_file
from roster.validator import summarize_schedule


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date {value!r}, expected YYYY-MM-DD")


def _context(args: argparse.Namespace) -> AppContext:
    cfg = load_config(args.config)
    if args.db:
        cfg.db_url = args.db
    return AppContext.create(cfg)


def _cmd_init_db(args: argparse.Namespace) -> None:
    """Initialize the database."""
    cfg = load_config(args.config)
    init_database(args.db or cfg.db_url)


def _cmd_add_member(args: argparse.Namespace) -> None:
    ctx = _context(args)
    member = ctx.store.add_member(Member(name=args.name, email=args.email, status=args.status))
    print(f"[OK] Added member {member.name} ({member.id})")


def _cmd_import_members(args: argparse.Namespace) -> None:
    ctx = _context(args)
    count = import_members_csv(ctx.store, args.csv, default_status=args.status)
    print(f"[OK] Added {count} members")


def _cmd_add_activity(args: argparse.Namespace) -> None:
    ctx = _context(args)
    activity = ctx.store.add_activity(
        Activity(
            name=args.name,
            description=args.description,
            frequency=args.frequency,
            frequency_unit=args.unit,
        )
    )
    print(f"[OK] Added activity {activity.name} every {activity.frequency} {activity.frequency_unit}")


def _cmd_list(args: argparse.Namespace) -> None:
    ctx = _context(args)
    store = ctx.store
    if args.what == "members":
        for m in store.members:
            print(f"{m.id}  {m.name:<20} {m.email or '-':<28} {m.status:<8} {m.participation_count}")
    elif args.what == "activities":
        for a in store.activities:
            print(f"{a.id}  {a.name:<20} every {a.frequency} {a.frequency_unit}  {a.description or ''}")
    else:
        for s in sorted(store.schedules, key=lambda s: s.date):
            flag = "notified" if s.notified else ""
            print(f"{s.date}  {s.activity_name:<20} {s.member_name:<20} {flag}")


def _cmd_settings(args: argparse.Namespace) -> None:
    ctx = _context(args)
    enabled = None if args.notifications is None else args.notifications == "on"
    patch = SettingsPatch(
        algorithm=args.algorithm,
        notification_enabled=enabled,
        notification_days=args.notification_days,
    )
    settings = ctx.store.update_settings(patch)
    print(
        f"algorithm={settings.algorithm} "
        f"notifications={'on' if settings.notification_enabled else 'off'} "
        f"notification_days={settings.notification_days}"
    )


def _cmd_generate(args: argparse.Namespace) -> None:
    """Generate the schedule for a date window."""
    if args.start > args.end:
        raise InvalidDateRange(args.start, args.end)
    ctx = _context(args)
    entries = ctx.generator.generate(args.start, args.end)

    if args.out:
        export_schedule_csv(ctx.store, args.out)
    if args.summary:
        print(summarize_schedule(entries))
    print(f"[OK] Generated {len(entries)} entries for {args.start} .. {args.end}")


def _cmd_upcoming(args: argparse.Namespace) -> None:
    ctx = _context(args)
    limit = args.limit or ctx.config.upcoming_limit
    upcoming = ctx.store.upcoming_schedules(limit)
    if not upcoming:
        print("No upcoming duties.")
    for s in upcoming:
        print(f"{s.date}  {s.activity_name:<20} {s.member_name}")


def _cmd_notify(args: argparse.Namespace) -> None:
    """Run one reminder scan."""
    ctx = _context(args)
    sent = ctx.notifier.scan()
    print(f"[OK] {len(sent)} reminders sent")


def _cmd_watch(args: argparse.Namespace) -> None:
    """Run the reminder scheduler in the foreground until Ctrl-C or SIGTERM."""
    ctx = _context(args)
    done = threading.Event()

    def handle_signal(signum, frame):
        print(f"[INFO] Received signal {signum}")
        done.set()

    previous = {sig: signal.signal(sig, handle_signal) for sig in (signal.SIGINT, signal.SIGTERM)}
    try:
        ctx.notifier.start()
        done.wait(args.duration)
    finally:
        ctx.close()
        for sig, handler in previous.items():
            signal.signal(sig, handler)


def _cmd_export(args: argparse.Namespace) -> None:
    ctx = _context(args)
    export_snapshot_file(ctx.store, args.path)


def _cmd_import(args: argparse.Namespace) -> None:
    ctx = _context(args)
    applied = import_snapshot_file(ctx.store, args.path)
    print(f"[OK] Replaced {len(applied)} collections")


def _cmd_export_csv(args: argparse.Namespace) -> None:
    ctx = _context(args)
    if args.schedule:
        export_schedule_csv(ctx.store, args.schedule)
    if args.members:
        export_members_csv(ctx.store, args.members)


def _cmd_reset(args: argparse.Namespace) -> None:
    if not args.yes:
        raise SystemExit("Refusing to delete all data without --yes")
    if args.drop_tables:
        cfg = load_config(args.config)
        reset_database(args.db or cfg.db_url)
    ctx = _context(args)
    ctx.store.reset()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="roster", description="Team duty roster")
    parser.add_argument("--db", help="Database URL (overrides the config file)")
    parser.add_argument("--config", help="Path to config YAML")

    sub = parser.add_subparsers(dest="command", required=True)

    init = sub.add_parser("init-db", help="Initialize database")
    init.set_defaults(func=_cmd_init_db)

    am = sub.add_parser("add-member", help="Add a team member")
    am.add_argument("name")
    am.add_argument("--email")
    am.add_argument("--status", choices=MEMBER_STATUSES, default="active")
    am.set_defaults(func=_cmd_add_member)

    im = sub.add_parser("import-members", help="Add members from a name,email CSV")
    im.add_argument("csv")
    im.add_argument("--status", choices=MEMBER_STATUSES, default="active")
    im.set_defaults(func=_cmd_import_members)

    aa = sub.add_parser("add-activity", help="Add a recurring activity")
    aa.add_argument("name")
    aa.add_argument("--frequency", type=int, default=1)
    aa.add_argument("--unit", choices=FREQUENCY_UNITS, default="weeks")
    aa.add_argument("--description")
    aa.set_defaults(func=_cmd_add_activity)

    ls = sub.add_parser("list", help="List records")
    ls.add_argument("what", choices=["members", "activities", "schedules"])
    ls.set_defaults(func=_cmd_list)

    st = sub.add_parser("settings", help="Show or change settings")
    st.add_argument("--algorithm", choices=ALGORITHMS)
    st.add_argument("--notifications", choices=["on", "off"])
    st.add_argument("--notification-days", type=int)
    st.set_defaults(func=_cmd_settings)

    gen = sub.add_parser("generate", help="Generate the schedule for a date window")
    gen.add_argument("--start", required=True, type=_parse_date, help="First day (YYYY-MM-DD)")
    gen.add_argument("--end", required=True, type=_parse_date, help="Last day (YYYY-MM-DD)")
    gen.add_argument("--out", help="Optional: export the schedule to CSV")
    gen.add_argument("--summary", action="store_true", help="Print coverage summary")
    gen.set_defaults(func=_cmd_generate)

    up = sub.add_parser("upcoming", help="Show upcoming duties")
    up.add_argument("--limit", type=int)
    up.set_defaults(func=_cmd_upcoming)

    nt = sub.add_parser("notify", help="Send reminders that are due today")
    nt.set_defaults(func=_cmd_notify)

    wt = sub.add_parser("watch", help="Send reminders periodically until interrupted")
    wt.add_argument("--duration", type=float, help="Stop after this many seconds (default: run until Ctrl-C)")
    wt.set_defaults(func=_cmd_watch)

    ex = sub.add_parser("export", help="Export all data to a JSON snapshot")
    ex.add_argument("path")
    ex.set_defaults(func=_cmd_export)

    ip = sub.add_parser("import", help="Import a JSON snapshot")
    ip.add_argument("path")
    ip.set_defaults(func=_cmd_import)

    ec = sub.add_parser("export-csv", help="Export schedule and/or members to CSV")
    ec.add_argument("--schedule", help="Path to export the schedule CSV")
    ec.add_argument("--members", help="Path to export the members CSV")
    ec.set_defaults(func=_cmd_export_csv)

    rs = sub.add_parser("reset", help="Delete all data and restore default settings")
    rs.add_argument("--yes", action="store_true")
    rs.add_argument("--drop-tables", action="store_true", help="Also drop and recreate tables")
    rs.set_defaults(func=_cmd_reset)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    try:
        args.func(args)
    except (RosterError, ValueError) as e:
        print(f"[ERROR] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
