"""
CLI (Command Line Interface).

    untisplan classes
    untisplan fetch --element-type class --element-id 42 --start 2022-04-18 --end 2022-05-13
    untisplan schedules [--cache periods.json] [--no-combine]

Server, school and session come from the environment or a .env file
(see untisplan/config.py). Output is plain text.
"""

from __future__ import annotations

import argparse
import logging
from datetime import date
from pathlib import Path
from typing import Any

import requests

from untisplan import methods
from untisplan.config import Config, load_config
from untisplan.errors import UntisError
from untisplan.rpc import RPCClient
from untisplan.schedule import Schedule, ScheduleCollection
from untisplan.storage import load_periods, save_raw_periods
from untisplan.timeformat import parse_date

log = logging.getLogger(__name__)

WEEKDAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def _client(config: Config) -> RPCClient:
    return RPCClient(config.url, cookies=config.cookies, timeout=config.timeout)


def _cmd_classes(args: argparse.Namespace, config: Config) -> int:
    """
    Print id, short name and long name of every class.
    """
    classes = methods.get_classes(_client(config))
    if not classes:
        print("No classes.")
        return 0

    for c in sorted(classes, key=lambda c: str(c.get("name", ""))):
        print(f"{c.get('id', '')} | {c.get('name', '')} | {c.get('longName', c.get('longname', ''))}")
    return 0


def _cmd_fetch(args: argparse.Namespace, config: Config) -> int:
    """
    Download raw periods of one element into the cache file.
    """
    start = parse_date(args.start)
    end = parse_date(args.end)
    if end < start:
        print("End date must not be before start date.")
        return 1

    records = methods.fetch_timetable(
        _client(config),
        methods.ELEMENT_TYPES[args.element_type],
        args.element_id,
        start,
        end,
    )
    out = args.out if args.out is not None else config.cache_path
    n = save_raw_periods(records, out)
    print(f"Saved {n} periods to: {out}")
    return 0


def _format_schedule(schedule: Schedule) -> list[str]:
    ref = schedule.reference
    subjects = ", ".join(e.name for e in ref.elements.subjects) or "-"
    teachers = ", ".join(e.name for e in ref.elements.teachers) or "-"
    rooms = ", ".join(e.name for e in ref.elements.rooms) or "-"

    lines = [
        f"{WEEKDAYS[schedule.weekday]} {schedule.start_time}-{schedule.end_time} "
        f"#{schedule.lesson_number} {subjects} | {teachers} | {rooms} "
        f"({len(schedule.unchanged)} unchanged, {len(schedule.changed)} changed)"
    ]
    for p in schedule.changed:
        note = p.substitution_text or p.lesson_code
        lines.append(f"  ! {p.date} {p.start_time}-{p.end_time} {note}")
    return lines


def _cmd_schedules(args: argparse.Namespace, config: Config) -> int:
    """
    Rebuild weekly schedules from the cached periods and print them.
    """
    cache = args.cache if args.cache is not None else config.cache_path
    periods = load_periods(cache)
    if not periods:
        print(f"No periods in {cache}. Run 'untisplan fetch' first.")
        return 0

    collection = ScheduleCollection.from_lessons(periods)
    if not args.no_combine:
        collection = collection.combine_sequential_schedules()

    print(f"Schedules: {len(collection)} (from {len(periods)} periods)")
    for schedule in collection:
        for line in _format_schedule(schedule):
            print(line)
    return 0


def _date_arg(value: str) -> str:
    try:
        parse_date(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected yyyy-mm-dd, got {value!r}") from None
    return value


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="untisplan", description="WebUntis schedule client")
    parser.add_argument("--env-file", type=Path, default=None, help="Path of a .env file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("classes", help="List classes")

    p_fetch = sub.add_parser("fetch", help="Download periods into the cache")
    p_fetch.add_argument("--element-type", choices=sorted(methods.ELEMENT_TYPES), default="class")
    p_fetch.add_argument("--element-id", type=int, required=True, help="Id of the class, teacher, ...")
    p_fetch.add_argument("--start", type=_date_arg, default=date.today().isoformat(), help="yyyy-mm-dd")
    p_fetch.add_argument("--end", type=_date_arg, required=True, help="yyyy-mm-dd")
    p_fetch.add_argument("--out", type=Path, default=None, help="Cache file (default: UNTIS_CACHE)")

    p_sched = sub.add_parser("schedules", help="Show weekly schedules from the cache")
    p_sched.add_argument("--cache", type=Path, default=None, help="Cache file (default: UNTIS_CACHE)")
    p_sched.add_argument("--no-combine", action="store_true", help="Do not merge back-to-back schedules")

    return parser


HANDLERS: dict[str, Any] = {
    "classes": _cmd_classes,
    "fetch": _cmd_fetch,
    "schedules": _cmd_schedules,
}


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    handler = HANDLERS.get(args.command)
    if handler is None:
        raise SystemExit(2)

    try:
        config = load_config(args.env_file)
        code = handler(args, config)
    except (UntisError, requests.RequestException, ValueError, TypeError) as e:
        log.debug("%s failed", args.command, exc_info=True)
        print(f"Error: {e}")
        code = 1

    raise SystemExit(code)
