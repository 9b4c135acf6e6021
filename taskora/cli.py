"""Command-line interface for Taskora.

Usage:
    taskora days [--around DATE] [--span N]
    taskora show DATE
    taskora add DATE TEXT
    taskora done DATE NOTE_ID [--undo]
    taskora rm DATE NOTE_ID
    taskora overdue
    taskora journal [--write TEXT] [--edit ENTRY_ID]
    taskora export [FILE]
    taskora import FILE
    taskora stats

DATE is an ISO date, ``today``, ``yesterday``, ``tomorrow`` or ``future``
(the undated future-notes bucket).
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date, timedelta
from pathlib import Path
from typing import Optional

from prometheus_client import generate_latest

from taskora.config import Settings, settings as default_settings
from taskora.session import Session

logger = logging.getLogger(__name__)

FUTURE = "future"
_RELATIVE = {"yesterday": -1, "today": 0, "tomorrow": 1}


def parse_day(value: str, today: date) -> Optional[date]:
    """Parse a DATE argument. Returns None for the future bucket."""
    value = value.strip().lower()
    if value == FUTURE:
        return None
    if value in _RELATIVE:
        return today + timedelta(days=_RELATIVE[value])
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date: {value!r}") from exc


def _format_note(note) -> str:
    mark = "x" if note.is_completed else " "
    return f"[{mark}] {note.id}  {note.text}"


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_days(session: Session, args: argparse.Namespace) -> int:
    around = parse_day(args.around, session.today()) or session.today()
    session.window.initialize(around)
    center = session.window.center_index
    for day in session.window.days[max(0, center - args.span) : center + args.span + 1]:
        marker = "*" if day.date == session.today() else " "
        print(f"{marker} {day.date}  {day.display_title}")
        for line in day.notes_preview.splitlines():
            print(f"      {line}")
    return 0


def cmd_show(session: Session, args: argparse.Namespace) -> int:
    model = session.notes_for(parse_day(args.date, session.today()))
    notes = model.get_notes()
    if not notes:
        print("No tasks")
    for note in notes:
        print(_format_note(note))
    return 0


def cmd_add(session: Session, args: argparse.Namespace) -> int:
    model = session.notes_for(parse_day(args.date, session.today()))
    note = model.add_note()
    model.set_text(note.id, args.text)
    print(note.id)
    return 0


def cmd_done(session: Session, args: argparse.Namespace) -> int:
    model = session.notes_for(parse_day(args.date, session.today()))
    if not model.set_completed(args.note_id, not args.undo):
        print(f"Note {args.note_id} not found", file=sys.stderr)
        return 1
    if model.all_completed:
        print("All tasks completed!")
    return 0


def cmd_rm(session: Session, args: argparse.Namespace) -> int:
    if not session.note_detail.delete(args.note_id, parse_day(args.date, session.today())):
        print(f"Note {args.note_id} not found", file=sys.stderr)
        return 1
    return 0


def cmd_overdue(session: Session, args: argparse.Namespace) -> int:
    overdue = session.overdue.compute_overdue()
    if not overdue:
        print("No overdue tasks")
        return 0
    for entry in overdue:
        print(f"{entry.date}  {_format_note(entry.note)}")
    total, unfinished = session.overdue.summary()
    print(f"{unfinished} of {total} overdue tasks unfinished")
    return 0


def cmd_journal(session: Session, args: argparse.Namespace) -> int:
    if args.write is not None:
        entry = session.journal.save(args.edit, args.write)
        print(entry.id if entry else "Entry deleted")
        return 0
    for entry in session.journal.entries():
        print(f"{entry.updated_at:%Y-%m-%d %H:%M}  {entry.id}  {entry.title}")
        if entry.preview:
            print(f"    {entry.preview}")
    return 0


def cmd_export(session: Session, args: argparse.Namespace) -> int:
    blob = session.export_all_data()
    if args.file:
        Path(args.file).write_text(blob, encoding="utf-8")
        logger.info("Backup written to %s", args.file)
    else:
        print(blob)
    return 0


def cmd_import(session: Session, args: argparse.Namespace) -> int:
    try:
        blob = Path(args.file).read_text(encoding="utf-8")
    except OSError as e:
        print(f"Cannot read {args.file}: {e}", file=sys.stderr)
        return 1
    if not session.import_all_data(blob):
        print("Import failed", file=sys.stderr)
        return 1
    print("Import completed")
    return 0


def cmd_stats(session: Session, args: argparse.Namespace) -> int:
    session.start()
    for key, value in session.cache.stats().items():
        print(f"{key}: {value}")
    print(generate_latest().decode("utf-8"))
    return 0


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taskora", description="Day-by-day tasks and journal")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("days", help="Show days around a date")
    p.add_argument("--around", default="today")
    p.add_argument("--span", type=int, default=3, help="Days either side to print")
    p.set_defaults(func=cmd_days)

    p = sub.add_parser("show", help="List the notes of a date")
    p.add_argument("date")
    p.set_defaults(func=cmd_show)

    p = sub.add_parser("add", help="Add a note to a date")
    p.add_argument("date")
    p.add_argument("text")
    p.set_defaults(func=cmd_add)

    p = sub.add_parser("done", help="Mark a note completed")
    p.add_argument("date")
    p.add_argument("note_id")
    p.add_argument("--undo", action="store_true", help="Mark as not completed")
    p.set_defaults(func=cmd_done)

    p = sub.add_parser("rm", help="Delete a note")
    p.add_argument("date")
    p.add_argument("note_id")
    p.set_defaults(func=cmd_rm)

    p = sub.add_parser("overdue", help="List unfinished notes from past days")
    p.set_defaults(func=cmd_overdue)

    p = sub.add_parser("journal", help="List or write journal entries")
    p.add_argument("--write", metavar="TEXT", help="Entry content; blank deletes")
    p.add_argument("--edit", metavar="ENTRY_ID", help="Entry to update")
    p.set_defaults(func=cmd_journal)

    p = sub.add_parser("export", help="Write a backup document")
    p.add_argument("file", nargs="?")
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("import", help="Restore a backup document")
    p.add_argument("file")
    p.set_defaults(func=cmd_import)

    p = sub.add_parser("stats", help="Cache statistics and metrics")
    p.set_defaults(func=cmd_stats)
    return parser


def main(argv: Optional[list[str]] = None, settings: Optional[Settings] = None) -> int:
    settings = settings or default_settings
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    )
    args = build_parser().parse_args(argv)
    session = Session(settings)
    try:
        return args.func(session, args)
    except argparse.ArgumentTypeError as e:
        print(str(e), file=sys.stderr)
        return 2
    finally:
        session.close()


if __name__ == "__main__":
    sys.exit(main())
