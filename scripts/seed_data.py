"""Seed the store with realistic notes for screenshots and manual testing.

Writes a spread of dated notes around today (some completed, some overdue),
a few future notes and two journal entries into the configured store.

Usage:
    python scripts/seed_data.py [--storage-path PATH] [--backend json|redis]
"""

from __future__ import annotations

import argparse
import sys
from datetime import timedelta
from pathlib import Path

from taskora.config import Settings
from taskora.models import Note
from taskora.session import Session

# Each entry: (day offset from today, text, completed)
DATED_NOTES: list[tuple[int, str, bool]] = [
    # --- Overdue (past, unfinished) ---
    (-12, "Renew passport application", False),
    (-5, "Call the dentist to reschedule", False),
    (-5, "Pay electricity bill", True),
    (-2, "Send quarterly report draft", False),
    # --- Today ---
    (0, "Buy milk", False),
    (0, "Review pull requests", True),
    (0, "Water the plants", False),
    # --- Upcoming ---
    (1, "Team sync at 10:00", False),
    (3, "Book train tickets", False),
    (7, "Mom's birthday dinner", False),
]

FUTURE_NOTES = [
    "Learn to make sourdough",
    "Repaint the balcony railing",
    "Read 'The Pragmatic Programmer'",
]

JOURNAL = [
    "Quiet Sunday\nFinally finished the garden shelf. Slept well.",
    "Conference notes\nGreat talk on local-first software and CRDTs.",
]


def seed(session: Session) -> int:
    """Write the sample data. Returns the number of notes written."""
    today = session.today()
    by_day: dict[int, list[Note]] = {}
    for offset, text, done in DATED_NOTES:
        by_day.setdefault(offset, []).append(Note(text=text, is_completed=done))

    written = 0
    for offset, notes in by_day.items():
        day = today + timedelta(days=offset)
        session.repository.save_notes(day, session.repository.load_notes(day) + notes)
        written += len(notes)

    session.repository.save_future_notes(
        session.repository.load_future_notes() + [Note(text=t) for t in FUTURE_NOTES]
    )
    written += len(FUTURE_NOTES)

    for content in JOURNAL:
        session.journal.save(None, content)
    return written


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed Taskora with sample data")
    parser.add_argument("--storage-path", type=Path, help="JSON store file")
    parser.add_argument("--backend", choices=["json", "redis"], help="Store backend")
    args = parser.parse_args()

    overrides = {}
    if args.storage_path:
        overrides["storage_path"] = args.storage_path
    if args.backend:
        overrides["storage_backend"] = args.backend
    settings = Settings(**overrides)

    session = Session(settings)
    try:
        count = seed(session)
    finally:
        session.close()
    print(f"  Seeded {count} notes and {len(JOURNAL)} journal entries")
    sys.exit(0)


if __name__ == "__main__":
    main()
