"""Bucket keys and the backup document schema.

A bucket is one persisted list: the notes of a calendar date, the undated
"future" notes, or the journal. Its persistent-store key doubles as its key
in the backup document, so a backup is a JSON object such as::

    {
      "notes_2024-06-01": [{"id": "a", "text": "buy milk", "isCompleted": false}],
      "future_notes": [...],
      "journal": [...]
    }

Parsing turns the document into a list of typed buckets, validating every
entry before anything is written.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Union

from pydantic import ValidationError

from taskora.errors import BackupFormatError
from taskora.models import JournalEntry, JournalList, Note, NoteList

logger = logging.getLogger(__name__)

NOTES_KEY_PREFIX = "notes_"
FUTURE_NOTES_KEY = "future_notes"
JOURNAL_KEY = "journal"


def notes_key(day: date) -> str:
    """Store key of a dated bucket, e.g. ``notes_2024-06-01``."""
    return f"{NOTES_KEY_PREFIX}{day.isoformat()}"


# ---------------------------------------------------------------------------
# Tagged union of bucket kinds
# ---------------------------------------------------------------------------


@dataclass
class DateNotesBucket:
    date: date
    notes: list[Note]

    @property
    def key(self) -> str:
        return notes_key(self.date)

    def dump(self) -> list[dict[str, Any]]:
        return NoteList.dump_python(self.notes, by_alias=True, mode="json")


@dataclass
class FutureNotesBucket:
    notes: list[Note]

    key = FUTURE_NOTES_KEY

    def dump(self) -> list[dict[str, Any]]:
        return NoteList.dump_python(self.notes, by_alias=True, mode="json")


@dataclass
class JournalBucket:
    entries: list[JournalEntry]

    key = JOURNAL_KEY

    def dump(self) -> list[dict[str, Any]]:
        return JournalList.dump_python(self.entries, by_alias=True, mode="json")


Bucket = Union[DateNotesBucket, FutureNotesBucket, JournalBucket]


# ---------------------------------------------------------------------------
# Parsing / rendering
# ---------------------------------------------------------------------------


def _parse_date_key(key: str) -> date:
    raw = key[len(NOTES_KEY_PREFIX):]
    try:
        return date.fromisoformat(raw)
    except ValueError as exc:
        raise BackupFormatError(f"invalid date in key {key!r}") from exc


def _unique_ids(key: str, records: list) -> list:
    """Reject a bucket whose records repeat an id."""
    seen: set[str] = set()
    for record in records:
        if record.id in seen:
            raise BackupFormatError(f"duplicate id {record.id!r} under {key!r}")
        seen.add(record.id)
    return records


def parse_bucket(key: str, value: Any) -> Bucket | None:
    """Validate one document entry. Returns None for unrecognized keys."""
    try:
        if key.startswith(NOTES_KEY_PREFIX):
            day = _parse_date_key(key)
            return DateNotesBucket(day, _unique_ids(key, NoteList.validate_python(value)))
        if key == FUTURE_NOTES_KEY:
            return FutureNotesBucket(_unique_ids(key, NoteList.validate_python(value)))
        if key == JOURNAL_KEY:
            return JournalBucket(_unique_ids(key, JournalList.validate_python(value)))
    except ValidationError as exc:
        raise BackupFormatError(f"invalid records under {key!r}: {exc}") from exc
    return None


def parse_backup(blob: str) -> list[Bucket]:
    """Parse a whole backup document.

    Raises:
        BackupFormatError: if the document is not a JSON object or any
            recognized entry fails validation.
    """
    try:
        raw = json.loads(blob)
    except (json.JSONDecodeError, TypeError) as exc:
        raise BackupFormatError(f"backup is not valid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise BackupFormatError(f"backup must be a JSON object, got {type(raw).__name__}")

    buckets: list[Bucket] = []
    for key, value in raw.items():
        bucket = parse_bucket(key, value)
        if bucket is None:
            logger.info("Ignoring unknown backup key %r", key)
            continue
        buckets.append(bucket)
    return buckets


def render_backup(buckets: list[Bucket]) -> str:
    """Serialize buckets into a backup document."""
    return json.dumps({b.key: b.dump() for b in buckets}, indent=2, ensure_ascii=False)
