"""Date- and bucket-keyed note repository.

The repository is the only component that talks to the persistent store.
Reads go through the session's ``NoteCache``; writes update the store and
then the cache (write-through), so a save followed by a load of the same
bucket always observes the write.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Callable, Optional

from pydantic import TypeAdapter, ValidationError

from taskora.buckets import (
    FUTURE_NOTES_KEY,
    JOURNAL_KEY,
    Bucket,
    DateNotesBucket,
    FutureNotesBucket,
    JournalBucket,
    notes_key,
    parse_backup,
    render_backup,
)
from taskora.cache import NoteCache
from taskora.errors import BackupFormatError
from taskora.metrics import BACKUP_OPERATIONS
from taskora.models import JournalEntry, JournalList, Note, NoteList
from taskora.store import PersistentStore

logger = logging.getLogger(__name__)

DEFAULT_EXPORT_WINDOW_DAYS = 15


class NoteRepository:
    """Cached CRUD over note and journal buckets."""

    def __init__(
        self,
        store: PersistentStore,
        cache: Optional[NoteCache] = None,
        today: Callable[[], date] = date.today,
        export_window_days: int = DEFAULT_EXPORT_WINDOW_DAYS,
    ) -> None:
        self.store = store
        self.cache = cache if cache is not None else NoteCache()
        self._today = today
        self._export_window_days = export_window_days

    def today(self) -> date:
        return self._today()

    # ------------------------------------------------------------------
    # Generic bucket access
    # ------------------------------------------------------------------

    def _load(self, key: str, adapter: TypeAdapter) -> list:
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        raw = self.store.get(key)
        items: list = []
        if raw is not None:
            try:
                items = adapter.validate_json(raw)
            except ValidationError as exc:
                logger.warning("Malformed payload under %s, reading as empty: %s", key, exc)
                items = []

        self.cache.put(key, items)
        return items

    def _save(self, key: str, items: list, adapter: TypeAdapter) -> None:
        payload = adapter.dump_json(items, by_alias=True).decode("utf-8")
        self.store.set(key, payload)
        self.cache.put(key, items)

    # ------------------------------------------------------------------
    # Dated notes
    # ------------------------------------------------------------------

    def load_notes(self, day: date) -> list[Note]:
        """Notes of ``day``; empty on a missing key or malformed payload."""
        return self._load(notes_key(day), NoteList)

    def save_notes(self, day: date, notes: list[Note]) -> None:
        self._save(notes_key(day), notes, NoteList)

    def delete_notes(self, day: date) -> None:
        key = notes_key(day)
        self.store.remove(key)
        self.cache.invalidate(key)

    def invalidate_cache(self, day: date) -> None:
        self.cache.invalidate(notes_key(day))

    # ------------------------------------------------------------------
    # Future notes
    # ------------------------------------------------------------------

    def load_future_notes(self) -> list[Note]:
        return self._load(FUTURE_NOTES_KEY, NoteList)

    def save_future_notes(self, notes: list[Note]) -> None:
        self._save(FUTURE_NOTES_KEY, notes, NoteList)

    def invalidate_future_notes_cache(self) -> None:
        self.cache.invalidate(FUTURE_NOTES_KEY)

    # ------------------------------------------------------------------
    # Journal
    # ------------------------------------------------------------------

    def load_journal(self) -> list[JournalEntry]:
        return self._load(JOURNAL_KEY, JournalList)

    def save_journal(self, entries: list[JournalEntry]) -> None:
        self._save(JOURNAL_KEY, entries, JournalList)

    def invalidate_journal_cache(self) -> None:
        self.cache.invalidate(JOURNAL_KEY)

    def clear_cache(self) -> None:
        """Drop every cached bucket. Stored data is untouched."""
        self.cache.clear()

    # ------------------------------------------------------------------
    # Backup
    # ------------------------------------------------------------------

    def export_all(self) -> str:
        """Snapshot non-empty buckets around today plus future notes and journal."""
        today = self.today()
        window = self._export_window_days
        buckets: list[Bucket] = []
        for offset in range(-window, window + 1):
            day = today + timedelta(days=offset)
            notes = self.load_notes(day)
            if notes:
                buckets.append(DateNotesBucket(day, notes))

        future = self.load_future_notes()
        if future:
            buckets.append(FutureNotesBucket(future))
        journal = self.load_journal()
        if journal:
            buckets.append(JournalBucket(journal))

        BACKUP_OPERATIONS.labels(operation="export").inc()
        logger.info("Exported %d buckets", len(buckets))
        return render_backup(buckets)

    def import_all(self, blob: str) -> bool:
        """Restore a backup document.

        The whole document is validated before any bucket is written, so a
        rejected document leaves stored data untouched. On success the cache
        is cleared so later reads see the imported data.
        """
        try:
            buckets = parse_backup(blob)
        except BackupFormatError as exc:
            logger.error("Import rejected: %s", exc)
            BACKUP_OPERATIONS.labels(operation="import_failed").inc()
            return False

        for bucket in buckets:
            if isinstance(bucket, DateNotesBucket):
                self.save_notes(bucket.date, bucket.notes)
            elif isinstance(bucket, FutureNotesBucket):
                self.save_future_notes(bucket.notes)
            else:
                self.save_journal(bucket.entries)

        self.clear_cache()
        BACKUP_OPERATIONS.labels(operation="import_ok").inc()
        logger.info("Imported %d buckets", len(buckets))
        return True
