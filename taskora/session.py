"""Composition root for one Taskora process.

The session owns the store, the cache, and every view that reads through
them. Lifecycle hooks (resume, low memory) and the backup entry points are
exposed here so the UI layer only talks to one object.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional

from taskora.cache import NoteCache
from taskora.config import Settings
from taskora.overdue import OverdueAggregator
from taskora.repository import NoteRepository
from taskora.store import JsonFileStore, MemoryStore, PersistentStore, RedisStore
from taskora.viewmodels import JournalEditor, NoteDetailEditor, NotesListModel
from taskora.window import DayWindow

logger = logging.getLogger(__name__)


def create_store(settings: Settings) -> PersistentStore:
    """Build the configured store, falling back to the JSON file store."""
    backend = settings.storage_backend.lower()
    if backend == "memory":
        return MemoryStore()
    if backend == "redis":
        store = RedisStore(settings.redis_url, prefix=settings.redis_prefix)
        if store.connect():
            return store
        logger.warning("Falling back to JSON file store at %s", settings.storage_path)
    elif backend != "json":
        logger.warning("Unknown storage backend %r, using json", settings.storage_backend)
    return JsonFileStore(settings.storage_path)


class Session:
    """All state for one running Taskora instance."""

    def __init__(
        self,
        settings: Settings,
        store: Optional[PersistentStore] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.settings = settings
        self.store = store if store is not None else create_store(settings)
        self.cache = NoteCache()
        self._today = today
        self.repository = NoteRepository(
            self.store,
            self.cache,
            today=today,
            export_window_days=settings.export_window_days,
        )
        self.window = DayWindow(
            self.repository,
            half_range=settings.window_half_range,
            expansion_size=settings.expansion_size,
            load_more_threshold=settings.load_more_threshold,
        )
        self.overdue = OverdueAggregator(self.repository, settings.overdue_lookback_days)
        self.journal = JournalEditor(self.repository)
        self.note_detail = NoteDetailEditor(self.repository)

    def today(self) -> date:
        return self._today()

    def start(self) -> None:
        """Build the initial views around today."""
        self.window.initialize(self.today())
        self.overdue.compute_overdue()

    def close(self) -> None:
        self.store.close()

    def notes_for(self, day: Optional[date] = None, **kwargs) -> NotesListModel:
        """Notes view-model for ``day``, or for future notes when ``day`` is None."""
        model = NotesListModel(self.repository, day, **kwargs)
        model.load()
        return model

    # ------------------------------------------------------------------
    # Resync entry points
    # ------------------------------------------------------------------

    def refresh_overdue_notes(self) -> None:
        self.overdue.compute_overdue()

    def refresh_data(self) -> None:
        """Reload every day in the window (builds it first if empty)."""
        if len(self.window) == 0:
            self.window.initialize(self.today())
        else:
            self.window.refresh_all()

    def center_to_today(self) -> int:
        return self.window.recenter(self.today())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def on_resume(self) -> None:
        """Screen became visible again.

        Returns to today when the window has drifted more than
        ``recenter_distance_days`` away, otherwise reloads in place.
        """
        today = self.today()
        pivot = self.window.pivot_date
        if pivot is None or abs((today - pivot).days) > self.settings.recenter_distance_days:
            logger.info("Too far from today, returning to %s", today)
            self.window.initialize(today)
        else:
            self.window.refresh_all()
        self.overdue.compute_overdue()

    def on_low_memory(self) -> None:
        self.repository.clear_cache()

    # ------------------------------------------------------------------
    # Backup
    # ------------------------------------------------------------------

    def export_all_data(self) -> str:
        return self.repository.export_all()

    def import_all_data(self, blob: str) -> bool:
        """Import a backup and refresh every view on success."""
        ok = self.repository.import_all(blob)
        if ok:
            self.refresh_overdue_notes()
            self.refresh_data()
        return ok
