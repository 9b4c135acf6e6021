"""Overdue view: incomplete notes from the days before today.

The view only ever holds a filtered subset of each date's notes, so edits
are written back by reloading the date's full list, patching the edited note
into it, and saving the whole list.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from taskora.models import OverdueNote
from taskora.repository import NoteRepository

logger = logging.getLogger(__name__)

DEFAULT_LOOKBACK_DAYS = 30


class OverdueAggregator:
    """Builds and maintains the flattened overdue list."""

    def __init__(self, repository: NoteRepository, lookback_days: int = DEFAULT_LOOKBACK_DAYS) -> None:
        self.repository = repository
        self.lookback_days = lookback_days
        self._notes: list[OverdueNote] = []

    @property
    def notes(self) -> list[OverdueNote]:
        return list(self._notes)

    def compute_overdue(self, lookback_days: int | None = None) -> list[OverdueNote]:
        """Rebuild the view from the ``lookback_days`` dates before today.

        Each date is invalidated before loading so edits made through other
        views are picked up. Result is oldest first; notes of the same date
        keep their stored order.
        """
        lookback = self.lookback_days if lookback_days is None else lookback_days
        today = self.repository.today()
        collected: list[OverdueNote] = []
        for back in range(1, lookback + 1):
            day = today - timedelta(days=back)
            self.repository.invalidate_cache(day)
            collected.extend(
                OverdueNote(note, day)
                for note in self.repository.load_notes(day)
                if not note.is_completed
            )
        collected.sort(key=lambda o: o.date)
        self._notes = collected
        logger.info("Loaded %d overdue notes over %d days", len(collected), lookback)
        return self.notes

    def update_note(self, overdue_note: OverdueNote) -> None:
        """Persist an edit made through the overdue view."""
        day = overdue_note.date
        all_notes = list(self.repository.load_notes(day))
        for i, note in enumerate(all_notes):
            if note.id == overdue_note.id:
                all_notes[i] = overdue_note.note
                break
        else:
            all_notes.append(overdue_note.note)
        self.repository.save_notes(day, all_notes)
        self.repository.invalidate_cache(day)

        index = self._index_of(overdue_note)
        if overdue_note.is_completed:
            if index is not None:
                del self._notes[index]
        elif index is not None:
            self._notes[index] = overdue_note
        else:
            logger.warning("Note %s not found in overdue list", overdue_note.id)

    def remove_note(self, overdue_note: OverdueNote) -> bool:
        """Drop an entry from the view (the stored list is not touched)."""
        index = self._index_of(overdue_note)
        if index is None:
            logger.warning("Note %s not found in overdue list", overdue_note.id)
            return False
        del self._notes[index]
        return True

    def summary(self) -> tuple[int, int]:
        """``(total, unfinished)`` counts of the current view."""
        total = len(self._notes)
        unfinished = sum(1 for o in self._notes if not o.is_completed)
        return total, unfinished

    def _index_of(self, overdue_note: OverdueNote) -> int | None:
        for i, entry in enumerate(self._notes):
            if entry.id == overdue_note.id and entry.date == overdue_note.date:
                return i
        return None
