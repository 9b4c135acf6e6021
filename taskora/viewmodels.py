"""View-models backing the notes, note-detail and journal screens.

Each view-model keeps its own working copy and persists the full bucket on
every mutation, then invalidates the bucket's cache entry so other views
reload it on their next refresh.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional

from taskora.models import JournalEntry, Note
from taskora.repository import NoteRepository

logger = logging.getLogger(__name__)


class NoteBucketRef:
    """Addresses either a dated bucket or the future-notes bucket."""

    def __init__(self, repository: NoteRepository, day: Optional[date] = None) -> None:
        self.repository = repository
        self.day = day

    @property
    def is_future(self) -> bool:
        return self.day is None

    def load(self) -> list[Note]:
        if self.day is None:
            return self.repository.load_future_notes()
        return self.repository.load_notes(self.day)

    def save(self, notes: list[Note]) -> None:
        if self.day is None:
            self.repository.save_future_notes(notes)
            self.repository.invalidate_future_notes_cache()
        else:
            self.repository.save_notes(self.day, notes)
            self.repository.invalidate_cache(self.day)

    def __repr__(self) -> str:
        return "future_notes" if self.day is None else f"notes_{self.day.isoformat()}"


class NotesListModel:
    """Editable list of notes for one bucket."""

    def __init__(
        self,
        repository: NoteRepository,
        day: Optional[date] = None,
        on_all_completed: Callable[[], None] = lambda: None,
    ) -> None:
        self.bucket = NoteBucketRef(repository, day)
        self._notes: list[Note] = []
        self._on_all_completed = on_all_completed
        self._last_all_completed = False

    # ------------------------------------------------------------------
    # UI contract
    # ------------------------------------------------------------------

    def load(self) -> list[Note]:
        """Reload from the repository, as on screen resume."""
        self.submit_list(self.bucket.load())
        return self.get_notes()

    def submit_list(self, notes: list[Note]) -> None:
        self._notes = list(notes)
        self._evaluate_completion()

    def get_notes(self) -> list[Note]:
        return list(self._notes)

    def add_note(self) -> Note:
        """Append a fresh empty note and persist."""
        note = Note()
        self._notes.append(note)
        self.save()
        self._evaluate_completion()
        return note

    def save(self) -> None:
        """Persist the working list, as on pause."""
        self.bucket.save(list(self._notes))

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def set_text(self, note_id: str, text: str) -> bool:
        note = self._find(note_id)
        if note is None:
            return False
        if note.text != text:
            note.text = text
            self.save()
        return True

    def set_completed(self, note_id: str, done: bool) -> bool:
        note = self._find(note_id)
        if note is None:
            return False
        note.is_completed = done
        self.save()
        self._evaluate_completion()
        return True

    def commit_edit(self, note_id: str) -> bool:
        """Finish editing a note; drops it if blank and not the only note.

        Returns True when the note was removed.
        """
        note = self._find(note_id)
        if note is None:
            return False
        self._evaluate_completion()
        if note.is_blank and len(self._notes) > 1:
            self._notes.remove(note)
            self.save()
            return True
        return False

    def delete_note(self, note_id: str) -> bool:
        note = self._find(note_id)
        if note is None:
            return False
        self._notes.remove(note)
        self.save()
        self._evaluate_completion()
        return True

    # ------------------------------------------------------------------
    # Completion tracking
    # ------------------------------------------------------------------

    @property
    def all_completed(self) -> bool:
        tasks = [n for n in self._notes if not n.is_blank]
        return bool(tasks) and all(n.is_completed for n in tasks)

    def _evaluate_completion(self) -> None:
        done = self.all_completed
        if done and not self._last_all_completed:
            self._last_all_completed = True
            self._on_all_completed()
        elif not done:
            self._last_all_completed = False

    def _find(self, note_id: str) -> Optional[Note]:
        for note in self._notes:
            if note.id == note_id:
                return note
        logger.warning("Note %s not found in %r", note_id, self.bucket)
        return None


class NoteDetailEditor:
    """Full-screen editor for one note addressed by bucket and id."""

    def __init__(self, repository: NoteRepository) -> None:
        self.repository = repository

    def save_text(self, note_id: str, text: str, day: Optional[date] = None) -> bool:
        bucket = NoteBucketRef(self.repository, day)
        notes = list(bucket.load())
        for note in notes:
            if note.id == note_id:
                note.text = text
                bucket.save(notes)
                return True
        logger.warning("Note with ID %s not found in %r", note_id, bucket)
        return False

    def delete(self, note_id: str, day: Optional[date] = None) -> bool:
        bucket = NoteBucketRef(self.repository, day)
        notes = list(bucket.load())
        remaining = [n for n in notes if n.id != note_id]
        if len(remaining) == len(notes):
            logger.warning("Note with ID %s not found in %r", note_id, bucket)
            return False
        bucket.save(remaining)
        return True


class JournalEditor:
    """Journal list and entry editor."""

    def __init__(
        self,
        repository: NoteRepository,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.repository = repository
        self._now = now

    def entries(self) -> list[JournalEntry]:
        """Most recently updated first."""
        return sorted(
            self.repository.load_journal(),
            key=lambda e: (e.updated_at, e.created_at, e.id),
            reverse=True,
        )

    def get(self, entry_id: str) -> Optional[JournalEntry]:
        for entry in self.repository.load_journal():
            if entry.id == entry_id:
                return entry
        return None

    def save(self, entry_id: Optional[str], content: str) -> Optional[JournalEntry]:
        """Create, update or (for blank content) delete an entry.

        Returns the saved entry, or None when it was deleted or never created.
        """
        entries = list(self.repository.load_journal())
        index = next((i for i, e in enumerate(entries) if e.id == entry_id), None)

        if not content.strip():
            if index is not None:
                del entries[index]
                self._persist(entries)
            return None

        now = self._now()
        if index is not None:
            entry = entries[index]
            entry.content = content
            entry.updated_at = now
        else:
            entry = JournalEntry(content=content, created_at=now, updated_at=now)
            if entry_id:
                entry.id = entry_id
            entries.insert(0, entry)
        self._persist(entries)
        return entry

    def _persist(self, entries: list[JournalEntry]) -> None:
        self.repository.save_journal(entries)
        self.repository.invalidate_journal_cache()
