"""Tests for taskora.repository: cached CRUD, export and import."""

from __future__ import annotations

import json
from datetime import date, datetime, timedelta

import pytest

from taskora.models import JournalEntry, Note
from taskora.repository import NoteRepository
from taskora.store import MemoryStore

TODAY = date(2024, 6, 2)


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def repo(store: MemoryStore) -> NoteRepository:
    """Return a NoteRepository over an in-memory store with a fixed today."""
    return NoteRepository(store, today=lambda: TODAY)


# ---------------------------------------------------------------------------
# Dated notes
# ---------------------------------------------------------------------------


class TestDatedNotes:
    def test_missing_key_reads_empty(self, repo: NoteRepository):
        """A date with nothing stored loads as empty."""
        assert repo.load_notes(TODAY) == []

    def test_save_then_load_returns_same_list(self, repo: NoteRepository):
        """Save then load returns the saved list itself."""
        notes = [Note(id="a", text="buy milk")]
        repo.save_notes(date(2024, 6, 1), notes)
        assert repo.load_notes(date(2024, 6, 1)) is notes

    def test_repeated_reads_same_reference(self, repo: NoteRepository, store: MemoryStore):
        """Repeated reads return the cached list."""
        store.set("notes_2024-06-01", '[{"id": "a", "text": "x", "isCompleted": false}]')
        first = repo.load_notes(date(2024, 6, 1))
        assert repo.load_notes(date(2024, 6, 1)) is first

    def test_save_writes_store_format(self, repo: NoteRepository, store: MemoryStore):
        """Saved notes are stored as camelCase JSON."""
        repo.save_notes(date(2024, 6, 1), [Note(id="a", text="buy milk")])
        raw = json.loads(store.get("notes_2024-06-01"))
        assert raw == [{"id": "a", "text": "buy milk", "isCompleted": False}]

    def test_empty_list_reads_like_missing(self, repo: NoteRepository, store: MemoryStore):
        """An empty saved list loads as empty."""
        repo.save_notes(TODAY, [])
        repo.clear_cache()
        assert repo.load_notes(TODAY) == []

    @pytest.mark.parametrize("payload", ["{broken", "null", '{"id": "a"}', "[1, 2]"])
    def test_malformed_payload_reads_empty(
        self, repo: NoteRepository, store: MemoryStore, payload: str
    ):
        """Unreadable stored payloads load as empty."""
        store.set("notes_2024-06-01", payload)
        assert repo.load_notes(date(2024, 6, 1)) == []

    def test_invalidate_rereads_store(self, repo: NoteRepository, store: MemoryStore):
        """After invalidation the store is read again."""
        day = date(2024, 6, 1)
        repo.save_notes(day, [Note(id="a", text="old")])
        store.set("notes_2024-06-01", '[{"id": "a", "text": "new", "isCompleted": false}]')

        assert repo.load_notes(day)[0].text == "old"
        repo.invalidate_cache(day)
        assert repo.load_notes(day)[0].text == "new"

    def test_invalidate_only_named_date(self, repo: NoteRepository):
        """Invalidation touches only the named date."""
        a, b = date(2024, 6, 1), date(2024, 6, 2)
        repo.save_notes(a, [Note()])
        repo.save_notes(b, [Note()])
        repo.invalidate_cache(a)
        assert "notes_2024-06-01" not in repo.cache
        assert "notes_2024-06-02" in repo.cache

    def test_delete_notes(self, repo: NoteRepository, store: MemoryStore):
        """Deleting a date removes its bucket."""
        repo.save_notes(TODAY, [Note()])
        repo.delete_notes(TODAY)
        assert store.get("notes_2024-06-02") is None
        assert repo.load_notes(TODAY) == []

    def test_clear_cache_keeps_stored_data(self, repo: NoteRepository):
        """Clearing the cache keeps stored data."""
        repo.save_notes(TODAY, [Note(id="a", text="keep me")])
        repo.clear_cache()
        assert len(repo.cache) == 0
        assert repo.load_notes(TODAY) == [Note(id="a", text="keep me")]


# ---------------------------------------------------------------------------
# Future notes / journal
# ---------------------------------------------------------------------------


class TestFixedBuckets:
    def test_future_notes_roundtrip(self, repo: NoteRepository, store: MemoryStore):
        """Future notes save and load through the cache."""
        notes = [Note(id="f", text="someday")]
        repo.save_future_notes(notes)
        assert repo.load_future_notes() is notes
        assert store.get("future_notes") is not None

    def test_future_invalidate(self, repo: NoteRepository, store: MemoryStore):
        """Invalidating future notes rereads the store."""
        repo.save_future_notes([Note(id="f", text="old")])
        store.set("future_notes", '[{"id": "f", "text": "new"}]')
        repo.invalidate_future_notes_cache()
        assert repo.load_future_notes()[0].text == "new"

    def test_journal_roundtrip(self, repo: NoteRepository):
        """Journal entries save and load with timestamps."""
        entry = JournalEntry(id="j", content="Title\nbody")
        repo.save_journal([entry])
        repo.invalidate_journal_cache()
        loaded = repo.load_journal()
        assert loaded[0].id == "j"
        assert loaded[0].content == "Title\nbody"

    def test_malformed_journal_reads_empty(self, repo: NoteRepository, store: MemoryStore):
        """An unreadable journal loads as empty."""
        store.set("journal", '[{"id": "j", "createdAt": "yesterday-ish"}]')
        assert repo.load_journal() == []


# ---------------------------------------------------------------------------
# Export / import
# ---------------------------------------------------------------------------


class TestExport:
    def test_exports_non_empty_buckets_in_window(self, repo: NoteRepository):
        """Export covers non-empty dates within 15 days of today."""
        repo.save_notes(TODAY - timedelta(days=15), [Note(id="edge", text="e")])
        repo.save_notes(TODAY, [Note(id="a", text="a")])
        repo.save_notes(TODAY + timedelta(days=1), [])
        repo.save_notes(TODAY + timedelta(days=16), [Note(id="far", text="f")])
        repo.save_future_notes([Note(id="f", text="someday")])

        doc = json.loads(repo.export_all())

        assert set(doc) == {"notes_2024-05-18", "notes_2024-06-02", "future_notes"}
        assert doc["notes_2024-06-02"] == [{"id": "a", "text": "a", "isCompleted": False}]

    def test_exports_journal_when_present(self, repo: NoteRepository):
        """The journal is exported when it has entries."""
        repo.save_journal([JournalEntry(id="j", content="hello")])
        assert "journal" in json.loads(repo.export_all())

    def test_empty_export(self, repo: NoteRepository):
        """Nothing stored exports an empty object."""
        assert json.loads(repo.export_all()) == {}


class TestImport:
    def test_roundtrip_into_fresh_store(self, repo: NoteRepository):
        """A backup restores into an empty store."""
        day = TODAY - timedelta(days=3)
        repo.save_notes(day, [Note(id="a", text="buy milk"), Note(id="b", is_completed=True)])
        repo.save_future_notes([Note(id="f", text="someday")])
        repo.save_journal(
            [JournalEntry(id="j", content="x", created_at=datetime(2024, 6, 1), updated_at=datetime(2024, 6, 1))]
        )
        blob = repo.export_all()

        target = NoteRepository(MemoryStore(), today=lambda: TODAY)
        assert target.import_all(blob) is True

        assert target.load_notes(day) == repo.load_notes(day)
        assert target.load_future_notes() == repo.load_future_notes()
        assert target.load_journal() == repo.load_journal()

    def test_import_own_export_leaves_data_unchanged(self, repo: NoteRepository):
        """Importing an own export changes nothing."""
        repo.save_notes(TODAY, [Note(id="a", text="x")])
        repo.save_future_notes([Note(id="f")])
        before = (repo.load_notes(TODAY), repo.load_future_notes())

        assert repo.import_all(repo.export_all()) is True
        assert (repo.load_notes(TODAY), repo.load_future_notes()) == before

    def test_import_clears_cache(self, repo: NoteRepository):
        """Import clears the cache."""
        repo.save_notes(TODAY, [Note()])
        repo.import_all('{"future_notes": []}')
        assert len(repo.cache) == 0

    def test_unknown_keys_ignored(self, repo: NoteRepository, store: MemoryStore):
        """Unknown keys are skipped on import."""
        ok = repo.import_all('{"theme": "dark", "future_notes": [{"id": "f", "text": "t"}]}')
        assert ok is True
        assert store.keys() == ["future_notes"]

    def test_malformed_document_fails(self, repo: NoteRepository):
        """Non-JSON input fails the import."""
        assert repo.import_all("definitely not json") is False

    def test_failed_import_writes_nothing(self, repo: NoteRepository, store: MemoryStore):
        """A bad entry anywhere aborts the import before any write."""
        repo.save_notes(TODAY, [Note(id="keep", text="original")])
        blob = json.dumps(
            {
                "notes_2024-06-02": [{"id": "new", "text": "overwrite"}],
                "notes_not-a-date": [],
            }
        )

        assert repo.import_all(blob) is False
        repo.clear_cache()
        assert repo.load_notes(TODAY) == [Note(id="keep", text="original")]
        assert store.keys() == ["notes_2024-06-02"]

    def test_duplicate_ids_reject_whole_document(self, repo: NoteRepository, store: MemoryStore):
        """A bucket repeating a note id fails the import before any write."""
        blob = json.dumps(
            {
                "future_notes": [{"id": "f", "text": "fine"}],
                "notes_2024-06-01": [
                    {"id": "a", "text": "first"},
                    {"id": "a", "text": "second"},
                ],
            }
        )

        assert repo.import_all(blob) is False
        assert store.keys() == []
        assert repo.load_notes(date(2024, 6, 1)) == []
