"""Tests for the taskora command-line interface."""

from __future__ import annotations

import argparse
import json
from datetime import date
from pathlib import Path

import pytest

from taskora.cli import build_parser, main, parse_day
from taskora.config import Settings

DAY = "2024-06-01"


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a temp JSON store."""
    return Settings(storage_backend="json", storage_path=tmp_path / "store.json", log_level="WARNING")


def _run(settings: Settings, *argv: str) -> int:
    return main(list(argv), settings=settings)


class TestParseDay:
    def test_iso(self):
        """ISO dates parse as-is."""
        assert parse_day("2024-06-01", date(2024, 1, 1)) == date(2024, 6, 1)

    def test_relative(self):
        """Relative words resolve against today."""
        today = date(2024, 6, 2)
        assert parse_day("today", today) == today
        assert parse_day("Yesterday", today) == date(2024, 6, 1)
        assert parse_day("tomorrow", today) == date(2024, 6, 3)

    def test_future_bucket(self):
        """"future" selects the undated bucket."""
        assert parse_day("future", date(2024, 6, 2)) is None

    def test_invalid(self):
        """Unparseable dates raise an argparse error."""
        with pytest.raises(argparse.ArgumentTypeError):
            parse_day("someday", date(2024, 6, 2))


class TestParser:
    def test_command_required(self):
        """A subcommand must be given."""
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestCommands:
    def test_add_then_show(self, settings: Settings, capsys):
        """An added note is listed by show."""
        assert _run(settings, "add", DAY, "buy milk") == 0
        note_id = capsys.readouterr().out.strip()

        assert _run(settings, "show", DAY) == 0
        out = capsys.readouterr().out
        assert f"[ ] {note_id}  buy milk" in out

    def test_done_marks_completed(self, settings: Settings, capsys):
        """done completes the note and reports the finished list."""
        _run(settings, "add", DAY, "buy milk")
        note_id = capsys.readouterr().out.strip()

        assert _run(settings, "done", DAY, note_id) == 0
        assert "All tasks completed!" in capsys.readouterr().out

        _run(settings, "show", DAY)
        assert "[x]" in capsys.readouterr().out

    def test_done_unknown_note_fails(self, settings: Settings):
        """done on an unknown id exits 1."""
        assert _run(settings, "done", DAY, "missing") == 1

    def test_rm(self, settings: Settings, capsys):
        """rm removes a future note."""
        _run(settings, "add", "future", "someday")
        note_id = capsys.readouterr().out.strip()

        assert _run(settings, "rm", "future", note_id) == 0
        _run(settings, "show", "future")
        assert capsys.readouterr().out.strip() == "No tasks"

    def test_invalid_date_returns_2(self, settings: Settings):
        """An invalid DATE exits 2."""
        assert _run(settings, "show", "not-a-date") == 2

    def test_journal_write_and_list(self, settings: Settings, capsys):
        """A written entry shows up in the journal listing."""
        assert _run(settings, "journal", "--write", "Holiday\nBeach all day") == 0
        capsys.readouterr()

        _run(settings, "journal")
        out = capsys.readouterr().out
        assert "Holiday" in out
        assert "Beach all day" in out

    def test_export_import(self, settings: Settings, tmp_path: Path, capsys):
        """An exported file imports into another store."""
        _run(settings, "add", "today", "export me")
        capsys.readouterr()
        backup = tmp_path / "backup.json"

        assert _run(settings, "export", str(backup)) == 0
        doc = json.loads(backup.read_text())
        assert any(key.startswith("notes_") for key in doc)

        other = Settings(storage_backend="json", storage_path=tmp_path / "other.json", log_level="WARNING")
        assert _run(other, "import", str(backup)) == 0
        assert "Import completed" in capsys.readouterr().out

    def test_import_rejects_bad_file(self, settings: Settings, tmp_path: Path):
        """Malformed or missing backup files exit 1."""
        bad = tmp_path / "bad.json"
        bad.write_text("[not, a, backup]")
        assert _run(settings, "import", str(bad)) == 1
        assert _run(settings, "import", str(tmp_path / "missing.json")) == 1

    def test_overdue_empty(self, settings: Settings, capsys):
        """overdue reports when nothing is pending."""
        assert _run(settings, "overdue") == 0
        assert "No overdue tasks" in capsys.readouterr().out

    def test_days(self, settings: Settings, capsys):
        """days prints the span around the requested date."""
        assert _run(settings, "days", "--around", DAY, "--span", "1") == 0
        out = capsys.readouterr().out
        assert "2024-06-01  Saturday, 1 June" in out
        assert "2024-05-31" in out
        assert "2024-06-02" in out

    def test_stats(self, settings: Settings, capsys):
        """stats prints cache stats and metrics."""
        assert _run(settings, "stats") == 0
        out = capsys.readouterr().out
        assert "hit_rate" in out
        assert "taskora_cache_operations_total" in out
