"""Domain models: notes, days, overdue entries and journal entries.

``Note`` and ``JournalEntry`` are persisted and therefore pydantic models
serialized with their camelCase aliases. ``Day`` and ``OverdueNote`` are
transient read-models rebuilt from the repository on every load.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

DAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)
MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

PREVIEW_MAX_NOTES = 3
PREVIEW_MAX_CHARS = 50


def _new_id() -> str:
    return str(uuid4())


class Note(BaseModel):
    """A single task line inside a bucket."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=_new_id)
    text: str = ""
    is_completed: bool = Field(default=False, alias="isCompleted")

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()


class JournalEntry(BaseModel):
    """Free-form journal entry; the first line of content is its title."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=_new_id)
    content: str = ""
    created_at: datetime = Field(default_factory=datetime.now, alias="createdAt")
    updated_at: datetime = Field(default_factory=datetime.now, alias="updatedAt")

    @property
    def title(self) -> str:
        lines = self.content.splitlines()
        return lines[0].strip() if lines else ""

    @property
    def preview(self) -> str:
        return " ".join(self.content.splitlines()[1:]).strip()


NoteList = TypeAdapter(list[Note])
JournalList = TypeAdapter(list[JournalEntry])


def weekday_label(day: date) -> str:
    """English weekday name, independent of the process locale."""
    return DAY_NAMES[day.weekday()]


@dataclass
class Day:
    """One calendar day in the day window.

    Equality is structural on ``date`` and ``notes``; the weekday label is
    derived from the date and not compared.
    """

    date: date
    weekday_label: str = field(default="", compare=False)
    notes: list[Note] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.weekday_label:
            self.weekday_label = weekday_label(self.date)

    @property
    def display_title(self) -> str:
        """E.g. ``"Saturday, 1 June"``."""
        return (
            f"{DAY_NAMES[self.date.weekday()]}, "
            f"{self.date.day} {MONTH_NAMES[self.date.month - 1]}"
        )

    @property
    def notes_preview(self) -> str:
        """Up to three bullet lines of non-empty notes, or ``"No tasks"``."""
        non_empty = [n.text.strip() for n in self.notes if not n.is_blank]
        if not non_empty:
            return "No tasks"
        lines = []
        for text in non_empty[:PREVIEW_MAX_NOTES]:
            if len(text) > PREVIEW_MAX_CHARS:
                text = text[: PREVIEW_MAX_CHARS - 3] + "..."
            lines.append(f"• {text}")
        if len(non_empty) > PREVIEW_MAX_NOTES:
            lines.append("...")
        return "\n".join(lines)

    @property
    def unchecked_count(self) -> int:
        return sum(1 for n in self.notes if not n.is_completed)


@dataclass
class OverdueNote:
    """A note seen through the lens of the past date it belongs to."""

    note: Note
    date: date

    @property
    def id(self) -> str:
        return self.note.id

    @property
    def text(self) -> str:
        return self.note.text

    @text.setter
    def text(self, value: str) -> None:
        self.note.text = value

    @property
    def is_completed(self) -> bool:
        return self.note.is_completed

    @is_completed.setter
    def is_completed(self, value: bool) -> None:
        self.note.is_completed = value
