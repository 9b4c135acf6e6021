"""Bidirectionally growing window of days around a pivot date.

The window is a contiguous, strictly increasing run of ``Day`` read-models.
It grows at either edge on demand and is never trimmed. It does no scroll
math; the UI reports its visible positions through ``maybe_expand``.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Optional

from taskora.metrics import WINDOW_EXPANSIONS, WINDOW_SIZE
from taskora.models import Day
from taskora.repository import NoteRepository

logger = logging.getLogger(__name__)

DEFAULT_HALF_RANGE = 50
DEFAULT_EXPANSION_SIZE = 20
DEFAULT_LOAD_MORE_THRESHOLD = 10


class DayWindow:
    """Ordered list of days with a centre index."""

    def __init__(
        self,
        repository: NoteRepository,
        half_range: int = DEFAULT_HALF_RANGE,
        expansion_size: int = DEFAULT_EXPANSION_SIZE,
        load_more_threshold: int = DEFAULT_LOAD_MORE_THRESHOLD,
    ) -> None:
        self.repository = repository
        self.half_range = half_range
        self.expansion_size = expansion_size
        self.load_more_threshold = load_more_threshold
        self._days: list[Day] = []
        self.pivot_date: Optional[date] = None
        self.center_index = 0
        self._expanding = False

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def days(self) -> list[Day]:
        """A snapshot copy of the window, as handed to a list adapter."""
        return list(self._days)

    @property
    def dates(self) -> list[date]:
        return [d.date for d in self._days]

    @property
    def center_day(self) -> Optional[Day]:
        if not self._days:
            return None
        return self._days[self.center_index]

    def __len__(self) -> int:
        return len(self._days)

    def index_of(self, day: date) -> Optional[int]:
        """Position of ``day`` in the window, found by offset from the first date."""
        if not self._days:
            return None
        offset = (day - self._days[0].date).days
        if 0 <= offset < len(self._days):
            return offset
        return None

    def find(self, day: date) -> Optional[Day]:
        index = self.index_of(day)
        return self._days[index] if index is not None else None

    def _make_day(self, day: date) -> Day:
        return Day(day, notes=[note.model_copy() for note in self.repository.load_notes(day)])

    # ------------------------------------------------------------------
    # Building / growing
    # ------------------------------------------------------------------

    def initialize(self, pivot_date: date) -> None:
        """Rebuild the window as ``half_range`` days either side of the pivot."""
        self.pivot_date = pivot_date
        self._days = [
            self._make_day(pivot_date + timedelta(days=offset))
            for offset in range(-self.half_range, self.half_range + 1)
        ]
        self.center_index = self.half_range
        WINDOW_EXPANSIONS.labels(direction="init").inc()
        WINDOW_SIZE.set(len(self._days))
        logger.info(
            "Generated %d days from %s to %s",
            len(self._days),
            self._days[0].date,
            self._days[-1].date,
        )

    def expand_past(self, count: Optional[int] = None) -> int:
        """Prepend days before the first date; keeps the same day centred.

        Returns the number of days added (0 while another expansion runs).
        """
        count = self.expansion_size if count is None else count
        if self._expanding or not self._days or count <= 0:
            return 0
        self._expanding = True
        try:
            first = self._days[0].date
            new_days = [self._make_day(first - timedelta(days=i)) for i in range(count, 0, -1)]
            self._days[0:0] = new_days
            self.center_index += count
        finally:
            self._expanding = False
        WINDOW_EXPANSIONS.labels(direction="past").inc()
        WINDOW_SIZE.set(len(self._days))
        logger.debug(
            "PAST LOADED: added %d days, new center=%d, total=%d",
            count,
            self.center_index,
            len(self._days),
        )
        return count

    def expand_future(self, count: Optional[int] = None) -> int:
        """Append days after the last date. Returns the number of days added."""
        count = self.expansion_size if count is None else count
        if self._expanding or not self._days or count <= 0:
            return 0
        self._expanding = True
        try:
            last = self._days[-1].date
            self._days.extend(self._make_day(last + timedelta(days=i)) for i in range(1, count + 1))
        finally:
            self._expanding = False
        WINDOW_EXPANSIONS.labels(direction="future").inc()
        WINDOW_SIZE.set(len(self._days))
        logger.debug(
            "FUTURE LOADED: added %d days, center=%d, total=%d",
            count,
            self.center_index,
            len(self._days),
        )
        return count

    def maybe_expand(self, first_visible: int, last_visible: int) -> dict[str, int]:
        """Grow whichever edge the visible range has come close to."""
        added = {"past": 0, "future": 0}
        if not self._days:
            return added
        if first_visible <= self.load_more_threshold:
            added["past"] = self.expand_past()
        # Positions shift by the prepended count.
        last_visible += added["past"]
        if last_visible >= len(self._days) - self.load_more_threshold:
            added["future"] = self.expand_future()
        return added

    # ------------------------------------------------------------------
    # Navigation / refresh
    # ------------------------------------------------------------------

    def recenter(self, target_date: date) -> int:
        """Centre on ``target_date``, rebuilding the window if it is absent."""
        index = self.index_of(target_date)
        if index is None:
            logger.info("%s not in window, regenerating around it", target_date)
            self.initialize(target_date)
        else:
            self.center_index = index
            self.pivot_date = target_date
        return self.center_index

    def refresh_all(self) -> None:
        """Invalidate and reload the notes of every day in the window."""
        for day in self._days:
            self.repository.invalidate_cache(day.date)
        self._days = [self._make_day(day.date) for day in self._days]
        logger.debug("Refreshed %d days", len(self._days))
