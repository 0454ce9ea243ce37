from __future__ import annotations

from datetime import datetime
import queue
from typing import Callable

from meetwise.domain.schemas.calendar import CalendarEvent


class EventSubscription:
    """A range query that stays open.

    ``snapshot`` holds the events at subscribe time; every committed store
    mutation pushes a fresh snapshot onto the queue until ``close()``.
    """

    def __init__(
        self,
        start: datetime,
        end: datetime,
        calendar_ids: list[str] | None,
        snapshot: list[CalendarEvent],
        on_close: Callable[[EventSubscription], None],
    ) -> None:
        self.start = start
        self.end = end
        self.calendar_ids = calendar_ids
        self.snapshot = snapshot
        self._queue: queue.SimpleQueue[list[CalendarEvent]] = queue.SimpleQueue()
        self._on_close = on_close
        self.closed = False

    def publish(self, events: list[CalendarEvent]) -> None:
        if self.closed:
            return
        self.snapshot = events
        self._queue.put(events)

    def next_snapshot(self, timeout: float | None = None) -> list[CalendarEvent]:
        """Block for the next snapshot; raises queue.Empty on timeout."""
        return self._queue.get(timeout=timeout)

    def pending(self) -> int:
        return self._queue.qsize()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._on_close(self)

    def __enter__(self) -> EventSubscription:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
