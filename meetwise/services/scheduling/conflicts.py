from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from meetwise.domain.schemas.calendar import CalendarEvent
from meetwise.domain.schemas.scheduling import AvailabilityStatus, TimeSlot


def intervals_overlap(
    a_start: datetime,
    a_end: datetime,
    b_start: datetime,
    b_end: datetime,
) -> bool:
    # half-open: a shared boundary point is not an overlap
    return a_start < b_end and a_end > b_start


def find_conflicts(
    start: datetime,
    end: datetime,
    events: Iterable[CalendarEvent],
    exclude_id: str | None = None,
) -> list[CalendarEvent]:
    return [
        event
        for event in events
        if event.id != exclude_id and intervals_overlap(start, end, event.start, event.end)
    ]


def slot_conflicts(
    start: datetime,
    end: datetime,
    slots: Iterable[TimeSlot],
    statuses: frozenset[AvailabilityStatus] = frozenset(
        {AvailabilityStatus.BUSY, AvailabilityStatus.OUT_OF_OFFICE}
    ),
) -> list[TimeSlot]:
    return [
        slot
        for slot in slots
        if slot.availability in statuses and intervals_overlap(start, end, slot.start, slot.end)
    ]
