from __future__ import annotations

import asyncio
from collections.abc import Iterable
from datetime import timedelta
import logging
from typing import Protocol

from meetwise.domain.schemas.calendar import CalendarEvent, EventStatus
from meetwise.domain.schemas.scheduling import (
    AvailabilityStatus,
    DateRange,
    ScoringWeights,
    TimeSlot,
)
from meetwise.services.calendar.base import RemoteCalendarClient
from meetwise.services.scheduling.conflicts import find_conflicts, intervals_overlap
from meetwise.services.store.event_store import EventStore

logger = logging.getLogger(__name__)

OUT_OF_OFFICE_EVENT_TYPE = "outOfOffice"

# strongest status wins when several events cover one step
_STATUS_RANK = {
    AvailabilityStatus.AVAILABLE: 0,
    AvailabilityStatus.TENTATIVE: 1,
    AvailabilityStatus.BUSY: 2,
    AvailabilityStatus.OUT_OF_OFFICE: 3,
}


class AvailabilitySource(Protocol):
    async def availability(self, attendee: str, date_range: DateRange) -> list[TimeSlot]:
        ...


def event_availability(event: CalendarEvent) -> AvailabilityStatus | None:
    if event.status == EventStatus.CANCELLED:
        return None
    if event.metadata.get("event_type") == OUT_OF_OFFICE_EVENT_TYPE:
        return AvailabilityStatus.OUT_OF_OFFICE
    if event.status == EventStatus.TENTATIVE:
        return AvailabilityStatus.TENTATIVE
    return AvailabilityStatus.BUSY


def build_availability(
    events: Iterable[CalendarEvent],
    date_range: DateRange,
    step_minutes: int = 15,
) -> list[TimeSlot]:
    """Step through the range and merge equal neighbours into intervals."""
    events = [event for event in events if event_availability(event) is not None]
    step = timedelta(minutes=step_minutes)
    merged: list[TimeSlot] = []
    cursor = date_range.start

    while cursor < date_range.end:
        slot_end = min(cursor + step, date_range.end)
        conflicts = find_conflicts(cursor, slot_end, events)
        status = AvailabilityStatus.AVAILABLE
        for event in conflicts:
            candidate = event_availability(event)
            if _STATUS_RANK[candidate] > _STATUS_RANK[status]:
                status = candidate
        conflict_ids = [event.id for event in conflicts]

        previous = merged[-1] if merged else None
        if previous is not None and previous.availability == status and previous.end == cursor:
            previous.end = slot_end
            previous.conflicts.extend(i for i in conflict_ids if i not in previous.conflicts)
        else:
            merged.append(
                TimeSlot(start=cursor, end=slot_end, availability=status, conflicts=conflict_ids)
            )
        cursor = slot_end

    return merged


class StoreAvailabilitySource:
    """Availability of a local user, read from the local event store."""

    def __init__(
        self,
        store: EventStore,
        step_minutes: int = 15,
        calendar_ids: list[str] | None = None,
    ) -> None:
        self.store = store
        self.step_minutes = step_minutes
        self.calendar_ids = calendar_ids

    def _load(self, date_range: DateRange) -> list[TimeSlot]:
        events = self.store.find_conflicts(date_range.start, date_range.end)
        if self.calendar_ids:
            events = [event for event in events if event.calendar_id in self.calendar_ids]
        return build_availability(events, date_range, self.step_minutes)

    async def availability(self, attendee: str, date_range: DateRange) -> list[TimeSlot]:
        return await asyncio.to_thread(self._load, date_range)


class RemoteAvailabilitySource:
    """Availability of someone else, read from their calendar on a provider.

    The attendee id is used as the remote calendar id, which is how shared
    calendars are addressed on Google Calendar.
    """

    def __init__(self, client: RemoteCalendarClient, step_minutes: int = 15) -> None:
        self.client = client
        self.step_minutes = step_minutes

    def _load(self, attendee: str, date_range: DateRange) -> list[TimeSlot]:
        events = self.client.list_events(attendee, date_range.start, date_range.end)
        return build_availability(events, date_range, self.step_minutes)

    async def availability(self, attendee: str, date_range: DateRange) -> list[TimeSlot]:
        return await asyncio.to_thread(self._load, attendee, date_range)


class RoutingAvailabilitySource:
    def __init__(
        self,
        local_attendees: Iterable[str],
        local: AvailabilitySource,
        remote: AvailabilitySource | None = None,
    ) -> None:
        self.local_attendees = {a.strip().lower() for a in local_attendees}
        self.local = local
        self.remote = remote

    async def availability(self, attendee: str, date_range: DateRange) -> list[TimeSlot]:
        if attendee.strip().lower() in self.local_attendees:
            return await self.local.availability(attendee, date_range)
        if self.remote is None:
            logger.info("No remote availability source for attendee=%s", attendee)
            return []
        return await self.remote.availability(attendee, date_range)


async def _fetch_one(source: AvailabilitySource, attendee: str, date_range: DateRange) -> list[TimeSlot]:
    try:
        return await source.availability(attendee, date_range)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Availability fetch failed for attendee=%s: %s", attendee, exc)
        return []


async def fetch_availability(
    attendees: list[str],
    date_range: DateRange,
    source: AvailabilitySource,
    timeout: float | None = None,
) -> dict[str, list[TimeSlot]]:
    """Fetch every attendee concurrently.

    A failed or timed-out attendee maps to ``[]``, which scores as fully
    unavailable. Cancelling the caller cancels every outstanding fetch.
    """
    if not attendees:
        return {}

    tasks = {
        attendee: asyncio.create_task(_fetch_one(source, attendee, date_range))
        for attendee in dict.fromkeys(attendees)
    }
    try:
        _, pending = await asyncio.wait(tasks.values(), timeout=timeout)
    finally:
        for task in tasks.values():
            if not task.done():
                task.cancel()

    results: dict[str, list[TimeSlot]] = {}
    for attendee, task in tasks.items():
        if task in pending:
            logger.warning("Availability fetch timed out for attendee=%s", attendee)
            results[attendee] = []
        else:
            results[attendee] = task.result()
    return results


def attendee_score(slot: TimeSlot, intervals: list[TimeSlot]) -> float:
    score = 0.0
    for interval in intervals:
        if not intervals_overlap(slot.start, slot.end, interval.start, interval.end):
            continue
        if interval.availability == AvailabilityStatus.AVAILABLE:
            if interval.start <= slot.start and interval.end >= slot.end:
                return 1.0
            score = max(score, 0.8)
        elif interval.availability == AvailabilityStatus.TENTATIVE:
            score = max(score, 0.3)
    return score


def availability_score(
    slot: TimeSlot,
    attendees: list[str],
    availability: dict[str, list[TimeSlot]],
    weights: ScoringWeights | None = None,
) -> float:
    if not attendees:
        return 1.0
    weights = weights or ScoringWeights()
    scores = [attendee_score(slot, availability.get(attendee, [])) for attendee in attendees]
    mean = sum(scores) / len(scores)
    breadth = sum(1 for s in scores if s > 0.5) / len(scores)
    return weights.availability_mean * mean + weights.availability_breadth * breadth
