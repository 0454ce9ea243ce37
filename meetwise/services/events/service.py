from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime, timedelta, timezone
import logging
from typing import TypeVar
import uuid

from meetwise.domain.errors import PartialBatchFailure
from meetwise.domain.schemas.calendar import (
    AttendanceStatus,
    Attendee,
    Calendar,
    CalendarEvent,
    EventSource,
    EventStatus,
    RecurrenceRule,
)
from meetwise.domain.schemas.scheduling import (
    DateRange,
    SuggestionOptions,
    SuggestionRequest,
    TimeRange,
)
from meetwise.domain.schemas.sync import MutationResult
from meetwise.services.calendar.base import RemoteCalendarClient
from meetwise.services.events.enrich import enrich_event
from meetwise.services.events.queries import (
    EventFilters,
    EventSorting,
    filter_events,
    sort_events,
)
from meetwise.services.events.validation import validate_event
from meetwise.services.scheduling.availability import AvailabilitySource
from meetwise.services.scheduling.suggest import suggest_meeting_times
from meetwise.services.store.event_store import EventStore

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def generate_event_id() -> str:
    return f"event_{uuid.uuid4().hex}"


class EventService:
    """Local-first event mutations.

    The local write is committed first and decides the outcome. Remote
    propagation runs afterwards; its failure becomes a warning on the
    returned MutationResult and is never raised.
    """

    def __init__(
        self,
        store: EventStore,
        remote_clients: Mapping[EventSource, RemoteCalendarClient] | None = None,
        remote_enabled: bool = True,
    ) -> None:
        self.store = store
        self.remote_clients = dict(remote_clients or {})
        self.remote_enabled = remote_enabled

    # mutations

    def create_event(self, event: CalendarEvent, enrich: bool = True) -> MutationResult:
        validate_event(event)
        if enrich:
            event = enrich_event(event)
        stored = self.store.upsert_event(event)
        result = MutationResult(event=stored)

        client = self._client_for(stored)
        if client is None:
            return result
        try:
            remote_event_id = client.create_event(stored)
            self.store.record_sync(stored.id, client.provider, remote_event_id)
            result.remote_synced = True
        except Exception as exc:  # noqa: BLE001
            logger.warning("Remote create failed for event id=%s: %s", stored.id, exc)
            result.warnings.append(f"Remote create failed: {exc}")
        return result

    def update_event(self, event: CalendarEvent) -> MutationResult:
        validate_event(event)
        if not self.store.exists(event.id):
            logger.info("Update of unknown event id=%s ignored", event.id)
            return MutationResult()
        stored = self.store.upsert_event(event)
        result = MutationResult(event=stored)

        client = self._client_for(stored)
        if client is None:
            return result
        try:
            mapping = self.store.get_sync_mapping(stored.id)
            if mapping is not None and mapping.remote_event_id:
                remote_event_id = client.update_event(stored, mapping.remote_event_id)
            else:
                remote_event_id = client.create_event(stored)
            self.store.record_sync(stored.id, client.provider, remote_event_id)
            result.remote_synced = True
        except Exception as exc:  # noqa: BLE001
            logger.warning("Remote update failed for event id=%s: %s", stored.id, exc)
            result.warnings.append(f"Remote update failed: {exc}")
        return result

    def delete_event(self, event_id: str) -> MutationResult:
        existing = self.store.get_event(event_id)
        if existing is None:
            logger.info("Delete of unknown event id=%s ignored", event_id)
            return MutationResult()
        mapping = self.store.get_sync_mapping(event_id)
        self.store.delete_event(event_id)
        result = MutationResult(event=existing)

        client = self._client_for(existing)
        if client is None:
            return result
        if mapping is None or not mapping.remote_event_id:
            logger.info("Event id=%s was never pushed remotely, skipping remote delete", event_id)
            return result
        try:
            client.delete_event(mapping.remote_event_id)
            result.remote_synced = True
        except Exception as exc:  # noqa: BLE001
            logger.warning("Remote delete failed for event id=%s: %s", event_id, exc)
            result.warnings.append(f"Remote delete failed: {exc}")
        return result

    def create_recurring_event(
        self,
        event: CalendarEvent,
        recurrence: RecurrenceRule,
        enrich: bool = True,
    ) -> MutationResult:
        return self.create_event(event.model_copy(update={"recurrence": recurrence}), enrich=enrich)

    # batches: sequential, stop at the first failure

    def batch_create_events(self, events: list[CalendarEvent], enrich: bool = True) -> list[MutationResult]:
        return _run_batch(events, lambda event: self.create_event(event, enrich=enrich))

    def batch_update_events(self, events: list[CalendarEvent]) -> list[MutationResult]:
        return _run_batch(events, self.update_event)

    def batch_delete_events(self, event_ids: list[str]) -> list[MutationResult]:
        return _run_batch(event_ids, self.delete_event)

    # reads

    def get_event(self, event_id: str) -> CalendarEvent | None:
        return self.store.get_event(event_id)

    def get_events(
        self,
        start: datetime,
        end: datetime,
        filters: EventFilters | None = None,
        sorting: EventSorting | None = None,
    ) -> list[CalendarEvent]:
        filters = filters or EventFilters()
        events = self.store.query_range(start, end, filters.calendar_ids or None)
        return sort_events(filter_events(events, filters), sorting or EventSorting())

    def search_events(
        self,
        query: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[CalendarEvent]:
        events = self.store.search_events(query)
        if start is not None and end is not None:
            events = [e for e in events if e.start >= start and e.end <= end]
        return events

    def conflicting_events(
        self,
        start: datetime,
        end: datetime,
        exclude_id: str | None = None,
    ) -> list[CalendarEvent]:
        return self.store.find_conflicts(start, end, exclude_id)

    def events_with_reminders(self) -> list[CalendarEvent]:
        return self.store.events_with_reminders()

    def upcoming_events(
        self,
        now: datetime | None = None,
        limit: int = 10,
        filters: EventFilters | None = None,
    ) -> list[CalendarEvent]:
        now = now or datetime.now(tz=timezone.utc)
        events = self.get_events(now, now + timedelta(days=31), filters)
        return [e for e in events if e.is_upcoming(now)][:limit]

    def ongoing_events(
        self,
        now: datetime | None = None,
        filters: EventFilters | None = None,
    ) -> list[CalendarEvent]:
        now = now or datetime.now(tz=timezone.utc)
        events = self.store.find_conflicts(now, now + timedelta(microseconds=1))
        return [e for e in filter_events(events, filters or EventFilters()) if e.is_ongoing(now)]

    def get_calendars(self) -> list[Calendar]:
        return self.store.get_calendars()

    def save_calendar(self, calendar: Calendar) -> Calendar:
        return self.store.upsert_calendar(calendar)

    # meetings

    async def create_meeting(
        self,
        title: str,
        duration_minutes: int,
        attendees: list[str],
        preferred_window: TimeRange,
        date_range: DateRange,
        calendar_id: str,
        availability_source: AvailabilitySource,
        description: str | None = None,
        source: EventSource = EventSource.LOCAL,
        options: SuggestionOptions | None = None,
        now: datetime | None = None,
        timeout: float | None = None,
    ) -> MutationResult:
        """Book the best suggested slot as a tentative meeting.

        Returns an empty MutationResult when no slot qualifies.
        """
        request = SuggestionRequest(
            duration_minutes=duration_minutes,
            attendees=attendees,
            preferred_windows=[preferred_window],
            date_range=date_range,
            options=options or SuggestionOptions(),
        )
        suggestions = await suggest_meeting_times(
            request,
            availability_source,
            now=now,
            timeout=timeout,
        )
        if not suggestions:
            logger.info("No suitable meeting times found for title=%s", title)
            return MutationResult(warnings=["No suitable meeting times found"])

        best = suggestions[0]
        meeting = CalendarEvent(
            id=generate_event_id(),
            title=title,
            description=description,
            start=best.start,
            end=best.end,
            attendees=[Attendee(email=email, status=AttendanceStatus.PENDING) for email in attendees],
            calendar_id=calendar_id,
            status=EventStatus.TENTATIVE,
            source=source,
        )
        return self.create_event(meeting)

    def _client_for(self, event: CalendarEvent) -> RemoteCalendarClient | None:
        if not self.remote_enabled or event.source == EventSource.LOCAL:
            return None
        client = self.remote_clients.get(event.source)
        if client is None:
            logger.debug("No remote client for source=%s", event.source.value)
        return client


def _run_batch(items: list[T], operation: Callable[[T], R]) -> list[R]:
    completed: list[R] = []
    for index, item in enumerate(items):
        try:
            completed.append(operation(item))
        except Exception as exc:
            logger.error("Batch aborted at item %s: %s", index, exc)
            raise PartialBatchFailure(index, exc, completed) from exc
    return completed
