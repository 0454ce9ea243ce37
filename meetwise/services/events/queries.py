from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from pydantic import BaseModel, Field

from meetwise.domain.schemas.calendar import CalendarEvent, EventSource, EventStatus


class SortingField(str, Enum):
    START_TIME = "start_time"
    TITLE = "title"
    DURATION = "duration"
    LAST_MODIFIED = "last_modified"


class EventFilters(BaseModel):
    calendar_ids: list[str] = Field(default_factory=list)
    statuses: list[EventStatus] = Field(default_factory=list)
    sources: list[EventSource] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    all_day_only: bool = False
    multi_day_only: bool = False
    has_attendees_only: bool = False
    has_location_only: bool = False


class EventSorting(BaseModel):
    field: SortingField = SortingField.START_TIME
    ascending: bool = True


def matches(event: CalendarEvent, filters: EventFilters) -> bool:
    if filters.calendar_ids and event.calendar_id not in filters.calendar_ids:
        return False
    if filters.statuses and event.status not in filters.statuses:
        return False
    if filters.sources and event.source not in filters.sources:
        return False
    if filters.keywords:
        text = f"{event.title} {event.description or ''}".lower()
        if not any(keyword.lower() in text for keyword in filters.keywords):
            return False
    if filters.all_day_only and not event.is_all_day:
        return False
    if filters.multi_day_only and not event.is_multi_day():
        return False
    if filters.has_attendees_only and not event.attendees:
        return False
    if filters.has_location_only and not event.location:
        return False
    return True


def filter_events(events: Iterable[CalendarEvent], filters: EventFilters) -> list[CalendarEvent]:
    return [event for event in events if matches(event, filters)]


def sort_events(events: Iterable[CalendarEvent], sorting: EventSorting) -> list[CalendarEvent]:
    keys = {
        SortingField.START_TIME: lambda e: e.start,
        SortingField.TITLE: lambda e: e.title.lower(),
        SortingField.DURATION: lambda e: e.duration,
        SortingField.LAST_MODIFIED: lambda e: (e.last_modified is not None, e.last_modified or e.start),
    }
    return sorted(events, key=keys[sorting.field], reverse=not sorting.ascending)
