from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum

from pydantic import AwareDatetime, BaseModel, Field

MetadataValue = str | int | float | bool | None


class EventVisibility(str, Enum):
    DEFAULT = "Default"
    PUBLIC = "Public"
    PRIVATE = "Private"
    CONFIDENTIAL = "Confidential"


class EventStatus(str, Enum):
    TENTATIVE = "Tentative"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"


class AttendanceStatus(str, Enum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    DECLINED = "Declined"
    TENTATIVE = "Tentative"
    DELEGATED = "Delegated"


class EventSource(str, Enum):
    LOCAL = "Local"
    GOOGLE_CALENDAR = "GoogleCalendar"
    OUTLOOK = "Outlook"
    APPLE_CALENDAR = "AppleCalendar"
    OTHER = "Other"


class RecurrenceFrequency(str, Enum):
    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    YEARLY = "Yearly"


class ReminderType(str, Enum):
    NOTIFICATION = "Notification"
    EMAIL = "Email"
    SMS = "SMS"


class Attendee(BaseModel):
    email: str
    name: str | None = None
    status: AttendanceStatus = AttendanceStatus.PENDING
    is_organizer: bool = False
    is_optional: bool = False
    comment: str | None = None


class RecurrenceRule(BaseModel):
    """Carried on an event as-is; occurrences are never expanded here."""

    frequency: RecurrenceFrequency
    interval: int = 1
    end_date: AwareDatetime | None = None
    occurrences: int | None = None
    days_of_week: list[int] = Field(default_factory=list)
    day_of_month: int | None = None
    exceptions: list[AwareDatetime] = Field(default_factory=list)


class Reminder(BaseModel):
    id: str
    type: ReminderType = ReminderType.NOTIFICATION
    minutes_before: int
    enabled: bool = True


class Attachment(BaseModel):
    id: str
    name: str
    mime_type: str
    size: int
    url: str | None = None
    local_path: str | None = None


class CalendarEvent(BaseModel):
    id: str
    title: str
    start: AwareDatetime
    end: AwareDatetime
    calendar_id: str
    description: str | None = None
    location: str | None = None
    is_all_day: bool = False
    attendees: list[Attendee] = Field(default_factory=list)
    recurrence: RecurrenceRule | None = None
    reminders: list[Reminder] = Field(default_factory=list)
    attachments: list[Attachment] = Field(default_factory=list)
    color: str | None = None
    visibility: EventVisibility = EventVisibility.DEFAULT
    status: EventStatus = EventStatus.CONFIRMED
    organizer: str | None = None
    source: EventSource = EventSource.LOCAL
    last_modified: AwareDatetime | None = None
    metadata: dict[str, MetadataValue] = Field(default_factory=dict)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def is_multi_day(self) -> bool:
        return self.start.date() != self.end.date()

    def is_ongoing(self, now: datetime) -> bool:
        return self.start < now < self.end

    def is_upcoming(self, now: datetime) -> bool:
        return self.start > now

    def has_ended(self, now: datetime) -> bool:
        return self.end < now

    def conflicts_with(self, other: CalendarEvent) -> bool:
        return self.start < other.end and self.end > other.start


class Calendar(BaseModel):
    id: str
    name: str
    color: str = "#2196F3"
    description: str | None = None
    is_visible: bool = True
    is_sync_enabled: bool = True
    source: EventSource = EventSource.LOCAL
    account_name: str | None = None
    timezone: str = "UTC"
    can_write: bool = True
    metadata: dict[str, MetadataValue] = Field(default_factory=dict)
