from __future__ import annotations

from pydantic import TypeAdapter

from meetwise.db.models.attachment import AttachmentRow
from meetwise.db.models.attendee import AttendeeRow
from meetwise.db.models.calendar import CalendarRow
from meetwise.db.models.event import EventRow
from meetwise.db.models.reminder import ReminderRow
from meetwise.domain.schemas.calendar import (
    Attachment,
    Attendee,
    AttendanceStatus,
    Calendar,
    CalendarEvent,
    EventSource,
    EventStatus,
    EventVisibility,
    MetadataValue,
    RecurrenceRule,
    Reminder,
    ReminderType,
)

_metadata_adapter = TypeAdapter(dict[str, MetadataValue])


def encode_metadata(metadata: dict[str, MetadataValue]) -> str | None:
    if not metadata:
        return None
    return _metadata_adapter.dump_json(metadata).decode()


def decode_metadata(raw: str | None) -> dict[str, MetadataValue]:
    if not raw:
        return {}
    return _metadata_adapter.validate_json(raw)


def encode_recurrence(rule: RecurrenceRule | None) -> str | None:
    if rule is None:
        return None
    return rule.model_dump_json()


def decode_recurrence(raw: str | None) -> RecurrenceRule | None:
    if not raw:
        return None
    return RecurrenceRule.model_validate_json(raw)


def row_to_event(row: EventRow) -> CalendarEvent:
    return CalendarEvent(
        id=row.id,
        title=row.title,
        description=row.description,
        location=row.location,
        start=row.start_time,
        end=row.end_time,
        is_all_day=row.is_all_day,
        attendees=[
            Attendee(
                email=a.email,
                name=a.name,
                status=AttendanceStatus(a.status),
                is_organizer=a.is_organizer,
                is_optional=a.is_optional,
                comment=a.comment,
            )
            for a in row.attendees
        ],
        recurrence=decode_recurrence(row.recurrence_json),
        reminders=[
            Reminder(
                id=r.reminder_id,
                type=ReminderType(r.type),
                minutes_before=r.minutes_before,
                enabled=r.enabled,
            )
            for r in row.reminders
        ],
        attachments=[
            Attachment(
                id=a.attachment_id,
                name=a.name,
                mime_type=a.mime_type,
                size=a.size,
                url=a.url,
                local_path=a.local_path,
            )
            for a in row.attachments
        ],
        color=row.color,
        visibility=EventVisibility(row.visibility),
        status=EventStatus(row.status),
        organizer=row.organizer,
        calendar_id=row.calendar_id,
        source=EventSource(row.source),
        last_modified=row.last_modified,
        metadata=decode_metadata(row.metadata_json),
    )


def apply_event_to_row(row: EventRow, event: CalendarEvent) -> None:
    """Full replace: scalar columns are overwritten and children rebuilt."""
    row.calendar_id = event.calendar_id
    row.title = event.title
    row.description = event.description
    row.location = event.location
    row.start_time = event.start
    row.end_time = event.end
    row.is_all_day = event.is_all_day
    row.color = event.color
    row.visibility = event.visibility.value
    row.status = event.status.value
    row.organizer = event.organizer
    row.source = event.source.value
    row.recurrence_json = encode_recurrence(event.recurrence)
    row.metadata_json = encode_metadata(event.metadata)

    row.attendees = [
        AttendeeRow(
            position=index,
            email=attendee.email,
            name=attendee.name,
            status=attendee.status.value,
            is_organizer=attendee.is_organizer,
            is_optional=attendee.is_optional,
            comment=attendee.comment,
        )
        for index, attendee in enumerate(event.attendees)
    ]
    row.reminders = [
        ReminderRow(
            position=index,
            reminder_id=reminder.id,
            type=reminder.type.value,
            minutes_before=reminder.minutes_before,
            enabled=reminder.enabled,
        )
        for index, reminder in enumerate(event.reminders)
    ]
    row.attachments = [
        AttachmentRow(
            position=index,
            attachment_id=attachment.id,
            name=attachment.name,
            mime_type=attachment.mime_type,
            size=attachment.size,
            url=attachment.url,
            local_path=attachment.local_path,
        )
        for index, attachment in enumerate(event.attachments)
    ]


def row_to_calendar(row: CalendarRow) -> Calendar:
    return Calendar(
        id=row.id,
        name=row.name,
        description=row.description,
        color=row.color,
        is_visible=row.is_visible,
        is_sync_enabled=row.is_sync_enabled,
        source=EventSource(row.source),
        account_name=row.account_name,
        timezone=row.timezone,
        can_write=row.can_write,
        metadata=decode_metadata(row.metadata_json),
    )


def apply_calendar_to_row(row: CalendarRow, calendar: Calendar) -> None:
    row.name = calendar.name
    row.description = calendar.description
    row.color = calendar.color
    row.is_visible = calendar.is_visible
    row.is_sync_enabled = calendar.is_sync_enabled
    row.source = calendar.source.value
    row.account_name = calendar.account_name
    row.timezone = calendar.timezone
    row.can_write = calendar.can_write
    row.metadata_json = encode_metadata(calendar.metadata)
