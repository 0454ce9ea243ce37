from __future__ import annotations

from meetwise.core.emails import is_valid_email
from meetwise.domain.errors import ValidationError
from meetwise.domain.schemas.calendar import CalendarEvent


def validate_event(event: CalendarEvent) -> None:
    """Raise ValidationError for the first problem found in ``event``."""
    if not event.id.strip():
        raise ValidationError("Event id cannot be empty")
    if not event.title.strip():
        raise ValidationError("Event title cannot be empty")
    if not event.calendar_id.strip():
        raise ValidationError("Event must belong to a calendar")
    if event.end < event.start:
        raise ValidationError("End time must be after start time")

    recurrence = event.recurrence
    if recurrence is not None:
        if recurrence.interval <= 0:
            raise ValidationError("Recurrence interval must be positive")
        if recurrence.end_date is not None and recurrence.end_date < event.start:
            raise ValidationError("Recurrence end date must be after start time")
        if recurrence.occurrences is not None and recurrence.occurrences <= 0:
            raise ValidationError("Number of occurrences must be positive")

    for attendee in event.attendees:
        if not attendee.email.strip():
            raise ValidationError("Attendee email cannot be empty")
        if not is_valid_email(attendee.email):
            raise ValidationError(f"Invalid email format: {attendee.email}")

    for reminder in event.reminders:
        if reminder.minutes_before < 0:
            raise ValidationError("Reminder minutes must not be negative")
