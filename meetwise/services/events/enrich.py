from __future__ import annotations

from datetime import timedelta

from meetwise.domain.schemas.calendar import CalendarEvent, Reminder, ReminderType

_COLOR_KEYWORDS = [
    ("meeting", "#2196F3"),
    ("deadline", "#F44336"),
    ("personal", "#4CAF50"),
    ("birthday", "#FF9800"),
]
ATTENDEE_COLOR = "#9C27B0"
DEFAULT_COLOR = "#607D8B"


def suggest_reminder_minutes(duration: timedelta) -> int:
    if duration >= timedelta(hours=2):
        return 30
    if duration >= timedelta(hours=1):
        return 15
    if duration >= timedelta(minutes=30):
        return 10
    return 5


def suggest_color(event: CalendarEvent) -> str:
    title = event.title.lower()
    for keyword, color in _COLOR_KEYWORDS:
        if keyword in title:
            return color
    if event.attendees:
        return ATTENDEE_COLOR
    return DEFAULT_COLOR


def enrich_event(event: CalendarEvent) -> CalendarEvent:
    """Fill a default reminder and color; the same input always gives the same output."""
    updates = {}
    if not event.reminders:
        updates["reminders"] = [
            Reminder(
                id=f"{event.id}-default",
                type=ReminderType.NOTIFICATION,
                minutes_before=suggest_reminder_minutes(event.duration),
            )
        ]
    if not event.color:
        updates["color"] = suggest_color(event)
    return event.model_copy(update=updates) if updates else event
