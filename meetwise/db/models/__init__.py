from meetwise.db.models.attachment import AttachmentRow
from meetwise.db.models.attendee import AttendeeRow
from meetwise.db.models.calendar import CalendarRow
from meetwise.db.models.calendar_sync import CalendarSync
from meetwise.db.models.event import EventRow
from meetwise.db.models.reminder import ReminderRow

__all__ = [
    "EventRow",
    "AttendeeRow",
    "ReminderRow",
    "AttachmentRow",
    "CalendarRow",
    "CalendarSync",
]
