from datetime import datetime, timedelta, timezone

from meetwise.domain.schemas.calendar import Attendee, CalendarEvent, Reminder
from meetwise.services.events.enrich import enrich_event, suggest_color, suggest_reminder_minutes

START = datetime(2026, 10, 21, 10, 0, tzinfo=timezone.utc)


def _event(title: str = "Focus time", minutes: int = 60, **overrides) -> CalendarEvent:
    return CalendarEvent(
        id="evt-1",
        title=title,
        start=START,
        end=START + timedelta(minutes=minutes),
        calendar_id="work",
        **overrides,
    )


def test_reminder_minutes_scale_with_duration() -> None:
    assert suggest_reminder_minutes(timedelta(hours=3)) == 30
    assert suggest_reminder_minutes(timedelta(hours=1)) == 15
    assert suggest_reminder_minutes(timedelta(minutes=45)) == 10
    assert suggest_reminder_minutes(timedelta(minutes=10)) == 5


def test_color_follows_keywords_then_attendees() -> None:
    assert suggest_color(_event("Project Deadline")) == "#F44336"
    assert suggest_color(_event("Team meeting")) == "#2196F3"
    assert suggest_color(_event("Lunch", attendees=[Attendee(email="a@x.com")])) == "#9C27B0"
    assert suggest_color(_event("Lunch")) == "#607D8B"


def test_enrich_is_deterministic() -> None:
    event = _event("Team meeting", minutes=30)

    first = enrich_event(event)
    second = enrich_event(event)

    assert first == second
    assert first.reminders[0].id == "evt-1-default"
    assert first.reminders[0].minutes_before == 10
    assert first.color == "#2196F3"


def test_enrich_keeps_caller_values() -> None:
    event = _event(color="#000000", reminders=[Reminder(id="mine", minutes_before=1)])

    assert enrich_event(event) is event
