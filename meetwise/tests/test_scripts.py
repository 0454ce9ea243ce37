import argparse
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from meetwise.db.session import make_engine, make_session_factory
from meetwise.domain.schemas.calendar import CalendarEvent, EventSource
from meetwise.domain.schemas.scheduling import MeetingSuggestion
from meetwise.scripts.suggest_times import format_suggestion, parse_window, search_range
from meetwise.scripts.sync_calendar import build_parser, run_sync
from meetwise.services.store.event_store import EventStore

NOW = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)


class _FakeCalendarClient:
    provider = "google"

    def __init__(self) -> None:
        self.windows: list[tuple[str, datetime, datetime]] = []

    def list_events(self, calendar_id, time_min, time_max):
        self.windows.append((calendar_id, time_min, time_max))
        start = NOW + timedelta(days=1)
        return [
            CalendarEvent(
                id=f"{calendar_id}-1",
                title="Remote",
                start=start,
                end=start + timedelta(hours=1),
                calendar_id=calendar_id,
                source=EventSource.GOOGLE_CALENDAR,
            )
        ]


def test_run_sync_reports_each_calendar(capsys) -> None:
    store = EventStore(make_session_factory(make_engine("sqlite:///:memory:")))
    client = _FakeCalendarClient()

    results = run_sync(store, client, ["primary", "team"], days_back=1, days_ahead=7, now=NOW)

    out = capsys.readouterr().out
    assert [r.created_count for r in results] == [1, 1]
    assert "calendar=primary success=True created=1" in out
    assert client.windows[0] == ("primary", NOW - timedelta(days=1), NOW + timedelta(days=7))
    assert store.get_event("team-1") is not None


def test_sync_parser_collects_calendars() -> None:
    args = build_parser().parse_args(["--calendar", "a", "--calendar", "b", "--days-ahead", "3"])

    assert args.calendars == ["a", "b"]
    assert args.days_ahead == 3
    assert args.days_back == 7


def test_parse_window() -> None:
    window = parse_window("09:00 - 12:30")
    assert (window.start, window.end) == ("09:00", "12:30")

    with pytest.raises(argparse.ArgumentTypeError):
        parse_window("morning")


def test_search_range_starts_tomorrow_in_local_time() -> None:
    tz = ZoneInfo("Europe/Berlin")

    date_range = search_range(3, tz, now=NOW)

    assert date_range.start == datetime(2026, 10, 20, tzinfo=tz)
    assert date_range.end - date_range.start == timedelta(days=3)


def test_format_suggestion() -> None:
    start = datetime(2026, 10, 21, 12, 0, tzinfo=timezone.utc)
    suggestion = MeetingSuggestion(
        start=start,
        end=start + timedelta(minutes=30),
        score=0.98,
        reasons=["All attendees are available"],
        conflicts=["b@x.com"],
    )

    line = format_suggestion(1, suggestion)

    assert line == "1. Wed 2026-10-21 12:00-12:30 score=0.98 (All attendees are available) conflicts=b@x.com"
