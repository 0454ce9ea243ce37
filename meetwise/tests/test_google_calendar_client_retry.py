from datetime import datetime, timedelta, timezone
import json
from types import SimpleNamespace

import pytest
from googleapiclient.errors import HttpError

from meetwise.domain.errors import RemoteUnavailableError
from meetwise.domain.schemas.calendar import CalendarEvent
from meetwise.services.calendar.google_calendar_service import GoogleCalendarClient


def _make_http_error(status: int, reason: str) -> HttpError:
    resp = SimpleNamespace(status=status, reason=reason)
    content = json.dumps(
        {
            "error": {
                "errors": [
                    {
                        "reason": reason,
                        "message": reason,
                    }
                ]
            }
        }
    ).encode()
    return HttpError(resp, content, uri="")


class _DummyEvents:
    def __init__(self, failures: int, error_status: int = 403, error_reason: str = "rateLimitExceeded") -> None:
        self.calls = 0
        self.failures = failures
        self.error_status = error_status
        self.error_reason = error_reason
        self.last_body = None

    def insert(self, calendarId, body):  # noqa: N802
        self.last_body = body
        return self

    def update(self, calendarId, eventId, body):  # noqa: N802
        self.last_body = body
        return self

    def execute(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise _make_http_error(self.error_status, self.error_reason)
        return {"id": f"evt-{self.calls}"}


class _DummyService:
    def __init__(self, events_obj: _DummyEvents) -> None:
        self._events = events_obj

    def events(self):  # noqa: D401
        return self._events


def _event() -> CalendarEvent:
    now = datetime.now(tz=timezone.utc)
    return CalendarEvent(id="evt", title="Test", start=now, end=now + timedelta(hours=1), calendar_id="cid")


def test_create_retries_on_rate_limit(monkeypatch) -> None:
    events_obj = _DummyEvents(failures=2)
    client = GoogleCalendarClient(
        calendar_id="cid",
        service=_DummyService(events_obj),
        allow_in_tests=True,
    )

    sleeps = []
    monkeypatch.setattr("time.sleep", lambda s: sleeps.append(s))

    result = client.create_event(_event())

    assert result == "evt-3"
    assert events_obj.calls == 3
    assert len(sleeps) == 2
    assert sleeps[1] > sleeps[0]


def test_update_gives_up_after_max_attempts(monkeypatch) -> None:
    events_obj = _DummyEvents(failures=10)
    client = GoogleCalendarClient(
        calendar_id="cid",
        service=_DummyService(events_obj),
        allow_in_tests=True,
    )
    monkeypatch.setattr("time.sleep", lambda s: None)

    with pytest.raises(RemoteUnavailableError) as excinfo:
        client.update_event(_event(), "remote-1")

    assert excinfo.value.provider == "google"
    assert events_obj.calls == 5


def test_non_rate_limit_errors_fail_fast(monkeypatch) -> None:
    events_obj = _DummyEvents(failures=1, error_status=404, error_reason="notFound")
    client = GoogleCalendarClient(
        calendar_id="cid",
        service=_DummyService(events_obj),
        allow_in_tests=True,
    )
    sleeps = []
    monkeypatch.setattr("time.sleep", lambda s: sleeps.append(s))

    with pytest.raises(RemoteUnavailableError):
        client.create_event(_event())

    assert events_obj.calls == 1
    assert sleeps == []


def test_client_is_disabled_under_pytest() -> None:
    client = GoogleCalendarClient(calendar_id="cid")

    with pytest.raises(RemoteUnavailableError):
        client.create_event(_event())
