from __future__ import annotations

from datetime import date, datetime, time as dt_time, timedelta, timezone
import logging
import os
from pathlib import Path
import random
import time
from typing import Any, Callable
from zoneinfo import ZoneInfo

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from meetwise.config import settings
from meetwise.domain.errors import RemoteUnavailableError
from meetwise.domain.schemas.calendar import (
    Attendee,
    AttendanceStatus,
    CalendarEvent,
    EventSource,
    EventStatus,
    EventVisibility,
)
from meetwise.services.calendar.base import RemoteCalendarClient

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar"]
PROVIDER = "google"

_RESPONSE_TO_STATUS = {
    "needsAction": AttendanceStatus.PENDING,
    "accepted": AttendanceStatus.ACCEPTED,
    "declined": AttendanceStatus.DECLINED,
    "tentative": AttendanceStatus.TENTATIVE,
}
_STATUS_TO_RESPONSE = {
    AttendanceStatus.PENDING: "needsAction",
    AttendanceStatus.ACCEPTED: "accepted",
    AttendanceStatus.DECLINED: "declined",
    AttendanceStatus.TENTATIVE: "tentative",
    AttendanceStatus.DELEGATED: "needsAction",
}


class GoogleCalendarClient(RemoteCalendarClient):
    provider = PROVIDER

    def __init__(
        self,
        calendar_id: str | None = None,
        service=None,
        allow_in_tests: bool = False,
        time_zone: str | None = None,
    ) -> None:
        self.calendar_id = calendar_id or settings.GOOGLE_CALENDAR_ID
        self.time_zone = time_zone or settings.TIMEZONE
        self._disabled = bool(os.getenv("PYTEST_CURRENT_TEST")) and not allow_in_tests
        self.service = service if service is not None else (None if self._disabled else self._get_calendar_service())

    def list_events(
        self,
        calendar_id: str,
        time_min: datetime,
        time_max: datetime,
    ) -> list[CalendarEvent]:
        self._ensure_enabled()
        events: list[CalendarEvent] = []
        page_token = None
        while True:
            response = self._execute(
                "list",
                lambda: self.service.events()
                .list(
                    calendarId=calendar_id,
                    timeMin=time_min.isoformat(),
                    timeMax=time_max.isoformat(),
                    singleEvents=True,
                    orderBy="startTime",
                    pageToken=page_token,
                )
                .execute(),
            )
            for item in response.get("items", []):
                try:
                    events.append(self.parse_event(item, calendar_id))
                except (KeyError, ValueError) as exc:
                    logger.warning("Skipping unparseable Google event id=%s: %s", item.get("id"), exc)
            page_token = response.get("nextPageToken")
            if not page_token:
                return events

    def create_event(self, event: CalendarEvent) -> str:
        self._ensure_enabled()
        body = self._build_event_body(event, self.time_zone)
        response = self._execute(
            "insert",
            lambda: self.service.events().insert(calendarId=self.calendar_id, body=body).execute(),
        )
        return response["id"]

    def update_event(self, event: CalendarEvent, remote_event_id: str) -> str:
        self._ensure_enabled()
        body = self._build_event_body(event, self.time_zone)
        response = self._execute(
            "update",
            lambda: self.service.events()
            .update(calendarId=self.calendar_id, eventId=remote_event_id, body=body)
            .execute(),
        )
        return response["id"]

    def delete_event(self, remote_event_id: str) -> None:
        self._ensure_enabled()
        self._execute(
            "delete",
            lambda: self.service.events()
            .delete(calendarId=self.calendar_id, eventId=remote_event_id)
            .execute(),
        )

    def _ensure_enabled(self) -> None:
        if self._disabled:
            raise RemoteUnavailableError("Google Calendar calls are disabled in tests.", provider=PROVIDER)

    def _execute(self, operation: str, call: Callable[[], Any], attempts: int = 5) -> Any:
        backoff = 0.5
        for attempt in range(1, attempts + 1):
            try:
                return call()
            except HttpError as exc:
                if self._is_rate_limited(exc) and attempt < attempts:
                    sleep_for = backoff * (2 ** (attempt - 1)) * (1 + random.random() * 0.1)
                    time.sleep(sleep_for)
                    continue
                logger.error(
                    "Google Calendar %s failed: %s",
                    operation,
                    exc,
                    exc_info=logger.isEnabledFor(logging.DEBUG),
                )
                raise RemoteUnavailableError(f"Google Calendar {operation} failed: {exc}", provider=PROVIDER) from exc
            except OSError as exc:
                logger.error("Google Calendar %s unreachable: %s", operation, exc)
                raise RemoteUnavailableError(f"Google Calendar {operation} unreachable: {exc}", provider=PROVIDER) from exc

    def _get_calendar_service(self):
        token_path = Path(settings.GOOGLE_TOKEN_PATH)
        if not token_path.exists():
            raise FileNotFoundError(
                "Missing Google OAuth token file at "
                f"{settings.GOOGLE_TOKEN_PATH}. Run the OAuth flow to generate it."
            )

        creds = Credentials.from_authorized_user_file(settings.GOOGLE_TOKEN_PATH, SCOPES)
        return build("calendar", "v3", credentials=creds)

    @staticmethod
    def _build_event_body(event: CalendarEvent, time_zone: str = "UTC") -> dict[str, Any]:
        body: dict[str, Any] = {
            "summary": event.title,
            "status": event.status.value.lower(),
            "visibility": event.visibility.value.lower(),
        }
        if event.is_all_day:
            body["start"] = {"date": event.start.date().isoformat()}
            end_day = event.end.date()
            if end_day <= event.start.date():
                end_day = event.start.date() + timedelta(days=1)
            body["end"] = {"date": end_day.isoformat()}
        else:
            body["start"] = {"dateTime": event.start.isoformat(), "timeZone": time_zone}
            body["end"] = {"dateTime": event.end.isoformat(), "timeZone": time_zone}

        if event.description:
            body["description"] = event.description
        if event.location:
            body["location"] = event.location
        if event.attendees:
            body["attendees"] = [
                {
                    "email": attendee.email,
                    **({"displayName": attendee.name} if attendee.name else {}),
                    "responseStatus": _STATUS_TO_RESPONSE[attendee.status],
                    "optional": attendee.is_optional,
                    **({"comment": attendee.comment} if attendee.comment else {}),
                }
                for attendee in event.attendees
            ]
        if event.reminders:
            body["reminders"] = {
                "useDefault": False,
                "overrides": [
                    {
                        "method": "email" if reminder.type.value == "Email" else "popup",
                        "minutes": reminder.minutes_before,
                    }
                    for reminder in event.reminders
                    if reminder.enabled
                ],
            }
        rrule = event.metadata.get("rrule")
        if isinstance(rrule, str) and rrule:
            body["recurrence"] = [rrule]
        body["extendedProperties"] = {"private": {"meetwise_id": event.id}}
        return body

    @staticmethod
    def parse_event(item: dict[str, Any], calendar_id: str) -> CalendarEvent:
        start, is_all_day = _parse_when(item["start"])
        end, _ = _parse_when(item["end"])
        status = {
            "tentative": EventStatus.TENTATIVE,
            "cancelled": EventStatus.CANCELLED,
        }.get(item.get("status", "confirmed"), EventStatus.CONFIRMED)
        visibility = {
            "public": EventVisibility.PUBLIC,
            "private": EventVisibility.PRIVATE,
            "confidential": EventVisibility.CONFIDENTIAL,
        }.get(item.get("visibility", "default"), EventVisibility.DEFAULT)

        metadata: dict[str, str | int | float | bool | None] = {}
        if item.get("eventType"):
            metadata["event_type"] = item["eventType"]
        if item.get("recurrence"):
            metadata["rrule"] = "\n".join(item["recurrence"])
        if item.get("htmlLink"):
            metadata["html_link"] = item["htmlLink"]

        return CalendarEvent(
            id=item["id"],
            title=item.get("summary") or "(no title)",
            description=item.get("description"),
            location=item.get("location"),
            start=start,
            end=end,
            is_all_day=is_all_day,
            attendees=[
                Attendee(
                    email=attendee["email"],
                    name=attendee.get("displayName"),
                    status=_RESPONSE_TO_STATUS.get(
                        attendee.get("responseStatus", "needsAction"),
                        AttendanceStatus.PENDING,
                    ),
                    is_organizer=bool(attendee.get("organizer", False)),
                    is_optional=bool(attendee.get("optional", False)),
                    comment=attendee.get("comment"),
                )
                for attendee in item.get("attendees", [])
                if attendee.get("email")
            ],
            status=status,
            visibility=visibility,
            organizer=(item.get("organizer") or {}).get("email"),
            calendar_id=calendar_id,
            source=EventSource.GOOGLE_CALENDAR,
            metadata=metadata,
        )

    @staticmethod
    def _is_rate_limited(exc: HttpError) -> bool:
        try:
            reason = exc.error_details[0].get("reason") if exc.error_details else None
            if reason == "rateLimitExceeded":
                return True
        except (AttributeError, IndexError, TypeError):
            pass
        return getattr(exc.resp, "status", None) in {403, 429}


def _parse_when(when: dict[str, Any]) -> tuple[datetime, bool]:
    if "dateTime" in when:
        value = datetime.fromisoformat(when["dateTime"].replace("Z", "+00:00"))
        if value.tzinfo is None:
            value = value.replace(tzinfo=ZoneInfo(when.get("timeZone") or "UTC"))
        return value, False
    day = date.fromisoformat(when["date"])
    tz = ZoneInfo(when["timeZone"]) if when.get("timeZone") else timezone.utc
    return datetime.combine(day, dt_time(0, 0), tzinfo=tz), True
