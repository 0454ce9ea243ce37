from __future__ import annotations

from datetime import datetime
from typing import Protocol

from meetwise.domain.schemas.calendar import CalendarEvent


class RemoteCalendarClient(Protocol):
    """One external calendar provider.

    Implementations raise ``RemoteUnavailableError`` for any provider-side
    failure (network, auth, rate limit) so callers can skip instead of abort.
    """

    provider: str

    def list_events(
        self,
        calendar_id: str,
        time_min: datetime,
        time_max: datetime,
    ) -> list[CalendarEvent]:
        ...

    def create_event(self, event: CalendarEvent) -> str:
        ...

    def update_event(self, event: CalendarEvent, remote_event_id: str) -> str:
        ...

    def delete_event(self, remote_event_id: str) -> None:
        ...
