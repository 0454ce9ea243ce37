from __future__ import annotations

from datetime import datetime, timezone
import logging
import threading
from typing import Callable

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, selectinload, sessionmaker

from meetwise.db.models.calendar import CalendarRow
from meetwise.db.models.calendar_sync import CalendarSync
from meetwise.db.models.event import EventRow
from meetwise.db.models.reminder import ReminderRow
from meetwise.domain.schemas.calendar import Calendar, CalendarEvent
from meetwise.services.store.mapper import (
    apply_calendar_to_row,
    apply_event_to_row,
    row_to_calendar,
    row_to_event,
)
from meetwise.services.store.subscriptions import EventSubscription

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def _with_children(stmt):
    return stmt.options(
        selectinload(EventRow.attendees),
        selectinload(EventRow.reminders),
        selectinload(EventRow.attachments),
    )


class EventStore:
    """Transactional local persistence for events and calendars.

    Constructed explicitly around a session factory and handed to whatever
    needs it. All session use goes through one re-entrant lock, so a reader
    never sees an event row without its matching children.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock
        self._lock = threading.RLock()
        self._subscriptions: list[EventSubscription] = []

    # reads

    def query_range(
        self,
        start: datetime,
        end: datetime,
        calendar_ids: list[str] | None = None,
    ) -> list[CalendarEvent]:
        stmt = (
            select(EventRow)
            .where(EventRow.start_time >= start)
            .where(EventRow.end_time <= end)
            .order_by(EventRow.start_time, EventRow.id)
        )
        if calendar_ids:
            stmt = stmt.where(EventRow.calendar_id.in_(calendar_ids))
        return self._fetch(stmt)

    def get_event(self, event_id: str) -> CalendarEvent | None:
        with self._lock, self._session_factory() as session:
            row = session.scalar(_with_children(select(EventRow).where(EventRow.id == event_id)))
            return row_to_event(row) if row is not None else None

    def exists(self, event_id: str) -> bool:
        with self._lock, self._session_factory() as session:
            return session.get(EventRow, event_id) is not None

    def find_conflicts(
        self,
        start: datetime,
        end: datetime,
        exclude_id: str | None = None,
    ) -> list[CalendarEvent]:
        stmt = (
            select(EventRow)
            .where(EventRow.start_time < end)
            .where(EventRow.end_time > start)
            .order_by(EventRow.start_time, EventRow.id)
        )
        if exclude_id is not None:
            stmt = stmt.where(EventRow.id != exclude_id)
        return self._fetch(stmt)

    def search_events(self, query: str, limit: int = 50) -> list[CalendarEvent]:
        pattern = f"%{query}%"
        stmt = (
            select(EventRow)
            .where(or_(EventRow.title.ilike(pattern), EventRow.description.ilike(pattern)))
            .order_by(EventRow.start_time.desc())
            .limit(limit)
        )
        return self._fetch(stmt)

    def events_with_reminders(self) -> list[CalendarEvent]:
        stmt = (
            select(EventRow)
            .where(EventRow.reminders.any(ReminderRow.enabled.is_(True)))
            .order_by(EventRow.start_time)
        )
        return self._fetch(stmt)

    def get_calendars(self) -> list[Calendar]:
        with self._lock, self._session_factory() as session:
            rows = session.scalars(select(CalendarRow).order_by(CalendarRow.name)).all()
            return [row_to_calendar(row) for row in rows]

    def get_calendar(self, calendar_id: str) -> Calendar | None:
        with self._lock, self._session_factory() as session:
            row = session.get(CalendarRow, calendar_id)
            return row_to_calendar(row) if row is not None else None

    # writes

    def upsert_event(self, event: CalendarEvent) -> CalendarEvent:
        """Insert or fully replace ``event`` and its children in one transaction.

        ``last_modified`` is assigned inside the same transaction and never
        moves backwards for a given id.
        """
        with self._lock:
            with self._session_factory() as session, session.begin():
                row = session.scalar(
                    _with_children(select(EventRow).where(EventRow.id == event.id))
                )
                now = self._clock()
                if row is None:
                    row = EventRow(id=event.id)
                    session.add(row)
                elif row.last_modified is not None and row.last_modified > now:
                    now = row.last_modified
                apply_event_to_row(row, event)
                row.last_modified = now
                session.flush()
                stored = row_to_event(row)
            self._notify()
        return stored

    def delete_event(self, event_id: str) -> bool:
        with self._lock:
            with self._session_factory() as session, session.begin():
                row = session.get(EventRow, event_id)
                if row is None:
                    return False
                session.delete(row)
            self._notify()
        return True

    def upsert_calendar(self, calendar: Calendar) -> Calendar:
        with self._lock:
            with self._session_factory() as session, session.begin():
                row = session.get(CalendarRow, calendar.id)
                if row is None:
                    row = CalendarRow(id=calendar.id)
                    session.add(row)
                apply_calendar_to_row(row, calendar)
                session.flush()
                return row_to_calendar(row)

    # remote id mapping

    def get_sync_mapping(self, event_id: str) -> CalendarSync | None:
        with self._lock, self._session_factory() as session:
            return session.scalar(select(CalendarSync).where(CalendarSync.event_id == event_id))

    def find_by_remote_id(self, provider: str, remote_event_id: str) -> CalendarEvent | None:
        with self._lock, self._session_factory() as session:
            stmt = _with_children(
                select(EventRow)
                .join(CalendarSync, CalendarSync.event_id == EventRow.id)
                .where(CalendarSync.provider == provider)
                .where(CalendarSync.remote_event_id == remote_event_id)
            )
            row = session.scalar(stmt)
            return row_to_event(row) if row is not None else None

    def record_sync(
        self,
        event_id: str,
        provider: str,
        remote_event_id: str,
        synced_at: datetime | None = None,
    ) -> None:
        with self._lock, self._session_factory() as session, session.begin():
            calendar_sync = session.scalar(
                select(CalendarSync).where(CalendarSync.event_id == event_id)
            )
            if calendar_sync is None:
                calendar_sync = CalendarSync(event_id=event_id)
                session.add(calendar_sync)
            calendar_sync.provider = provider
            calendar_sync.remote_event_id = remote_event_id
            calendar_sync.synced_at = synced_at or self._clock()

    # subscriptions

    def subscribe(
        self,
        start: datetime,
        end: datetime,
        calendar_ids: list[str] | None = None,
    ) -> EventSubscription:
        with self._lock:
            subscription = EventSubscription(
                start=start,
                end=end,
                calendar_ids=calendar_ids,
                snapshot=self.query_range(start, end, calendar_ids),
                on_close=self._unsubscribe,
            )
            self._subscriptions.append(subscription)
        return subscription

    def _unsubscribe(self, subscription: EventSubscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def _notify(self) -> None:
        for subscription in list(self._subscriptions):
            try:
                events = self.query_range(
                    subscription.start,
                    subscription.end,
                    subscription.calendar_ids,
                )
            except Exception as exc:  # noqa: BLE001
                logger.error("Failed to refresh subscription snapshot: %s", exc, exc_info=True)
                continue
            subscription.publish(events)

    def _fetch(self, stmt) -> list[CalendarEvent]:
        with self._lock, self._session_factory() as session:
            rows = session.scalars(_with_children(stmt)).all()
            return [row_to_event(row) for row in rows]
