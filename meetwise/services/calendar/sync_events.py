from __future__ import annotations

from datetime import datetime, timezone
import logging

from meetwise.domain.schemas.calendar import CalendarEvent
from meetwise.domain.schemas.sync import SyncResult, SyncState
from meetwise.services.calendar.base import RemoteCalendarClient
from meetwise.services.events.validation import validate_event
from meetwise.services.store.event_store import EventStore
from meetwise.utils.timing import Timer, format_duration

logger = logging.getLogger(__name__)

# fields owned by the store rather than by the remote record
_STORE_FIELDS = {"last_modified"}


def _same_content(local: CalendarEvent, remote: CalendarEvent) -> bool:
    return local.model_dump(exclude=_STORE_FIELDS) == remote.model_dump(exclude=_STORE_FIELDS)


def reconcile_calendar(
    store: EventStore,
    client: RemoteCalendarClient,
    calendar_id: str,
    time_min: datetime,
    time_max: datetime,
    now: datetime | None = None,
    provider: str | None = None,
) -> SyncResult:
    """Pull one remote calendar into the local store.

    Every remote record is authoritative (last write wins, no field merge).
    A failing record is reported in ``errors`` and the batch goes on.
    Deletions are not reconciled by a pull.
    """
    now = now or datetime.now(tz=timezone.utc)
    provider = provider or getattr(client, "provider", "remote")
    errors: list[str] = []
    outcomes: dict[str, SyncState] = {}
    created = 0
    updated = 0

    with Timer(f"sync {calendar_id}", logger) as timer:
        try:
            remote_events = client.list_events(calendar_id, time_min, time_max)
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to list remote events calendar=%s: %s", calendar_id, exc)
            return SyncResult(
                success=False,
                errors=[f"Failed to list events for calendar {calendar_id}: {exc}"],
                timestamp=now,
            )

        for remote_event in remote_events:
            remote_id = remote_event.id
            outcomes[remote_id] = SyncState.UNSEEN
            try:
                local = store.find_by_remote_id(provider, remote_id) or store.get_event(remote_id)
                outcomes[remote_id] = SyncState.COMPARED

                incoming = remote_event.model_copy(
                    update={"id": local.id if local else remote_id, "calendar_id": calendar_id}
                )
                validate_event(incoming)

                if local is None:
                    store.upsert_event(incoming)
                    outcomes[remote_id] = SyncState.CREATED
                    created += 1
                elif _same_content(local, incoming):
                    outcomes[remote_id] = SyncState.UNCHANGED
                else:
                    store.upsert_event(incoming)
                    outcomes[remote_id] = SyncState.UPDATED
                    updated += 1
                store.record_sync(incoming.id, provider, remote_id, synced_at=now)
            except Exception as exc:  # noqa: BLE001
                logger.error("Failed to sync event id=%s: %s", remote_id, exc, exc_info=True)
                outcomes[remote_id] = SyncState.ERROR
                errors.append(f"Failed to sync event {remote_id}: {exc}")

    logger.info(
        "Synced calendar=%s created=%s updated=%s errors=%s elapsed=%s",
        calendar_id,
        created,
        updated,
        len(errors),
        format_duration(timer.elapsed),
    )
    return SyncResult(
        success=not errors,
        created_count=created,
        updated_count=updated,
        deleted_count=0,
        errors=errors,
        timestamp=now,
        outcomes=outcomes,
    )
