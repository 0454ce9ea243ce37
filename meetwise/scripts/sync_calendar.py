from __future__ import annotations

import argparse
from datetime import datetime, timedelta, timezone
import logging

from meetwise.config import settings
from meetwise.core.env import is_remote_sync_enabled, load_env
from meetwise.db.migrations.sqlite import ensure_sqlite_schema
from meetwise.db.session import make_engine, make_session_factory
from meetwise.domain.schemas.sync import SyncResult
from meetwise.logging import configure_logging
from meetwise.services.calendar.base import RemoteCalendarClient
from meetwise.services.calendar.google_calendar_service import GoogleCalendarClient
from meetwise.services.calendar.sync_events import reconcile_calendar
from meetwise.services.store.event_store import EventStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pull remote calendar events into the local store.")
    parser.add_argument(
        "--calendar",
        action="append",
        dest="calendars",
        default=None,
        help="Remote calendar id to pull (repeatable, default from GOOGLE_CALENDAR_ID)",
    )
    parser.add_argument("--days-back", type=int, default=7, help="Days before today to include")
    parser.add_argument("--days-ahead", type=int, default=60, help="Days after today to include")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def run_sync(
    store: EventStore,
    client: RemoteCalendarClient,
    calendar_ids: list[str],
    days_back: int,
    days_ahead: int,
    now: datetime | None = None,
) -> list[SyncResult]:
    now = now or datetime.now(tz=timezone.utc)
    time_min = now - timedelta(days=days_back)
    time_max = now + timedelta(days=days_ahead)
    results = []
    for calendar_id in calendar_ids:
        result = reconcile_calendar(store, client, calendar_id, time_min, time_max, now=now)
        print(
            f"calendar={calendar_id} success={result.success} created={result.created_count} "
            f"updated={result.updated_count} errors={len(result.errors)}"
        )
        for error in result.errors:
            print(f"  - {error}")
        results.append(result)
    return results


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    load_env()
    configure_logging("DEBUG" if args.verbose else None)

    if not is_remote_sync_enabled():
        logger.info("Remote sync disabled via MEETWISE_REMOTE_SYNC, nothing to do")
        return

    engine = make_engine(settings.DATABASE_URL, create_schema=False)
    ensure_sqlite_schema(engine)
    store = EventStore(make_session_factory(engine))
    client = GoogleCalendarClient(calendar_id=settings.GOOGLE_CALENDAR_ID)
    results = run_sync(
        store,
        client,
        args.calendars or [settings.GOOGLE_CALENDAR_ID],
        args.days_back,
        args.days_ahead,
    )
    if not all(result.success for result in results):
        raise SystemExit(1)


if __name__ == "__main__":
    main()
