from __future__ import annotations

import argparse
import asyncio
from datetime import datetime, time, timedelta
import logging
from zoneinfo import ZoneInfo

from meetwise.config import settings
from meetwise.core.emails import normalize_email
from meetwise.core.env import is_remote_sync_enabled, load_env
from meetwise.db.migrations.sqlite import ensure_sqlite_schema
from meetwise.db.session import make_engine, make_session_factory
from meetwise.domain.schemas.scheduling import (
    DateRange,
    MeetingSuggestion,
    SuggestionOptions,
    SuggestionRequest,
    TimeRange,
)
from meetwise.logging import configure_logging
from meetwise.services.calendar.google_calendar_service import GoogleCalendarClient
from meetwise.services.scheduling.availability import (
    AvailabilitySource,
    RemoteAvailabilitySource,
    RoutingAvailabilitySource,
    StoreAvailabilitySource,
)
from meetwise.services.scheduling.suggest import suggest_meeting_times
from meetwise.services.store.event_store import EventStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Suggest meeting times for a group of attendees.")
    parser.add_argument("attendees", nargs="*", help="Attendee emails (local user ids read the local store)")
    parser.add_argument("--duration", type=int, default=30, help="Meeting length in minutes")
    parser.add_argument("--days", type=int, default=5, help="Days ahead to search, starting tomorrow")
    parser.add_argument(
        "--window",
        action="append",
        default=None,
        help="Preferred window HH:MM-HH:MM (repeatable, default 09:00-17:00)",
    )
    parser.add_argument("--weekends", action="store_true", help="Allow Saturday and Sunday")
    parser.add_argument("--max", type=int, default=5, dest="max_suggestions", help="Maximum suggestions")
    parser.add_argument("--min-score", type=float, default=0.3, help="Drop suggestions below this score")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def parse_window(value: str) -> TimeRange:
    start, sep, end = value.partition("-")
    if not sep:
        raise argparse.ArgumentTypeError(f"Window must look like 09:00-12:00, got {value!r}")
    return TimeRange(start=start.strip(), end=end.strip())


def search_range(days: int, tz: ZoneInfo, now: datetime | None = None) -> DateRange:
    now = now or datetime.now(tz=tz)
    first_day = now.astimezone(tz).date() + timedelta(days=1)
    start = datetime.combine(first_day, time(0, 0), tzinfo=tz)
    return DateRange(start=start, end=start + timedelta(days=max(days, 1)))


def format_suggestion(index: int, suggestion: MeetingSuggestion) -> str:
    line = (
        f"{index}. {suggestion.start:%a %Y-%m-%d %H:%M}-{suggestion.end:%H:%M} "
        f"score={suggestion.score:.2f} ({'; '.join(suggestion.reasons)})"
    )
    if suggestion.conflicts:
        line += f" conflicts={','.join(suggestion.conflicts)}"
    return line


def build_source(store: EventStore) -> AvailabilitySource:
    local = StoreAvailabilitySource(store, step_minutes=settings.AVAILABILITY_STEP_MINUTES)
    remote = None
    if is_remote_sync_enabled():
        try:
            client = GoogleCalendarClient(calendar_id=settings.GOOGLE_CALENDAR_ID)
            remote = RemoteAvailabilitySource(client, step_minutes=settings.AVAILABILITY_STEP_MINUTES)
        except FileNotFoundError as exc:
            logger.warning("Remote availability unavailable: %s", exc)
    return RoutingAvailabilitySource(settings.LOCAL_ATTENDEES, local, remote)


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    load_env()
    configure_logging("DEBUG" if args.verbose else None)

    tz = ZoneInfo(settings.TIMEZONE)
    engine = make_engine(settings.DATABASE_URL, create_schema=False)
    ensure_sqlite_schema(engine)
    store = EventStore(make_session_factory(engine))

    request = SuggestionRequest(
        duration_minutes=args.duration,
        attendees=[normalize_email(a) for a in args.attendees],
        preferred_windows=[parse_window(w) for w in (args.window or ["09:00-17:00"])],
        date_range=search_range(args.days, tz),
        options=SuggestionOptions(
            include_weekends=args.weekends,
            max_suggestions=args.max_suggestions,
            min_score=args.min_score,
        ),
    )
    suggestions = asyncio.run(
        suggest_meeting_times(
            request,
            build_source(store),
            weights=settings.scoring_weights(),
            timeout=settings.AVAILABILITY_TIMEOUT_S,
        )
    )
    if not suggestions:
        print("No suitable meeting times found")
        return
    for index, suggestion in enumerate(suggestions, start=1):
        print(format_suggestion(index, suggestion))


if __name__ == "__main__":
    main()
