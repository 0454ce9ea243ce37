from __future__ import annotations

from collections.abc import Iterator
from datetime import date, datetime, time, timedelta

from meetwise.domain.errors import ValidationError
from meetwise.domain.schemas.scheduling import (
    AvailabilityStatus,
    DateRange,
    SuggestionOptions,
    TimeRange,
    TimeSlot,
)

WORKING_HOURS = range(9, 18)
WEEKEND = {6, 7}


def parse_hhmm(value: str) -> timedelta:
    """Offset from midnight for an "HH:MM" string; "24:00" is end of day."""
    parts = value.strip().split(":")
    if len(parts) != 2 or not all(part.isdigit() for part in parts):
        raise ValidationError(f"Invalid time of day: {value!r}")
    hours, minutes = int(parts[0]), int(parts[1])
    if minutes > 59 or hours > 24 or (hours == 24 and minutes):
        raise ValidationError(f"Invalid time of day: {value!r}")
    return timedelta(hours=hours, minutes=minutes)


def is_weekend(day: date) -> bool:
    return day.isoweekday() in WEEKEND


def is_within_working_hours(start: datetime, end: datetime) -> bool:
    return start.hour in WORKING_HOURS and end.hour in WORKING_HOURS


def iter_days(date_range: DateRange) -> Iterator[date]:
    tz = date_range.start.tzinfo
    day = date_range.start.date()
    last = date_range.end.astimezone(tz).date()
    while day <= last:
        yield day
        day += timedelta(days=1)


def day_is_eligible(day: date, options: SuggestionOptions) -> bool:
    if not options.include_weekends and is_weekend(day):
        return False
    if options.preferred_days and day.isoweekday() not in options.preferred_days:
        return False
    return True


def generate_slots(
    date_range: DateRange,
    preferred_windows: list[TimeRange],
    duration: timedelta,
    options: SuggestionOptions | None = None,
) -> Iterator[TimeSlot]:
    """Enumerate candidate slots day by day, window by window.

    Windows are wall-clock times on each day in the timezone of
    ``date_range.start``. Each call returns a fresh generator.
    """
    options = options or SuggestionOptions()
    if duration <= timedelta(0):
        raise ValidationError("Duration must be positive")
    if options.slot_increment_minutes <= 0:
        raise ValidationError("Slot increment must be positive")

    windows = [(parse_hhmm(w.start), parse_hhmm(w.end)) for w in preferred_windows]
    return _generate(date_range, windows, duration, options)


def _generate(
    date_range: DateRange,
    windows: list[tuple[timedelta, timedelta]],
    duration: timedelta,
    options: SuggestionOptions,
) -> Iterator[TimeSlot]:
    tz = date_range.start.tzinfo
    step = timedelta(minutes=options.slot_increment_minutes)
    seen: set[tuple[datetime, datetime]] = set()

    for day in iter_days(date_range):
        if not day_is_eligible(day, options):
            continue
        midnight = datetime.combine(day, time(0, 0), tzinfo=tz)
        for window_start, window_end in windows:
            cursor = midnight + window_start
            limit = midnight + window_end
            while cursor + duration <= limit:
                slot_start, slot_end = cursor, cursor + duration
                cursor += step
                if options.consider_working_hours and not is_within_working_hours(slot_start, slot_end):
                    continue
                if slot_start < date_range.start or slot_end > date_range.end:
                    continue
                if (slot_start, slot_end) in seen:
                    continue
                seen.add((slot_start, slot_end))
                yield TimeSlot(
                    start=slot_start,
                    end=slot_end,
                    availability=AvailabilityStatus.AVAILABLE,
                )
