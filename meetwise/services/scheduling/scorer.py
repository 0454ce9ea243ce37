from __future__ import annotations

from datetime import datetime

from meetwise.domain.schemas.scheduling import (
    AvailabilityStatus,
    MeetingSuggestion,
    ScoringWeights,
    SuggestionOptions,
    TimeSlot,
)
from meetwise.services.scheduling.conflicts import intervals_overlap, slot_conflicts
from meetwise.services.scheduling.slots import is_within_working_hours

SECONDS_PER_DAY = 86400


def time_of_day_score(start: datetime) -> float:
    hour = start.hour
    if 9 <= hour <= 11:
        return 1.0
    if 12 <= hour <= 15:
        return 0.9
    if 16 <= hour <= 17:
        return 0.7
    if 6 <= hour <= 8:
        return 0.4
    if 18 <= hour <= 20:
        return 0.3
    if 21 <= hour <= 22:
        return 0.1
    return 0.0


def day_of_week_score(start: datetime, include_weekends: bool) -> float:
    weekday = start.isoweekday()
    if weekday <= 4:
        return 1.0
    if weekday == 5:
        return 0.9
    if not include_weekends:
        return 0.0
    return 0.7 if weekday == 6 else 0.6


def days_from_now(start: datetime, now: datetime) -> int:
    # whole days, truncated toward zero
    return int((start - now).total_seconds() / SECONDS_PER_DAY)


def score_slot(
    slot: TimeSlot,
    availability: float,
    options: SuggestionOptions,
    now: datetime,
    weights: ScoringWeights | None = None,
    conflict_ratio: float = 0.0,
) -> float:
    """Desirability of ``slot`` in [0, 1].

    ``availability`` is the combined attendee score; ``conflict_ratio`` is the
    share of attendees with a hard (busy or out-of-office) overlap.
    """
    weights = weights or ScoringWeights()
    total = weights.base
    total += weights.availability * availability
    total += weights.time_of_day * time_of_day_score(slot.start)
    total += weights.day_of_week * day_of_week_score(slot.start, options.include_weekends)

    days = days_from_now(slot.start, now)
    total -= weights.far_future_penalty * max(0, days - 7)
    total -= weights.short_notice_penalty * max(0, 1 - days)

    total *= 1.0 - weights.conflict_penalty * min(max(conflict_ratio, 0.0), 1.0)
    return min(max(total, 0.0), 100.0) / 100.0


def hard_conflict_ratio(
    slot: TimeSlot,
    attendees: list[str],
    availability: dict[str, list[TimeSlot]],
) -> float:
    if not attendees:
        return 0.0
    blocked = sum(
        1 for attendee in attendees if slot_conflicts(slot.start, slot.end, availability.get(attendee, []))
    )
    return blocked / len(attendees)


def attendee_conflicts(slot: TimeSlot, availability: dict[str, list[TimeSlot]]) -> list[str]:
    conflicts = []
    for attendee, intervals in availability.items():
        for interval in intervals:
            if (
                interval.availability != AvailabilityStatus.AVAILABLE
                and intervals_overlap(slot.start, slot.end, interval.start, interval.end)
            ):
                conflicts.append(attendee)
                break
    return conflicts


def scoring_reasons(
    slot: TimeSlot,
    availability: dict[str, list[TimeSlot]],
    options: SuggestionOptions,
) -> list[str]:
    reasons = []
    available = sum(
        1
        for intervals in availability.values()
        if any(
            interval.availability == AvailabilityStatus.AVAILABLE
            and interval.start <= slot.start
            and interval.end >= slot.end
            for interval in intervals
        )
    )
    if available == len(availability):
        reasons.append("All attendees are available")
    else:
        reasons.append(f"{available} of {len(availability)} attendees available")

    if is_within_working_hours(slot.start, slot.end):
        reasons.append("Within working hours")
    if time_of_day_score(slot.start) >= 0.8:
        reasons.append("Optimal time of day")
    return reasons


def rank_suggestions(
    suggestions: list[MeetingSuggestion],
    options: SuggestionOptions,
) -> list[MeetingSuggestion]:
    kept = [s for s in suggestions if s.score >= options.min_score]
    # equal scores rank by earliest start
    kept = sorted(kept, key=lambda s: (-s.score, s.start))
    return kept[: options.max_suggestions]
