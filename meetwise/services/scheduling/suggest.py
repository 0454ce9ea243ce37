from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging

from meetwise.domain.errors import ValidationError
from meetwise.domain.schemas.scheduling import (
    MeetingSuggestion,
    ScoringWeights,
    SuggestionRequest,
)
from meetwise.services.scheduling.availability import (
    AvailabilitySource,
    availability_score,
    fetch_availability,
)
from meetwise.services.scheduling.scorer import (
    attendee_conflicts,
    hard_conflict_ratio,
    rank_suggestions,
    score_slot,
    scoring_reasons,
)
from meetwise.services.scheduling.slots import generate_slots, parse_hhmm
from meetwise.utils.timing import Timer, format_duration

logger = logging.getLogger(__name__)

INTERNAL_ATTENDEE = "me"


def validate_request(request: SuggestionRequest) -> None:
    if request.duration_minutes <= 0:
        raise ValidationError("Meeting duration must be positive")
    if any(not attendee.strip() for attendee in request.attendees):
        raise ValidationError("Attendee identifiers cannot be empty")
    if request.date_range.start > request.date_range.end:
        raise ValidationError("Date range start must not be after its end")
    for window in request.preferred_windows:
        if parse_hhmm(window.start) >= parse_hhmm(window.end):
            raise ValidationError(f"Preferred window {window.start}-{window.end} is empty")

    options = request.options
    if options.slot_increment_minutes <= 0:
        raise ValidationError("Slot increment must be positive")
    if options.max_suggestions <= 0:
        raise ValidationError("max_suggestions must be positive")
    if not 0.0 <= options.min_score <= 1.0:
        raise ValidationError("min_score must be within [0, 1]")
    if any(day not in range(1, 8) for day in options.preferred_days):
        raise ValidationError("preferred_days must be ISO weekdays 1-7")


async def suggest_meeting_times(
    request: SuggestionRequest,
    source: AvailabilitySource,
    now: datetime | None = None,
    weights: ScoringWeights | None = None,
    timeout: float | None = None,
) -> list[MeetingSuggestion]:
    """Rank candidate meeting times for ``request``.

    An empty list is a normal outcome. Cancelling the awaiting task cancels
    the outstanding attendee fetches.
    """
    validate_request(request)
    now = now or datetime.now(tz=timezone.utc)
    weights = weights or ScoringWeights()
    options = request.options

    with Timer("availability fan-out", logger) as fetch_timer:
        availability = await fetch_availability(
            request.attendees,
            request.date_range,
            source,
            timeout=timeout,
        )

    suggestions: list[MeetingSuggestion] = []
    candidates = 0
    for slot in generate_slots(
        request.date_range,
        request.preferred_windows,
        timedelta(minutes=request.duration_minutes),
        options,
    ):
        candidates += 1
        combined = availability_score(slot, request.attendees, availability, weights)
        ratio = hard_conflict_ratio(slot, request.attendees, availability)
        score = score_slot(slot, combined, options, now, weights, conflict_ratio=ratio)
        if score < options.min_score:
            continue
        suggestions.append(
            MeetingSuggestion(
                start=slot.start,
                end=slot.end,
                score=score,
                reasons=scoring_reasons(slot, availability, options),
                conflicts=attendee_conflicts(slot, availability),
            )
        )

    ranked = rank_suggestions(suggestions, options)
    logger.info(
        "Suggested %s of %s candidates attendees=%s fetch=%s",
        len(ranked),
        candidates,
        len(request.attendees),
        format_duration(fetch_timer.elapsed),
    )
    return ranked


async def suggest_internal_meeting_times(
    request: SuggestionRequest,
    source: AvailabilitySource,
    now: datetime | None = None,
    weights: ScoringWeights | None = None,
    timeout: float | None = None,
) -> list[MeetingSuggestion]:
    internal = request.model_copy(
        update={
            "attendees": [INTERNAL_ATTENDEE],
            "options": request.options.model_copy(update={"consider_working_hours": True}),
        }
    )
    return await suggest_meeting_times(internal, source, now=now, weights=weights, timeout=timeout)
