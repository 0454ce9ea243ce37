from datetime import datetime, timedelta, timezone

from meetwise.domain.schemas.scheduling import (
    AvailabilityStatus,
    MeetingSuggestion,
    ScoringWeights,
    SuggestionOptions,
    TimeSlot,
)
from meetwise.services.scheduling.scorer import (
    day_of_week_score,
    days_from_now,
    hard_conflict_ratio,
    rank_suggestions,
    score_slot,
    scoring_reasons,
    time_of_day_score,
)

# Wednesday
DAY = datetime(2026, 10, 21, tzinfo=timezone.utc)
TWO_DAYS_BEFORE = DAY - timedelta(days=2)


def _slot(day: datetime, hour: int, minutes: int = 60) -> TimeSlot:
    start = day + timedelta(hours=hour)
    return TimeSlot(start=start, end=start + timedelta(minutes=minutes))


def test_time_of_day_buckets() -> None:
    expected = {3: 0.0, 7: 0.4, 10: 1.0, 13: 0.9, 17: 0.7, 19: 0.3, 22: 0.1, 23: 0.0}
    for hour, score in expected.items():
        assert time_of_day_score(DAY + timedelta(hours=hour)) == score


def test_day_of_week_buckets() -> None:
    monday = DAY - timedelta(days=2)
    friday = DAY + timedelta(days=2)
    saturday = DAY + timedelta(days=3)
    sunday = DAY + timedelta(days=4)

    assert day_of_week_score(monday, include_weekends=False) == 1.0
    assert day_of_week_score(friday, include_weekends=False) == 0.9
    assert day_of_week_score(saturday, include_weekends=False) == 0.0
    assert day_of_week_score(saturday, include_weekends=True) == 0.7
    assert day_of_week_score(sunday, include_weekends=True) == 0.6


def test_days_from_now_truncates() -> None:
    assert days_from_now(DAY + timedelta(hours=47), DAY) == 1
    assert days_from_now(DAY + timedelta(hours=5), DAY) == 0


def test_perfect_slot_scores_one() -> None:
    score = score_slot(_slot(DAY, 10), 1.0, SuggestionOptions(), TWO_DAYS_BEFORE)
    assert score == 1.0


def test_score_is_monotonic_in_availability() -> None:
    options = SuggestionOptions()
    scores = [score_slot(_slot(DAY, 14), a / 10, options, TWO_DAYS_BEFORE) for a in range(11)]
    assert scores == sorted(scores)
    assert all(0.0 <= s <= 1.0 for s in scores)


def test_short_notice_and_far_future_penalties() -> None:
    options = SuggestionOptions()
    same_day = score_slot(_slot(DAY, 10), 1.0, options, DAY)
    far = score_slot(_slot(DAY, 10), 1.0, options, DAY - timedelta(days=10))

    assert abs(same_day - 0.95) < 1e-9
    assert abs(far - 0.94) < 1e-9


def test_full_conflict_zeroes_score() -> None:
    score = score_slot(_slot(DAY, 10), 0.0, SuggestionOptions(), TWO_DAYS_BEFORE, conflict_ratio=1.0)
    assert score == 0.0


def test_score_is_clamped_to_zero() -> None:
    harsh = ScoringWeights(base=0.0, far_future_penalty=50.0)
    score = score_slot(_slot(DAY, 10), 0.0, SuggestionOptions(), DAY - timedelta(days=30), harsh)
    assert score == 0.0


def test_hard_conflict_ratio_counts_blocked_attendees() -> None:
    slot = _slot(DAY, 10)
    availability = {
        "a@x.com": [TimeSlot(start=slot.start, end=slot.end, availability=AvailabilityStatus.BUSY)],
        "b@x.com": [TimeSlot(start=slot.start, end=slot.end, availability=AvailabilityStatus.TENTATIVE)],
    }

    assert hard_conflict_ratio(slot, ["a@x.com", "b@x.com"], availability) == 0.5
    assert hard_conflict_ratio(slot, [], availability) == 0.0


def test_scoring_reasons() -> None:
    slot = _slot(DAY, 10)
    availability = {
        "a@x.com": [TimeSlot(start=DAY + timedelta(hours=9), end=DAY + timedelta(hours=12))],
        "b@x.com": [],
    }

    reasons = scoring_reasons(slot, availability, SuggestionOptions())

    assert reasons == ["1 of 2 attendees available", "Within working hours", "Optimal time of day"]
    assert scoring_reasons(slot, {}, SuggestionOptions())[0] == "All attendees are available"


def test_rank_suggestions_filters_sorts_and_truncates() -> None:
    def suggestion(hour: int, score: float) -> MeetingSuggestion:
        start = DAY + timedelta(hours=hour)
        return MeetingSuggestion(start=start, end=start + timedelta(hours=1), score=score)

    ranked = rank_suggestions(
        [suggestion(9, 0.5), suggestion(10, 0.9), suggestion(11, 0.2), suggestion(12, 0.9)],
        SuggestionOptions(max_suggestions=2, min_score=0.3),
    )

    assert [s.start.hour for s in ranked] == [10, 12]


def test_rank_suggestions_breaks_ties_by_start() -> None:
    def suggestion(hour: int) -> MeetingSuggestion:
        start = DAY + timedelta(hours=hour)
        return MeetingSuggestion(start=start, end=start + timedelta(hours=1), score=0.98)

    ranked = rank_suggestions([suggestion(13), suggestion(12)], SuggestionOptions())

    assert [s.start.hour for s in ranked] == [12, 13]
