from __future__ import annotations

from enum import Enum

from pydantic import AwareDatetime, BaseModel, Field


class AvailabilityStatus(str, Enum):
    AVAILABLE = "Available"
    BUSY = "Busy"
    TENTATIVE = "Tentative"
    OUT_OF_OFFICE = "OutOfOffice"


class TimeSlot(BaseModel):
    start: AwareDatetime
    end: AwareDatetime
    availability: AvailabilityStatus = AvailabilityStatus.AVAILABLE
    conflicts: list[str] = Field(default_factory=list)


class TimeRange(BaseModel):
    """Wall-clock window such as ("09:00", "17:00")."""

    start: str
    end: str


class DateRange(BaseModel):
    start: AwareDatetime
    end: AwareDatetime


class MeetingSuggestion(BaseModel):
    start: AwareDatetime
    end: AwareDatetime
    score: float
    reasons: list[str] = Field(default_factory=list)
    conflicts: list[str] = Field(default_factory=list)


class SuggestionOptions(BaseModel):
    include_weekends: bool = False
    # ISO weekday numbers, Monday=1 .. Sunday=7
    preferred_days: set[int] = Field(default_factory=set)
    consider_working_hours: bool = True
    slot_increment_minutes: int = 15
    max_suggestions: int = 10
    min_score: float = 0.3


class SuggestionRequest(BaseModel):
    duration_minutes: int
    attendees: list[str] = Field(default_factory=list)
    preferred_windows: list[TimeRange]
    date_range: DateRange
    options: SuggestionOptions = Field(default_factory=SuggestionOptions)


class ScoringWeights(BaseModel):
    base: float = 30.0
    availability: float = 40.0
    time_of_day: float = 20.0
    day_of_week: float = 10.0
    far_future_penalty: float = 2.0
    short_notice_penalty: float = 5.0
    availability_mean: float = 0.7
    availability_breadth: float = 0.3
    conflict_penalty: float = 1.0
