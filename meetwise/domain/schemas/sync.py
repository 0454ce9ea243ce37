from __future__ import annotations

from enum import Enum

from pydantic import AwareDatetime, BaseModel, Field

from meetwise.domain.schemas.calendar import CalendarEvent


class SyncState(str, Enum):
    UNSEEN = "Unseen"
    COMPARED = "Compared"
    CREATED = "Created"
    UPDATED = "Updated"
    UNCHANGED = "Unchanged"
    ERROR = "Error"


class SyncResult(BaseModel):
    success: bool
    created_count: int = 0
    updated_count: int = 0
    deleted_count: int = 0
    errors: list[str] = Field(default_factory=list)
    timestamp: AwareDatetime
    outcomes: dict[str, SyncState] = Field(default_factory=dict)


class MutationResult(BaseModel):
    """Outcome of a local-first mutation.

    ``event`` is None when the mutation was a no-op (unknown id). A remote
    failure shows up in ``warnings`` while the local write still stands.
    """

    event: CalendarEvent | None = None
    remote_synced: bool = False
    warnings: list[str] = Field(default_factory=list)
