from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from meetwise.db.base import Base, UtcDateTime

if TYPE_CHECKING:
    from meetwise.db.models.event import EventRow


class CalendarSync(Base):
    __tablename__ = "calendar_syncs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("events.id", ondelete="CASCADE"),
        unique=True,
    )
    provider: Mapped[str] = mapped_column(String(50), default="google")
    remote_event_id: Mapped[str | None] = mapped_column(String(1024), nullable=True, index=True)
    synced_at: Mapped[datetime | None] = mapped_column(UtcDateTime(), nullable=True)

    event: Mapped[EventRow] = relationship(back_populates="calendar_sync")
