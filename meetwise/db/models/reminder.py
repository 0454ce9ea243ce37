from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from meetwise.db.base import Base

if TYPE_CHECKING:
    from meetwise.db.models.event import EventRow


class ReminderRow(Base):
    __tablename__ = "reminders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("events.id", ondelete="CASCADE"),
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, default=0)
    reminder_id: Mapped[str] = mapped_column(String(255))
    type: Mapped[str] = mapped_column(String(20), default="Notification")
    minutes_before: Mapped[int] = mapped_column(Integer)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True)

    event: Mapped[EventRow] = relationship(back_populates="reminders")
