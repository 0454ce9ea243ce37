from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from meetwise.db.base import Base, UtcDateTime

if TYPE_CHECKING:
    from meetwise.db.models.attachment import AttachmentRow
    from meetwise.db.models.attendee import AttendeeRow
    from meetwise.db.models.calendar_sync import CalendarSync
    from meetwise.db.models.reminder import ReminderRow


class EventRow(Base):
    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    # owning calendar; a foreign relationship, no FK so synced events may
    # arrive before their calendar row
    calendar_id: Mapped[str] = mapped_column(String(255), index=True)
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    start_time: Mapped[datetime] = mapped_column(UtcDateTime(), index=True)
    end_time: Mapped[datetime] = mapped_column(UtcDateTime(), index=True)
    is_all_day: Mapped[bool] = mapped_column(Boolean, default=False)
    color: Mapped[str | None] = mapped_column(String(20), nullable=True)
    visibility: Mapped[str] = mapped_column(String(20), default="Default")
    status: Mapped[str] = mapped_column(String(20), default="Confirmed")
    organizer: Mapped[str | None] = mapped_column(String(255), nullable=True)
    source: Mapped[str] = mapped_column(String(30), default="Local")
    recurrence_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    metadata_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_modified: Mapped[datetime] = mapped_column(UtcDateTime())

    attendees: Mapped[list[AttendeeRow]] = relationship(
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="AttendeeRow.position",
    )
    reminders: Mapped[list[ReminderRow]] = relationship(
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="ReminderRow.position",
    )
    attachments: Mapped[list[AttachmentRow]] = relationship(
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="AttachmentRow.position",
    )
    calendar_sync: Mapped[CalendarSync | None] = relationship(
        back_populates="event",
        uselist=False,
        cascade="all, delete-orphan",
    )
