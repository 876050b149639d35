"""Calendar event model."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from placement_portal.core.storage import Base, utc_now
from placement_portal.models.enums import CalendarEventStatus


class CalendarEvent(Base):
    """A time-boxed event (interview, exam, academic session, deadline)."""

    __tablename__ = "calendar_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    event_type: Mapped[str] = mapped_column(String(20), nullable=False)
    start_datetime: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, index=True
    )
    end_datetime: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    organizer_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id"), nullable=True, index=True
    )
    participants: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    meeting_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=CalendarEventStatus.SCHEDULED.value
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )

    def involves(self, user_id: int) -> bool:
        return self.organizer_id == user_id or user_id in (self.participants or [])
