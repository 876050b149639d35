"""Interview schedule model."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from placement_portal.core.storage import Base, utc_now
from placement_portal.models.enums import InterviewStatus, InterviewType


class InterviewSchedule(Base):
    """An interview slot booked for one application."""

    __tablename__ = "interview_schedules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    application_id: Mapped[int] = mapped_column(
        ForeignKey("applications.id"), nullable=False, index=True
    )
    interviewer_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    student_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    scheduled_datetime: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, default=60, nullable=False)
    mode: Mapped[str] = mapped_column(String(20), nullable=False)
    meeting_link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=InterviewStatus.SCHEDULED.value
    )
    interview_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=InterviewType.TECHNICAL.value
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)

    rescheduled_from_id: Mapped[int | None] = mapped_column(
        ForeignKey("interview_schedules.id"), nullable=True
    )
    calendar_event_id: Mapped[int | None] = mapped_column(
        ForeignKey("calendar_events.id"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, onupdate=utc_now, nullable=False
    )
