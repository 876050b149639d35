"""Supervisor feedback model."""

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from placement_portal.core.storage import Base, utc_now


class Feedback(Base):
    """Employer feedback on a finished internship, at most one per application."""

    __tablename__ = "feedback"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    application_id: Mapped[int] = mapped_column(
        ForeignKey("applications.id"), nullable=False, unique=True, index=True
    )
    supervisor_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    technical_skills_rating: Mapped[int | None] = mapped_column(
        Integer, nullable=True
    )
    communication_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    professionalism_rating: Mapped[int | None] = mapped_column(
        Integer, nullable=True
    )
    recommendation_for_placement: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    skills_gained: Mapped[list | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )
