"""Internship posting model."""

from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from placement_portal.core.storage import Base, utc_now


class Internship(Base):
    """An internship or placement posting."""

    __tablename__ = "internships"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    company_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    required_skills: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    eligible_departments: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list
    )
    stipend_min: Mapped[int | None] = mapped_column(Integer, nullable=True)
    stipend_max: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_placement: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    duration_weeks: Mapped[int | None] = mapped_column(Integer, nullable=True)
    application_deadline: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )
    posted_by: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False, index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, onupdate=utc_now, nullable=False
    )
