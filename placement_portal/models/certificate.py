"""Certificate and employability record models."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from placement_portal.core.storage import Base, utc_now


class Certificate(Base):
    """A completion certificate issued for an application."""

    __tablename__ = "certificates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    certificate_id: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True, index=True
    )
    application_id: Mapped[int] = mapped_column(
        ForeignKey("applications.id"), nullable=False, index=True
    )
    student_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    certificate_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default="INTERNSHIP"
    )
    certificate_data: Mapped[dict] = mapped_column(JSON, nullable=False)
    certificate_url: Mapped[str] = mapped_column(String(500), nullable=False)
    qr_code_url: Mapped[str] = mapped_column(String(500), nullable=False)
    verification_url: Mapped[str] = mapped_column(String(500), nullable=False)
    issued_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )


class EmployabilityRecord(Base):
    """Running employability summary, one per student."""

    __tablename__ = "employability_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, unique=True
    )
    internships_completed: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    total_duration_weeks: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    average_rating: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    skills_acquired: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    certifications: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    placement_ready_score: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, onupdate=utc_now, nullable=False
    )
