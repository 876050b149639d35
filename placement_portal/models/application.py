"""Application aggregate and tracking ledger models."""

from datetime import datetime

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from placement_portal.core.storage import Base, utc_now
from placement_portal.models.enums import (
    TERMINAL_STATUSES,
    ApplicationStatus,
    TrackingStepStatus,
)

_TERMINAL_LIST = ", ".join(f"'{s.value}'" for s in sorted(TERMINAL_STATUSES))
_OPEN_APPLICATION = text(f"status NOT IN ({_TERMINAL_LIST})")


class Application(Base):
    """A student's application to one internship.

    ``status`` is the authoritative summary state. ``version`` is bumped on
    every update and is checked on flush, so two writers that read the same
    row cannot both commit.
    """

    __tablename__ = "applications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    internship_id: Mapped[int] = mapped_column(
        ForeignKey("internships.id"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        default=ApplicationStatus.APPLIED.value,
        index=True,
    )
    cover_letter: Mapped[str | None] = mapped_column(Text, nullable=True)

    applied_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )
    mentor_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id"), nullable=True
    )
    mentor_approved_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )
    interview_scheduled_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )
    offer_made_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    offer_accepted_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )
    completion_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, onupdate=utc_now, nullable=False
    )

    __table_args__ = (
        Index(
            "uq_applications_open_pair",
            "student_id",
            "internship_id",
            unique=True,
            sqlite_where=_OPEN_APPLICATION,
            postgresql_where=_OPEN_APPLICATION,
        ),
    )
    __mapper_args__ = {"version_id_col": version}

    @property
    def is_terminal(self) -> bool:
        return ApplicationStatus(self.status) in TERMINAL_STATUSES


class TrackingStep(Base):
    """A named milestone of an application, updated in place."""

    __tablename__ = "application_tracking"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    application_id: Mapped[int] = mapped_column(
        ForeignKey("applications.id"), nullable=False, index=True
    )
    step: Mapped[str] = mapped_column(String(100), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TrackingStepStatus.PENDING.value
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    actor_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )
