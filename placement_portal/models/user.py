"""User model."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from placement_portal.core.storage import Base, utc_now
from placement_portal.models.enums import PlacementStatus


class User(Base):
    """A portal account: student, staff member, mentor or employer."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    department: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True
    )
    current_semester: Mapped[int | None] = mapped_column(Integer, nullable=True)
    skills: Mapped[list | None] = mapped_column(JSON, nullable=True)
    cgpa: Mapped[float | None] = mapped_column(Float, nullable=True)
    placement_status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PlacementStatus.AVAILABLE.value,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, onupdate=utc_now, nullable=False
    )
