"""Placement offer model."""

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from placement_portal.core.storage import Base, utc_now
from placement_portal.models.enums import OfferStatus


class PlacementOffer(Base):
    """A formal offer extended to a student for one application."""

    __tablename__ = "placement_offers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    application_id: Mapped[int] = mapped_column(
        ForeignKey("applications.id"), nullable=False, index=True
    )
    student_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    company_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    position_title: Mapped[str] = mapped_column(String(255), nullable=False)
    offer_type: Mapped[str] = mapped_column(String(20), nullable=False)
    offer_details: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    offer_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=OfferStatus.DRAFT.value, index=True
    )
    offer_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    response_deadline: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    acceptance_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    rejection_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    contract_signed: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    contract_details: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, onupdate=utc_now, nullable=False
    )
