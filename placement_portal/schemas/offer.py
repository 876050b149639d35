"""Schemas for placement offers."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from placement_portal.models.enums import OfferStatus, OfferType
from placement_portal.schemas.common import UTCDateTime


class OfferCreate(BaseModel):
    """Request to extend an offer."""

    application_id: int = Field(..., ge=1)
    position_title: str = Field(..., min_length=1, max_length=255)
    offer_type: OfferType = OfferType.INTERNSHIP
    offer_details: dict[str, Any] = Field(
        default_factory=dict, description="Salary, benefits, joining date and so on"
    )
    response_deadline: UTCDateTime | None = Field(
        default=None, description="Defaults to the configured response window"
    )
    expected_version: int | None = Field(default=None, ge=1)


class OfferRespond(BaseModel):
    """Student's answer to an offer."""

    response: Literal["ACCEPTED", "REJECTED"]
    rejection_reason: str | None = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    def check_reason(self):
        if self.response == "ACCEPTED" and self.rejection_reason:
            raise ValueError("rejection_reason only applies to rejections")
        return self


class OfferContractUpdate(BaseModel):
    contract_signed: bool = True
    contract_details: dict[str, Any] | None = None


class OfferResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    application_id: int
    student_id: int
    company_id: int
    position_title: str
    offer_type: OfferType
    offer_details: dict[str, Any]
    offer_status: OfferStatus
    offer_date: datetime
    response_deadline: datetime
    acceptance_date: datetime | None
    rejection_date: datetime | None
    rejection_reason: str | None
    contract_signed: bool
    contract_details: dict[str, Any] | None
    created_at: datetime


class OfferAnalytics(BaseModel):
    total_offers: int
    by_status: dict[str, int]
    acceptance_rate: float = Field(description="Accepted / responded, in percent")
