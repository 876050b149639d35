"""Schemas for applications and the tracking ledger."""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from placement_portal.models.enums import ApplicationStatus, TrackingStepStatus
from placement_portal.schemas.certificate import CertificateResponse
from placement_portal.schemas.feedback import FeedbackResponse
from placement_portal.schemas.interview import InterviewResponse
from placement_portal.schemas.offer import OfferResponse


class ApplicationCreate(BaseModel):
    """Request to apply to an internship."""

    internship_id: int = Field(..., ge=1)
    cover_letter: str | None = Field(default=None, max_length=10000)


class VersionedRequest(BaseModel):
    """Body of a direct application transition.

    ``expected_version`` is the version the caller last read; the write is
    refused if the application changed since.
    """

    expected_version: int = Field(..., ge=1)
    notes: str | None = Field(default=None, max_length=2000)


class MentorDecisionRequest(VersionedRequest):
    """Mentor approval or rejection."""

    decision: Literal["APPROVED", "REJECTED"]
    comments: str | None = Field(default=None, max_length=2000)


class CompleteApplicationRequest(VersionedRequest):
    """Mark an internship as completed and issue a certificate."""

    performance_rating: int = Field(..., ge=1, le=5)
    start_date: date
    end_date: date
    supervisor_comments: str | None = Field(default=None, max_length=5000)
    skills_demonstrated: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class TrackingStepUpdate(BaseModel):
    """Update of a single tracking step."""

    status: TrackingStepStatus
    notes: str | None = Field(default=None, max_length=2000)


class TrackingStepResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    application_id: int
    step: str
    position: int
    status: TrackingStepStatus
    completed_at: datetime | None
    notes: str | None
    actor_id: int | None
    created_at: datetime


class TrackingProgress(BaseModel):
    """Derived progress over an application's tracking ledger."""

    application_id: int
    steps: list[TrackingStepResponse]
    completed_steps: int
    total_steps: int
    progress_percentage: int = Field(ge=0, le=100)
    current_step: str | None


class ResumeViewStatus(BaseModel):
    application_id: int
    viewed: bool
    viewed_at: datetime | None
    viewed_by: int | None


class ApplicationResponse(BaseModel):
    """Application row as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    internship_id: int
    status: ApplicationStatus
    cover_letter: str | None
    applied_at: datetime
    mentor_id: int | None
    mentor_approved_at: datetime | None
    interview_scheduled_at: datetime | None
    offer_made_at: datetime | None
    offer_accepted_at: datetime | None
    completion_date: datetime | None
    version: int
    updated_at: datetime


class ApplicationDetail(BaseModel):
    """Application with its ledger and sub-records."""

    application: ApplicationResponse
    tracking: TrackingProgress
    interviews: list[InterviewResponse]
    offers: list[OfferResponse]
    feedback: FeedbackResponse | None


class CompletionResponse(BaseModel):
    application: ApplicationResponse
    certificate: CertificateResponse
