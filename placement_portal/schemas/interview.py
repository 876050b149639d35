"""Schemas for interview scheduling."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from placement_portal.models.enums import InterviewMode, InterviewStatus, InterviewType
from placement_portal.schemas.common import UTCDateTime


class InterviewCreate(BaseModel):
    """Request to schedule an interview for an application."""

    application_id: int = Field(..., ge=1)
    interviewer_id: int | None = Field(
        default=None, description="Defaults to the caller"
    )
    scheduled_datetime: UTCDateTime
    duration_minutes: int = Field(default=60, ge=15, le=480)
    mode: InterviewMode = InterviewMode.ONLINE
    interview_type: InterviewType = InterviewType.TECHNICAL
    meeting_link: str | None = None
    location: str | None = None
    notes: str | None = None
    expected_version: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def check_mode_details(self):
        if self.mode == InterviewMode.OFFLINE and not self.location:
            raise ValueError("location is required for offline interviews")
        return self


class InterviewReschedule(BaseModel):
    scheduled_datetime: UTCDateTime
    duration_minutes: int | None = Field(default=None, ge=15, le=480)
    notes: str | None = None


class InterviewStatusUpdate(BaseModel):
    """Follow-up on a scheduled interview."""

    status: InterviewStatus
    feedback: str | None = None
    rating: int | None = Field(default=None, ge=1, le=5)


class InterviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    application_id: int
    interviewer_id: int
    student_id: int
    scheduled_datetime: datetime
    duration_minutes: int
    mode: InterviewMode
    meeting_link: str | None
    location: str | None
    status: InterviewStatus
    interview_type: InterviewType
    notes: str | None
    feedback: str | None
    rating: int | None
    rescheduled_from_id: int | None
    calendar_event_id: int | None
    created_at: datetime
