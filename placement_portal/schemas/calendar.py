"""Schemas for calendar events and conflict checks."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from placement_portal.models.enums import CalendarEventStatus, CalendarEventType
from placement_portal.schemas.common import UTCDateTime


class CalendarEventCreate(BaseModel):
    """Request to add a calendar event."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    event_type: CalendarEventType = CalendarEventType.OTHER
    start_datetime: UTCDateTime
    end_datetime: UTCDateTime
    participants: list[int] = Field(default_factory=list)
    location: str | None = None
    meeting_url: str | None = None

    @model_validator(mode="after")
    def check_interval(self):
        if self.end_datetime <= self.start_datetime:
            raise ValueError("end_datetime must be after start_datetime")
        return self


class CalendarEventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None
    event_type: CalendarEventType
    start_datetime: datetime
    end_datetime: datetime
    organizer_id: int | None
    participants: list[int]
    location: str | None
    meeting_url: str | None
    status: CalendarEventStatus


class ConflictCheckRequest(BaseModel):
    """Proposed interval to check for one or more users."""

    user_ids: list[int] = Field(..., min_length=1)
    start_datetime: UTCDateTime
    end_datetime: UTCDateTime

    @model_validator(mode="after")
    def check_interval(self):
        if self.end_datetime <= self.start_datetime:
            raise ValueError("end_datetime must be after start_datetime")
        return self


class ConflictItem(BaseModel):
    """One existing event overlapping the proposed interval."""

    event: CalendarEventResponse
    user_id: int
    blocking: bool
    reason: str


class ConflictReport(BaseModel):
    has_conflicts: bool
    has_blocking_conflicts: bool
    conflicts: list[ConflictItem]
    suggested_times: list[str]


class AvailableSlot(BaseModel):
    start: datetime
    end: datetime
