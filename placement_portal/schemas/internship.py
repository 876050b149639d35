"""Schemas for internship postings."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from placement_portal.schemas.common import UTCDateTime


class InternshipBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    company_name: str = Field(..., min_length=1, max_length=255)
    required_skills: list[str] = Field(default_factory=list)
    eligible_departments: list[str] = Field(default_factory=list)
    stipend_min: int | None = Field(default=None, ge=0)
    stipend_max: int | None = Field(default=None, ge=0)
    is_placement: bool = False
    location: str | None = None
    duration_weeks: int | None = Field(default=None, ge=1, le=104)
    application_deadline: UTCDateTime | None = None


class InternshipCreate(InternshipBase):
    """Request to post an internship."""

    @model_validator(mode="after")
    def check_stipend_range(self):
        if (
            self.stipend_min is not None
            and self.stipend_max is not None
            and self.stipend_min > self.stipend_max
        ):
            raise ValueError("stipend_min cannot exceed stipend_max")
        return self


class InternshipUpdate(BaseModel):
    """Partial update of a posting; omitted fields are left unchanged."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    company_name: str | None = None
    required_skills: list[str] | None = None
    eligible_departments: list[str] | None = None
    stipend_min: int | None = Field(default=None, ge=0)
    stipend_max: int | None = Field(default=None, ge=0)
    is_placement: bool | None = None
    location: str | None = None
    duration_weeks: int | None = Field(default=None, ge=1, le=104)
    application_deadline: UTCDateTime | None = None
    is_active: bool | None = None


class InternshipResponse(InternshipBase):
    """Internship as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    posted_by: int
    is_active: bool
    created_at: datetime
    updated_at: datetime
