"""Schemas for supervisor feedback."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class FeedbackCreate(BaseModel):
    """Feedback from the employer who posted the internship."""

    application_id: int = Field(..., ge=1)
    rating: int = Field(..., ge=1, le=5)
    comments: str | None = Field(default=None, max_length=5000)
    technical_skills_rating: int | None = Field(default=None, ge=1, le=5)
    communication_rating: int | None = Field(default=None, ge=1, le=5)
    professionalism_rating: int | None = Field(default=None, ge=1, le=5)
    recommendation_for_placement: bool = False
    skills_gained: list[str] = Field(default_factory=list)
    expected_version: int | None = Field(default=None, ge=1)


class FeedbackResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    application_id: int
    supervisor_id: int
    rating: int
    comments: str | None
    technical_skills_rating: int | None
    communication_rating: int | None
    professionalism_rating: int | None
    recommendation_for_placement: bool
    skills_gained: list[str] | None
    created_at: datetime
