"""Schemas for placement analytics."""

from datetime import datetime

from pydantic import BaseModel, Field


class DepartmentStats(BaseModel):
    """Placement figures for one department."""

    department: str
    total_students: int
    placed_students: int
    interning_students: int
    available_students: int
    placement_percentage: float = Field(ge=0, le=100)
    recent_placements: int = Field(description="Offers accepted in the last 30 days")
    heat_score: float = Field(ge=0, le=100)


class HeatmapResponse(BaseModel):
    departments: list[DepartmentStats]
    total_students: int
    total_placed: int
    overall_placement_percentage: float
    generated_at: datetime
