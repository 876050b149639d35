"""Schemas for internship search."""

from typing import Literal

from pydantic import BaseModel, Field

from placement_portal.schemas.internship import InternshipResponse


class SearchFilters(BaseModel):
    """Filter, sort and paging options for internship search."""

    query: str | None = Field(default=None, max_length=200)
    skills: list[str] = Field(default_factory=list)
    departments: list[str] = Field(default_factory=list)
    stipend_min: int | None = Field(default=None, ge=0)
    stipend_max: int | None = Field(default=None, ge=0)
    type: Literal["internship", "placement", "both"] = "both"
    locations: list[str] = Field(default_factory=list)
    duration: Literal["short", "medium", "long"] | None = Field(
        default=None, description="short: up to 8 weeks, medium: 9-16, long: 17+"
    )
    companies: list[str] = Field(default_factory=list)
    date_posted: Literal["today", "week", "month", "all"] = "all"
    sort_by: Literal["relevance", "date", "stipend"] = "relevance"
    sort_order: Literal["asc", "desc"] = "desc"
    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class SearchResultItem(BaseModel):
    internship: InternshipResponse
    relevance_score: int
    matching_skills: list[str]
    match_percentage: int = Field(ge=0, le=100)


class SearchResponse(BaseModel):
    results: list[SearchResultItem]
    total: int
    limit: int
    offset: int
    has_more: bool
    filters: SearchFilters


class SearchSuggestions(BaseModel):
    skills: list[str]
    companies: list[str]
    locations: list[str]
