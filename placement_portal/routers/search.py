"""API routes for internship search."""

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from placement_portal.core.auth import CurrentUser, get_current_user
from placement_portal.core.storage import get_session
from placement_portal.models.user import User
from placement_portal.routers.errors import database_error
from placement_portal.schemas.common import ApiResponse
from placement_portal.schemas.search import SearchFilters, SearchResponse, SearchSuggestions
from placement_portal.services.dependencies import get_search_service
from placement_portal.services.search_service import SearchService
from placement_portal.utils.validators import validate_search_filters

router = APIRouter(prefix="/api/search", tags=["search"])


async def _caller_skills(session: AsyncSession, user: CurrentUser) -> list[str]:
    profile = await session.get(User, user.id)
    return list(profile.skills or []) if profile else []


async def _run_search(
    filters: SearchFilters,
    user: CurrentUser,
    service: SearchService,
    session: AsyncSession,
) -> ApiResponse[SearchResponse]:
    validation = validate_search_filters(filters)
    if not validation.is_valid:
        raise HTTPException(status_code=400, detail=validation.error)
    try:
        result = await service.search(filters, await _caller_skills(session, user))
    except SQLAlchemyError as e:
        raise database_error("search", e)
    message = "; ".join(validation.warnings) or None
    return ApiResponse(data=result, message=message)


@router.get("", response_model=ApiResponse[SearchResponse])
async def search_get(
    query: str | None = Query(default=None, max_length=200),
    skills: list[str] = Query(default=[]),
    departments: list[str] = Query(default=[]),
    stipend_min: int | None = Query(default=None, ge=0),
    stipend_max: int | None = Query(default=None, ge=0),
    type: Literal["internship", "placement", "both"] = "both",
    locations: list[str] = Query(default=[]),
    duration: Literal["short", "medium", "long"] | None = None,
    companies: list[str] = Query(default=[]),
    date_posted: Literal["today", "week", "month", "all"] = "all",
    sort_by: Literal["relevance", "date", "stipend"] = "relevance",
    sort_order: Literal["asc", "desc"] = "desc",
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    user: CurrentUser = Depends(get_current_user),
    service: SearchService = Depends(get_search_service),
    session: AsyncSession = Depends(get_session),
):
    """Search active internships with query-string filters."""
    filters = SearchFilters(
        query=query,
        skills=skills,
        departments=departments,
        stipend_min=stipend_min,
        stipend_max=stipend_max,
        type=type,
        locations=locations,
        duration=duration,
        companies=companies,
        date_posted=date_posted,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
    )
    return await _run_search(filters, user, service, session)


@router.post("", response_model=ApiResponse[SearchResponse])
async def search_post(
    filters: SearchFilters,
    user: CurrentUser = Depends(get_current_user),
    service: SearchService = Depends(get_search_service),
    session: AsyncSession = Depends(get_session),
):
    """Search active internships with a filter object."""
    return await _run_search(filters, user, service, session)


@router.get("/suggestions", response_model=ApiResponse[SearchSuggestions])
async def search_suggestions(
    prefix: str | None = Query(default=None, max_length=100),
    limit: int = Query(default=10, ge=1, le=50),
    user: CurrentUser = Depends(get_current_user),
    service: SearchService = Depends(get_search_service),
):
    try:
        return ApiResponse(data=await service.suggestions(prefix, limit))
    except SQLAlchemyError as e:
        raise database_error("search suggestions", e)
