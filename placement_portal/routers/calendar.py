"""API routes for calendar events."""

from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from placement_portal.core.auth import CurrentUser, get_current_user
from placement_portal.core.exceptions import ApplicationError
from placement_portal.core.storage import utc_now
from placement_portal.routers.errors import database_error, rejected
from placement_portal.schemas.calendar import (
    CalendarEventCreate,
    CalendarEventResponse,
    ConflictCheckRequest,
    ConflictReport,
)
from placement_portal.schemas.common import ApiResponse, to_naive_utc
from placement_portal.services.calendar_service import CalendarService
from placement_portal.services.dependencies import get_calendar_service

router = APIRouter(prefix="/api/calendar", tags=["calendar"])


@router.get("/events", response_model=ApiResponse[list[CalendarEventResponse]])
async def list_events(
    start: datetime | None = None,
    end: datetime | None = None,
    user: CurrentUser = Depends(get_current_user),
    service: CalendarService = Depends(get_calendar_service),
):
    """The caller's events in a window; defaults to the next 30 days."""
    start = to_naive_utc(start) if start else utc_now()
    end = to_naive_utc(end) if end else start + timedelta(days=30)
    if end <= start:
        raise HTTPException(status_code=400, detail="end must be after start")
    try:
        events = await service.list_events(user.id, start, end)
        return ApiResponse(data=[CalendarEventResponse.model_validate(e) for e in events])
    except SQLAlchemyError as e:
        raise database_error("list calendar events", e)


@router.post(
    "/events",
    response_model=ApiResponse[CalendarEventResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_event(
    request: CalendarEventCreate,
    user: CurrentUser = Depends(get_current_user),
    service: CalendarService = Depends(get_calendar_service),
):
    try:
        event = await service.create_event(user, request)
        return ApiResponse(data=CalendarEventResponse.model_validate(event))
    except ApplicationError as e:
        raise rejected("create calendar event", e)
    except SQLAlchemyError as e:
        raise database_error("create calendar event", e)


@router.post("/conflicts", response_model=ApiResponse[ConflictReport])
async def check_conflicts(
    request: ConflictCheckRequest,
    user: CurrentUser = Depends(get_current_user),
    service: CalendarService = Depends(get_calendar_service),
):
    """Report events overlapping a proposed interval, with alternatives."""
    try:
        report = await service.check_conflicts(
            request.user_ids, request.start_datetime, request.end_datetime
        )
        return ApiResponse(data=report)
    except SQLAlchemyError as e:
        raise database_error("calendar conflict check", e)
