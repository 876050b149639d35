"""API routes for interview scheduling."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import SQLAlchemyError

from placement_portal.core.auth import CurrentUser, get_current_user, require_roles
from placement_portal.core.exceptions import ApplicationError
from placement_portal.models.enums import Role
from placement_portal.routers.errors import database_error, rejected
from placement_portal.schemas.calendar import (
    AvailableSlot,
    ConflictCheckRequest,
    ConflictReport,
)
from placement_portal.schemas.common import ApiResponse
from placement_portal.schemas.interview import (
    InterviewCreate,
    InterviewReschedule,
    InterviewResponse,
    InterviewStatusUpdate,
)
from placement_portal.services.dependencies import get_interview_service
from placement_portal.services.interview_service import InterviewService

router = APIRouter(prefix="/api/interviews", tags=["interviews"])

SCHEDULERS = (Role.EMPLOYER, Role.STAFF)


@router.get("/available-slots", response_model=ApiResponse[list[AvailableSlot]])
async def available_slots(
    interviewer_id: int,
    day: date = Query(..., alias="date"),
    duration_minutes: int = Query(default=60, ge=15, le=480),
    user: CurrentUser = Depends(get_current_user),
    service: InterviewService = Depends(get_interview_service),
):
    """Free weekday slots of an interviewer, outside lunch."""
    try:
        slots = await service.available_slots(interviewer_id, day, duration_minutes)
        return ApiResponse(data=slots)
    except ApplicationError as e:
        raise rejected("available slots", e)
    except SQLAlchemyError as e:
        raise database_error("available slots", e)


@router.post("/conflicts", response_model=ApiResponse[ConflictReport])
async def check_conflicts(
    request: ConflictCheckRequest,
    user: CurrentUser = Depends(require_roles(Role.EMPLOYER, Role.STAFF, Role.MENTOR)),
    service: InterviewService = Depends(get_interview_service),
):
    """Dry-run conflict check for a proposed interval."""
    try:
        report = await service.check_conflicts(
            request.user_ids, request.start_datetime, request.end_datetime
        )
        return ApiResponse(data=report)
    except SQLAlchemyError as e:
        raise database_error("conflict check", e)


@router.post(
    "",
    response_model=ApiResponse[InterviewResponse],
    status_code=status.HTTP_201_CREATED,
)
async def schedule_interview(
    request: InterviewCreate,
    user: CurrentUser = Depends(require_roles(*SCHEDULERS)),
    service: InterviewService = Depends(get_interview_service),
):
    """Schedule an interview; rejected with the conflict report on any overlap."""
    try:
        interview = await service.schedule(user, request)
        return ApiResponse(
            data=InterviewResponse.model_validate(interview),
            message="Interview scheduled",
        )
    except ApplicationError as e:
        raise rejected("schedule interview", e)
    except SQLAlchemyError as e:
        raise database_error("schedule interview", e)


@router.patch("/{interview_id}/status", response_model=ApiResponse[InterviewResponse])
async def update_interview_status(
    interview_id: int,
    request: InterviewStatusUpdate,
    user: CurrentUser = Depends(require_roles(*SCHEDULERS)),
    service: InterviewService = Depends(get_interview_service),
):
    try:
        interview = await service.update_status(user, interview_id, request)
        return ApiResponse(data=InterviewResponse.model_validate(interview))
    except ApplicationError as e:
        raise rejected("update interview status", e)
    except SQLAlchemyError as e:
        raise database_error("update interview status", e)


@router.post(
    "/{interview_id}/reschedule",
    response_model=ApiResponse[InterviewResponse],
    status_code=status.HTTP_201_CREATED,
)
async def reschedule_interview(
    interview_id: int,
    request: InterviewReschedule,
    user: CurrentUser = Depends(require_roles(*SCHEDULERS)),
    service: InterviewService = Depends(get_interview_service),
):
    """Book a successor interview and retire the current one."""
    try:
        interview = await service.reschedule(user, interview_id, request)
        return ApiResponse(
            data=InterviewResponse.model_validate(interview),
            message="Interview rescheduled",
        )
    except ApplicationError as e:
        raise rejected("reschedule interview", e)
    except SQLAlchemyError as e:
        raise database_error("reschedule interview", e)


@router.get("", response_model=ApiResponse[list[InterviewResponse]])
async def list_interviews(
    application_id: int | None = None,
    user: CurrentUser = Depends(get_current_user),
    service: InterviewService = Depends(get_interview_service),
):
    try:
        interviews = await service.list_for_user(user, application_id)
        return ApiResponse(data=[InterviewResponse.model_validate(i) for i in interviews])
    except ApplicationError as e:
        raise rejected("list interviews", e)
    except SQLAlchemyError as e:
        raise database_error("list interviews", e)
