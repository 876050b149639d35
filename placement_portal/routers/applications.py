"""API routes for the application lifecycle."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import SQLAlchemyError

from placement_portal.core.auth import CurrentUser, get_current_user, require_roles
from placement_portal.core.exceptions import ApplicationError
from placement_portal.models.enums import ApplicationStatus, Role
from placement_portal.routers.errors import database_error, rejected
from placement_portal.schemas.application import (
    ApplicationCreate,
    ApplicationDetail,
    ApplicationResponse,
    CompleteApplicationRequest,
    CompletionResponse,
    MentorDecisionRequest,
    ResumeViewStatus,
    TrackingProgress,
    TrackingStepUpdate,
    VersionedRequest,
)
from placement_portal.schemas.certificate import CertificateResponse
from placement_portal.schemas.common import ApiResponse
from placement_portal.services.application_service import ApplicationService
from placement_portal.services.dependencies import get_application_service

router = APIRouter(prefix="/api/applications", tags=["applications"])


@router.post(
    "",
    response_model=ApiResponse[ApplicationResponse],
    status_code=status.HTTP_201_CREATED,
)
async def submit_application(
    request: ApplicationCreate,
    user: CurrentUser = Depends(require_roles(Role.STUDENT)),
    service: ApplicationService = Depends(get_application_service),
):
    """Apply to an internship."""
    try:
        application = await service.submit(user, request)
        return ApiResponse(
            data=ApplicationResponse.model_validate(application),
            message="Application submitted",
        )
    except ApplicationError as e:
        raise rejected("submit application", e)
    except SQLAlchemyError as e:
        raise database_error("submit application", e)


@router.get("", response_model=ApiResponse[list[ApplicationResponse]])
async def list_applications(
    status_filter: ApplicationStatus | None = Query(default=None, alias="status"),
    user: CurrentUser = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
):
    """List the applications visible to the caller."""
    try:
        applications = await service.list_for_user(user, status_filter)
        return ApiResponse(
            data=[ApplicationResponse.model_validate(a) for a in applications]
        )
    except ApplicationError as e:
        raise rejected("list applications", e)
    except SQLAlchemyError as e:
        raise database_error("list applications", e)


@router.get("/{application_id}", response_model=ApiResponse[ApplicationDetail])
async def get_application(
    application_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
):
    """Application with tracking progress, interviews, offers and feedback."""
    try:
        return ApiResponse(data=await service.get_detail(user, application_id))
    except ApplicationError as e:
        raise rejected("get application", e)
    except SQLAlchemyError as e:
        raise database_error("get application", e)


@router.get("/{application_id}/tracking", response_model=ApiResponse[TrackingProgress])
async def get_tracking(
    application_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
):
    try:
        return ApiResponse(data=await service.get_progress(user, application_id))
    except ApplicationError as e:
        raise rejected("get tracking", e)
    except SQLAlchemyError as e:
        raise database_error("get tracking", e)


@router.patch(
    "/{application_id}/tracking/{step_id}",
    response_model=ApiResponse[TrackingProgress],
)
async def update_tracking_step(
    application_id: int,
    step_id: int,
    request: TrackingStepUpdate,
    user: CurrentUser = Depends(require_roles(Role.STAFF, Role.MENTOR, Role.EMPLOYER)),
    service: ApplicationService = Depends(get_application_service),
):
    """Update one tracking step without changing the application status."""
    try:
        progress = await service.update_tracking_step(user, application_id, step_id, request)
        return ApiResponse(data=progress)
    except ApplicationError as e:
        raise rejected("update tracking step", e)
    except SQLAlchemyError as e:
        raise database_error("update tracking step", e)


@router.post(
    "/{application_id}/mentor-review", response_model=ApiResponse[ApplicationResponse]
)
async def start_mentor_review(
    application_id: int,
    request: VersionedRequest,
    user: CurrentUser = Depends(require_roles(Role.MENTOR)),
    service: ApplicationService = Depends(get_application_service),
):
    try:
        application = await service.start_mentor_review(user, application_id, request)
        return ApiResponse(data=ApplicationResponse.model_validate(application))
    except ApplicationError as e:
        raise rejected("start mentor review", e)
    except SQLAlchemyError as e:
        raise database_error("start mentor review", e)


@router.post(
    "/{application_id}/mentor-decision", response_model=ApiResponse[ApplicationResponse]
)
async def mentor_decision(
    application_id: int,
    request: MentorDecisionRequest,
    user: CurrentUser = Depends(require_roles(Role.MENTOR)),
    service: ApplicationService = Depends(get_application_service),
):
    """Approve or reject an application for a student of the mentor's department."""
    try:
        application = await service.mentor_decision(user, application_id, request)
        return ApiResponse(
            data=ApplicationResponse.model_validate(application),
            message=f"Application {request.decision.lower()}",
        )
    except ApplicationError as e:
        raise rejected("mentor decision", e)
    except SQLAlchemyError as e:
        raise database_error("mentor decision", e)


@router.post(
    "/{application_id}/employer-review", response_model=ApiResponse[ApplicationResponse]
)
async def start_employer_review(
    application_id: int,
    request: VersionedRequest,
    user: CurrentUser = Depends(require_roles(Role.EMPLOYER, Role.STAFF)),
    service: ApplicationService = Depends(get_application_service),
):
    try:
        application = await service.start_employer_review(user, application_id, request)
        return ApiResponse(data=ApplicationResponse.model_validate(application))
    except ApplicationError as e:
        raise rejected("start employer review", e)
    except SQLAlchemyError as e:
        raise database_error("start employer review", e)


@router.post(
    "/{application_id}/not-offered", response_model=ApiResponse[ApplicationResponse]
)
async def mark_not_offered(
    application_id: int,
    request: VersionedRequest,
    user: CurrentUser = Depends(require_roles(Role.EMPLOYER, Role.STAFF)),
    service: ApplicationService = Depends(get_application_service),
):
    try:
        application = await service.mark_not_offered(user, application_id, request)
        return ApiResponse(data=ApplicationResponse.model_validate(application))
    except ApplicationError as e:
        raise rejected("mark not offered", e)
    except SQLAlchemyError as e:
        raise database_error("mark not offered", e)


@router.post("/{application_id}/withdraw", response_model=ApiResponse[ApplicationResponse])
async def withdraw_application(
    application_id: int,
    request: VersionedRequest,
    user: CurrentUser = Depends(require_roles(Role.STUDENT)),
    service: ApplicationService = Depends(get_application_service),
):
    try:
        application = await service.withdraw(user, application_id, request)
        return ApiResponse(data=ApplicationResponse.model_validate(application))
    except ApplicationError as e:
        raise rejected("withdraw application", e)
    except SQLAlchemyError as e:
        raise database_error("withdraw application", e)


@router.post("/{application_id}/complete", response_model=ApiResponse[CompletionResponse])
async def complete_application(
    application_id: int,
    request: CompleteApplicationRequest,
    user: CurrentUser = Depends(require_roles(Role.EMPLOYER, Role.STAFF)),
    service: ApplicationService = Depends(get_application_service),
):
    """Mark the internship completed and issue the certificate."""
    try:
        application, certificate = await service.complete(user, application_id, request)
        return ApiResponse(
            data=CompletionResponse(
                application=ApplicationResponse.model_validate(application),
                certificate=CertificateResponse.model_validate(certificate),
            ),
            message="Internship completed",
        )
    except ApplicationError as e:
        raise rejected("complete application", e)
    except SQLAlchemyError as e:
        raise database_error("complete application", e)


@router.post(
    "/{application_id}/resume-viewed", response_model=ApiResponse[ResumeViewStatus]
)
async def mark_resume_viewed(
    application_id: int,
    user: CurrentUser = Depends(require_roles(Role.EMPLOYER, Role.STAFF)),
    service: ApplicationService = Depends(get_application_service),
):
    try:
        return ApiResponse(data=await service.mark_resume_viewed(user, application_id))
    except ApplicationError as e:
        raise rejected("mark resume viewed", e)
    except SQLAlchemyError as e:
        raise database_error("mark resume viewed", e)


@router.get("/{application_id}/resume-status", response_model=ApiResponse[ResumeViewStatus])
async def resume_view_status(
    application_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
):
    try:
        return ApiResponse(data=await service.resume_view_status(user, application_id))
    except ApplicationError as e:
        raise rejected("resume status", e)
    except SQLAlchemyError as e:
        raise database_error("resume status", e)
