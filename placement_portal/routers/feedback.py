"""API routes for supervisor feedback."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError

from placement_portal.core.auth import CurrentUser, get_current_user, require_roles
from placement_portal.core.exceptions import ApplicationError
from placement_portal.models.enums import Role
from placement_portal.routers.errors import database_error, rejected
from placement_portal.schemas.common import ApiResponse
from placement_portal.schemas.feedback import FeedbackCreate, FeedbackResponse
from placement_portal.services.dependencies import get_feedback_service
from placement_portal.services.feedback_service import FeedbackService

router = APIRouter(prefix="/api/feedback", tags=["feedback"])


@router.post(
    "",
    response_model=ApiResponse[FeedbackResponse],
    status_code=status.HTTP_201_CREATED,
)
async def submit_feedback(
    request: FeedbackCreate,
    user: CurrentUser = Depends(require_roles(Role.EMPLOYER)),
    service: FeedbackService = Depends(get_feedback_service),
):
    """Submit feedback for an application of one of the caller's postings."""
    try:
        feedback = await service.submit(user, request)
        return ApiResponse(
            data=FeedbackResponse.model_validate(feedback),
            message="Feedback submitted",
        )
    except ApplicationError as e:
        raise rejected("submit feedback", e)
    except SQLAlchemyError as e:
        raise database_error("submit feedback", e)


@router.get("", response_model=ApiResponse[list[FeedbackResponse]])
async def list_feedback(
    application_id: int | None = None,
    user: CurrentUser = Depends(get_current_user),
    service: FeedbackService = Depends(get_feedback_service),
):
    try:
        rows = await service.list_for_user(user, application_id)
        return ApiResponse(data=[FeedbackResponse.model_validate(f) for f in rows])
    except ApplicationError as e:
        raise rejected("list feedback", e)
    except SQLAlchemyError as e:
        raise database_error("list feedback", e)
