"""API routes for the mentor approval workflow."""

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError

from placement_portal.core.auth import CurrentUser, require_roles
from placement_portal.core.exceptions import ApplicationError
from placement_portal.models.enums import Role
from placement_portal.routers.errors import database_error, rejected
from placement_portal.schemas.common import ApiResponse
from placement_portal.schemas.mentor import MentorWorkflowAnalytics, MentorWorkqueue
from placement_portal.services.dependencies import get_mentor_workflow_service
from placement_portal.services.mentor_workflow_service import MentorWorkflowService

router = APIRouter(prefix="/api/mentor", tags=["mentor"])


@router.get("/workqueue", response_model=ApiResponse[MentorWorkqueue])
async def mentor_workqueue(
    user: CurrentUser = Depends(require_roles(Role.MENTOR)),
    service: MentorWorkflowService = Depends(get_mentor_workflow_service),
):
    """Pending approvals for the calling mentor, most urgent first."""
    try:
        return ApiResponse(data=await service.workqueue(user))
    except ApplicationError as e:
        raise rejected("mentor workqueue", e)
    except SQLAlchemyError as e:
        raise database_error("mentor workqueue", e)


@router.get("/analytics", response_model=ApiResponse[MentorWorkflowAnalytics])
async def mentor_analytics(
    user: CurrentUser = Depends(require_roles(Role.STAFF, Role.MENTOR)),
    service: MentorWorkflowService = Depends(get_mentor_workflow_service),
):
    try:
        return ApiResponse(data=await service.analytics())
    except SQLAlchemyError as e:
        raise database_error("mentor analytics", e)
