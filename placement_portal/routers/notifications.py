"""API routes for in-app notifications."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError

from placement_portal.core.auth import CurrentUser, get_current_user
from placement_portal.core.exceptions import ApplicationError
from placement_portal.routers.errors import database_error, rejected
from placement_portal.schemas.common import ApiResponse
from placement_portal.schemas.notification import NotificationResponse
from placement_portal.services.dependencies import get_notification_service
from placement_portal.services.notification_service import NotificationService

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=ApiResponse[list[NotificationResponse]])
async def list_notifications(
    unread_only: bool = False,
    limit: int = Query(default=50, ge=1, le=200),
    user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    """Newest first; clients poll this endpoint."""
    try:
        rows = await service.list_for_user(user, unread_only, limit)
        return ApiResponse(data=[NotificationResponse.model_validate(n) for n in rows])
    except SQLAlchemyError as e:
        raise database_error("list notifications", e)


@router.post("/{notification_id}/read", response_model=ApiResponse[NotificationResponse])
async def mark_read(
    notification_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    try:
        notification = await service.mark_read(user, notification_id)
        return ApiResponse(data=NotificationResponse.model_validate(notification))
    except ApplicationError as e:
        raise rejected("mark notification read", e)
    except SQLAlchemyError as e:
        raise database_error("mark notification read", e)
