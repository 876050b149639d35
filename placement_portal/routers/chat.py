"""API routes for student-mentor chat."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError

from placement_portal.core.auth import CurrentUser, require_roles
from placement_portal.core.exceptions import ApplicationError
from placement_portal.models.enums import Role
from placement_portal.routers.errors import database_error, rejected
from placement_portal.schemas.chat import (
    ChatMessageCreate,
    ChatMessageResponse,
    ChatRoomSummary,
    ChatThread,
    UnreadCount,
)
from placement_portal.schemas.common import ApiResponse
from placement_portal.services.chat_service import ChatService
from placement_portal.services.dependencies import get_chat_service

router = APIRouter(prefix="/api/chat", tags=["chat"])

chat_participant = require_roles(Role.STUDENT, Role.MENTOR)


@router.post(
    "/messages",
    response_model=ApiResponse[ChatMessageResponse],
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    request: ChatMessageCreate,
    user: CurrentUser = Depends(chat_participant),
    service: ChatService = Depends(get_chat_service),
):
    """Post a message, opening the application's room if needed."""
    try:
        message = await service.send(user, request)
        return ApiResponse(data=ChatMessageResponse.model_validate(message))
    except ApplicationError as e:
        raise rejected("send chat message", e)
    except SQLAlchemyError as e:
        raise database_error("send chat message", e)


@router.get("/rooms", response_model=ApiResponse[list[ChatRoomSummary]])
async def list_rooms(
    user: CurrentUser = Depends(chat_participant),
    service: ChatService = Depends(get_chat_service),
):
    try:
        return ApiResponse(data=await service.list_rooms(user))
    except ApplicationError as e:
        raise rejected("list chat rooms", e)
    except SQLAlchemyError as e:
        raise database_error("list chat rooms", e)


@router.get("/rooms/{application_id}", response_model=ApiResponse[ChatThread])
async def get_thread(
    application_id: int,
    user: CurrentUser = Depends(chat_participant),
    service: ChatService = Depends(get_chat_service),
):
    """Full history of an application's room; marks incoming messages read."""
    try:
        return ApiResponse(data=await service.get_thread(user, application_id))
    except ApplicationError as e:
        raise rejected("get chat thread", e)
    except SQLAlchemyError as e:
        raise database_error("get chat thread", e)


@router.get("/unread-count", response_model=ApiResponse[UnreadCount])
async def unread_count(
    user: CurrentUser = Depends(chat_participant),
    service: ChatService = Depends(get_chat_service),
):
    try:
        return ApiResponse(data=UnreadCount(unread_count=await service.unread_count(user)))
    except ApplicationError as e:
        raise rejected("unread count", e)
    except SQLAlchemyError as e:
        raise database_error("unread count", e)
