"""Schemas for student-mentor chat."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ChatMessageCreate(BaseModel):
    application_id: int = Field(..., ge=1)
    message: str = Field(..., min_length=1, max_length=5000)


class ChatMessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    chat_room_id: int
    sender_id: int
    message: str
    is_read: bool
    created_at: datetime


class ChatRoomResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    application_id: int
    student_id: int
    mentor_id: int
    created_at: datetime
    updated_at: datetime


class ChatRoomSummary(BaseModel):
    """A room with its most recent message, for the room list."""

    room: ChatRoomResponse
    latest_message: ChatMessageResponse | None
    unread_count: int


class ChatThread(BaseModel):
    """Full history of a room; ``room`` is None until the first message."""

    room: ChatRoomResponse | None
    messages: list[ChatMessageResponse]


class UnreadCount(BaseModel):
    unread_count: int
