"""Per-application chat between a student and a mentor."""

import logging

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from placement_portal.core.auth import CurrentUser
from placement_portal.core.exceptions import PermissionDeniedError, ValidationFailedError
from placement_portal.core.storage import utc_now
from placement_portal.models.application import Application
from placement_portal.models.chat import ChatMessage, ChatRoom
from placement_portal.models.enums import NotificationType, Role
from placement_portal.models.user import User
from placement_portal.schemas.chat import (
    ChatMessageCreate,
    ChatMessageResponse,
    ChatRoomResponse,
    ChatRoomSummary,
    ChatThread,
)
from placement_portal.services import access
from placement_portal.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class ChatService:
    """Rooms are created lazily on the first message; messages are append-only."""

    def __init__(self, session: AsyncSession, notifications: NotificationService | None = None):
        self.session = session
        self.notifications = notifications or NotificationService(session)

    async def _authorize(self, user: CurrentUser, application_id: int) -> Application:
        application = await access.get_application(self.session, application_id)
        if user.role == Role.STUDENT:
            if application.student_id != user.id:
                raise PermissionDeniedError("Students can only chat about their own applications")
        elif user.role == Role.MENTOR:
            mentor = await access.get_user(self.session, user.id)
            student = await access.get_user(self.session, application.student_id)
            access.ensure_same_department(mentor, student)
        else:
            raise PermissionDeniedError("Chat is limited to students and mentors")
        return application

    async def _get_room(self, application_id: int) -> ChatRoom | None:
        result = await self.session.execute(
            select(ChatRoom).where(ChatRoom.application_id == application_id)
        )
        return result.scalars().first()

    async def _pick_mentor(self, user: CurrentUser, application: Application) -> int:
        if application.mentor_id is not None:
            return application.mentor_id
        if user.role == Role.MENTOR:
            return user.id
        student = await access.get_user(self.session, application.student_id)
        result = await self.session.execute(
            select(User.id)
            .where(User.role == Role.MENTOR.value, User.department == student.department)
            .order_by(User.id)
            .limit(1)
        )
        mentor_id = result.scalar_one_or_none()
        if mentor_id is None:
            raise ValidationFailedError(
                f"No mentor available in department {student.department}"
            )
        return mentor_id

    async def send(self, user: CurrentUser, data: ChatMessageCreate) -> ChatMessage:
        application = await self._authorize(user, data.application_id)
        room = await self._get_room(application.id)
        if room is None:
            room = ChatRoom(
                application_id=application.id,
                student_id=application.student_id,
                mentor_id=await self._pick_mentor(user, application),
            )
            self.session.add(room)
            await self.session.flush()
            logger.info(f"Chat room {room.id} opened for application {application.id}")
        elif user.role == Role.MENTOR and room.mentor_id != user.id:
            raise PermissionDeniedError("Another mentor owns this conversation")

        message = ChatMessage(
            chat_room_id=room.id,
            sender_id=user.id,
            message=data.message,
            is_read=False,
        )
        self.session.add(message)
        room.updated_at = utc_now()

        recipient = room.mentor_id if user.id == room.student_id else room.student_id
        self.notifications.notify(
            recipient,
            NotificationType.GENERAL,
            "New chat message",
            data.message[:120],
            {"application_id": application.id, "chat_room_id": room.id},
        )
        await self.session.commit()
        return message

    async def get_thread(self, user: CurrentUser, application_id: int) -> ChatThread:
        """Full history of the room; marks the other party's messages read."""
        await self._authorize(user, application_id)
        room = await self._get_room(application_id)
        if room is None:
            return ChatThread(room=None, messages=[])

        await self.session.execute(
            update(ChatMessage)
            .where(
                ChatMessage.chat_room_id == room.id,
                ChatMessage.sender_id != user.id,
                ChatMessage.is_read.is_(False),
            )
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()

        result = await self.session.execute(
            select(ChatMessage)
            .where(ChatMessage.chat_room_id == room.id)
            .order_by(ChatMessage.created_at, ChatMessage.id)
            .execution_options(populate_existing=True)
        )
        return ChatThread(
            room=ChatRoomResponse.model_validate(room),
            messages=[ChatMessageResponse.model_validate(m) for m in result.scalars().all()],
        )

    def _rooms_query(self, user: CurrentUser):
        if user.role == Role.STUDENT:
            return select(ChatRoom).where(ChatRoom.student_id == user.id)
        if user.role == Role.MENTOR:
            return select(ChatRoom).where(ChatRoom.mentor_id == user.id)
        raise PermissionDeniedError("Chat is limited to students and mentors")

    async def list_rooms(self, user: CurrentUser) -> list[ChatRoomSummary]:
        result = await self.session.execute(
            self._rooms_query(user).order_by(ChatRoom.updated_at.desc())
        )
        summaries = []
        for room in result.scalars().all():
            latest = await self.session.execute(
                select(ChatMessage)
                .where(ChatMessage.chat_room_id == room.id)
                .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
                .limit(1)
            )
            latest_message = latest.scalars().first()
            unread = await self.session.scalar(
                select(func.count(ChatMessage.id)).where(
                    ChatMessage.chat_room_id == room.id,
                    ChatMessage.sender_id != user.id,
                    ChatMessage.is_read.is_(False),
                )
            )
            summaries.append(
                ChatRoomSummary(
                    room=ChatRoomResponse.model_validate(room),
                    latest_message=(
                        ChatMessageResponse.model_validate(latest_message)
                        if latest_message
                        else None
                    ),
                    unread_count=unread or 0,
                )
            )
        return summaries

    async def unread_count(self, user: CurrentUser) -> int:
        room_ids = self._rooms_query(user).with_only_columns(ChatRoom.id)
        count = await self.session.scalar(
            select(func.count(ChatMessage.id)).where(
                ChatMessage.chat_room_id.in_(room_ids),
                ChatMessage.sender_id != user.id,
                ChatMessage.is_read.is_(False),
            )
        )
        return count or 0
