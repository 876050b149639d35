"""In-app notifications, delivered by client polling."""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from placement_portal.core.auth import CurrentUser
from placement_portal.core.exceptions import NotFoundError, PermissionDeniedError
from placement_portal.models.enums import NotificationType
from placement_portal.models.notification import Notification

logger = logging.getLogger(__name__)


class NotificationService:
    """Stores notifications inside the caller's transaction."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def notify(
        self,
        user_id: int,
        type: NotificationType,
        title: str,
        message: str,
        data: dict[str, Any] | None = None,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            type=type.value,
            title=title,
            message=message,
            data=data,
        )
        self.session.add(notification)
        logger.info(f"Notify user {user_id} [{type.value}]: {title}")
        return notification

    async def list_for_user(
        self, user: CurrentUser, unread_only: bool = False, limit: int = 50
    ) -> list[Notification]:
        query = select(Notification).where(Notification.user_id == user.id)
        if unread_only:
            query = query.where(Notification.is_read.is_(False))
        query = query.order_by(Notification.created_at.desc(), Notification.id.desc())
        result = await self.session.execute(query.limit(limit))
        return list(result.scalars().all())

    async def mark_read(self, user: CurrentUser, notification_id: int) -> Notification:
        notification = await self.session.get(Notification, notification_id)
        if notification is None:
            raise NotFoundError("Notification", notification_id)
        if notification.user_id != user.id:
            raise PermissionDeniedError("Cannot modify another user's notification")
        notification.is_read = True
        await self.session.commit()
        return notification
