"""Account registration and login."""

import logging

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from placement_portal.core.auth import create_access_token, hash_password, verify_password
from placement_portal.core.exceptions import ValidationFailedError
from placement_portal.models.enums import PlacementStatus
from placement_portal.models.user import User
from placement_portal.schemas.auth import RegisterRequest

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def register(self, data: RegisterRequest) -> User:
        email = data.email.lower()
        existing = await self.session.execute(
            select(User.id).where(or_(User.email == email, User.username == data.username))
        )
        if existing.first() is not None:
            raise ValidationFailedError("Email or username is already registered")

        user = User(
            username=data.username,
            email=email,
            password_hash=hash_password(data.password),
            name=data.name,
            role=data.role.value,
            department=data.department,
            current_semester=data.current_semester,
            skills=data.skills,
            cgpa=data.cgpa,
            placement_status=PlacementStatus.AVAILABLE.value,
        )
        self.session.add(user)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise ValidationFailedError("Email or username is already registered")
        logger.info(f"Registered user {user.id} as {user.role}")
        return user

    async def authenticate(self, email: str, password: str) -> tuple[User, str] | None:
        """Return the user and a fresh token, or None on bad credentials."""
        result = await self.session.execute(select(User).where(User.email == email.lower()))
        user = result.scalars().first()
        if user is None or not verify_password(password, user.password_hash):
            logger.warning(f"Failed login for {email}")
            return None
        return user, create_access_token(user)
