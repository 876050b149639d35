"""Lookup, ownership and concurrency helpers shared by the services."""

import functools
import logging
from collections.abc import Iterable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from placement_portal.core.auth import CurrentUser
from placement_portal.core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    StaleVersionError,
)
from placement_portal.models.application import Application
from placement_portal.models.enums import ApplicationStatus, Role
from placement_portal.models.internship import Internship
from placement_portal.models.user import User

logger = logging.getLogger(__name__)


async def get_application(session: AsyncSession, application_id: int) -> Application:
    application = await session.get(Application, application_id)
    if application is None:
        raise NotFoundError("Application", application_id)
    return application


async def get_internship(session: AsyncSession, internship_id: int) -> Internship:
    internship = await session.get(Internship, internship_id)
    if internship is None:
        raise NotFoundError("Internship", internship_id)
    return internship


async def get_user(session: AsyncSession, user_id: int) -> User:
    user = await session.get(User, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


def ensure_internship_owner(actor: CurrentUser, internship: Internship) -> None:
    """Staff may act on any posting; employers only on their own."""
    if actor.role == Role.STAFF:
        return
    if actor.role == Role.EMPLOYER and internship.posted_by == actor.id:
        return
    raise PermissionDeniedError(
        f"User {actor.id} is not the owner of internship {internship.id}"
    )


def ensure_same_department(mentor: User, student: User) -> None:
    if not mentor.department or mentor.department != student.department:
        raise PermissionDeniedError(
            "Mentors can only act on students of their own department"
        )


async def ensure_can_view(
    session: AsyncSession,
    user: CurrentUser,
    application: Application,
    internship: Internship | None = None,
) -> None:
    """Raise PermissionDeniedError unless the caller may read the application."""
    if user.role == Role.STAFF:
        return
    if user.role == Role.STUDENT:
        if application.student_id == user.id:
            return
    elif user.role == Role.EMPLOYER:
        internship = internship or await get_internship(
            session, application.internship_id
        )
        if internship.posted_by == user.id:
            return
    elif user.role == Role.MENTOR:
        mentor = await get_user(session, user.id)
        student = await get_user(session, application.student_id)
        if mentor.department and mentor.department == student.department:
            return
    raise PermissionDeniedError(f"Access to application {application.id} denied")


def check_version(application: Application, expected_version: int | None) -> None:
    """Refuse writes based on an outdated read."""
    if expected_version is not None and expected_version != application.version:
        raise StaleVersionError(application.id, expected_version, application.version)


def require_status(
    application: Application,
    allowed: Iterable[ApplicationStatus],
    operation: str,
) -> None:
    if ApplicationStatus(application.status) not in set(allowed):
        raise InvalidTransitionError(application.id, application.status, operation)


def move_to(
    application: Application, target: ApplicationStatus, actor_id: int | None
) -> None:
    previous = application.status
    application.status = target.value
    logger.info(
        f"Application {application.id} moved {previous} -> {target.value} by user {actor_id}"
    )


async def commit(session: AsyncSession) -> None:
    """Commit the unit of work, rolling back on constraint violations."""
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise


def lost_update_as_conflict(method):
    """Report a lost update on a versioned row as StaleVersionError.

    The versioned UPDATE is flushed either by the final commit or by an earlier
    autoflush (any query issued after the mutation), so the whole service
    method is covered. The session is rolled back before the error propagates.
    """

    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        try:
            return await method(self, *args, **kwargs)
        except StaleDataError:
            await self.session.rollback()
            logger.warning(f"Concurrent update detected in {method.__qualname__}")
            raise StaleVersionError(None)

    return wrapper
