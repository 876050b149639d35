"""Supervisor feedback; submitting it closes the application as COMPLETED."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from placement_portal.core.auth import CurrentUser
from placement_portal.core.exceptions import DuplicateFeedbackError, PermissionDeniedError
from placement_portal.core.storage import utc_now
from placement_portal.models.application import Application
from placement_portal.models.enums import ApplicationStatus, NotificationType, Role
from placement_portal.models.feedback import Feedback
from placement_portal.schemas.feedback import FeedbackCreate
from placement_portal.services import access
from placement_portal.services.application_service import ApplicationService
from placement_portal.services.certificate_service import CompletionData

logger = logging.getLogger(__name__)

FEEDBACK_ALLOWED_FROM = (ApplicationStatus.OFFERED, ApplicationStatus.COMPLETED)


class FeedbackService:
    def __init__(self, session: AsyncSession, applications: ApplicationService):
        self.session = session
        self.applications = applications
        self.tracking = applications.tracking
        self.notifications = applications.notifications

    async def _exists(self, application_id: int) -> bool:
        result = await self.session.execute(
            select(Feedback.id).where(Feedback.application_id == application_id)
        )
        return result.first() is not None

    @access.lost_update_as_conflict
    async def submit(self, employer: CurrentUser, data: FeedbackCreate) -> Feedback:
        """Record feedback from the employer who posted the internship.

        Only one feedback row may exist per application. An OFFERED application
        is completed on the way, which issues the certificate.
        """
        application = await access.get_application(self.session, data.application_id)
        internship = await access.get_internship(self.session, application.internship_id)
        if internship.posted_by != employer.id:
            raise PermissionDeniedError(
                "Only the employer who posted the internship can submit feedback"
            )
        access.check_version(application, data.expected_version)
        access.require_status(application, FEEDBACK_ALLOWED_FROM, "submit feedback for")
        if await self._exists(application.id):
            raise DuplicateFeedbackError(application.id)

        feedback = Feedback(
            application_id=application.id,
            supervisor_id=employer.id,
            rating=data.rating,
            comments=data.comments,
            technical_skills_rating=data.technical_skills_rating,
            communication_rating=data.communication_rating,
            professionalism_rating=data.professionalism_rating,
            recommendation_for_placement=data.recommendation_for_placement,
            skills_gained=data.skills_gained,
        )
        self.session.add(feedback)
        try:
            await self.session.flush()
        except IntegrityError:
            await self.session.rollback()
            raise DuplicateFeedbackError(application.id)

        await self.tracking.record_feedback(application.id, employer.id)

        if application.status == ApplicationStatus.OFFERED.value:
            start = application.offer_accepted_at or application.offer_made_at or application.applied_at
            completion = CompletionData(
                performance_rating=data.rating,
                start_date=start.date(),
                end_date=max(utc_now().date(), start.date()),
                skills_demonstrated=data.skills_gained
                or list(internship.required_skills or []),
                supervisor_id=employer.id,
                supervisor_comments=data.comments,
            )
            await self.applications.finalize_completion(
                application, internship, employer.id, completion
            )

        self.notifications.notify(
            application.student_id,
            NotificationType.FEEDBACK,
            "Feedback received",
            f"Your supervisor rated your internship at {internship.company_name} "
            f"{data.rating}/5",
            {"application_id": application.id},
        )
        await access.commit(self.session)
        logger.info(f"Feedback {feedback.id} recorded for application {application.id}")
        return feedback

    async def list_for_user(
        self, user: CurrentUser, application_id: int | None = None
    ) -> list[Feedback]:
        query = select(Feedback)
        if application_id is not None:
            application = await access.get_application(self.session, application_id)
            await access.ensure_can_view(self.session, user, application)
            query = query.where(Feedback.application_id == application_id)
        elif user.role == Role.STUDENT:
            query = query.join(Application, Application.id == Feedback.application_id).where(
                Application.student_id == user.id
            )
        elif user.role == Role.EMPLOYER:
            query = query.where(Feedback.supervisor_id == user.id)

        result = await self.session.execute(query.order_by(Feedback.created_at.desc()))
        return list(result.scalars().all())
