"""Application lifecycle: submission, mentor gate, employer decisions, completion."""

import logging
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from placement_portal.core.auth import CurrentUser
from placement_portal.core.exceptions import (
    DuplicateApplicationError,
    NotFoundError,
    PermissionDeniedError,
    ValidationFailedError,
)
from placement_portal.core.storage import utc_now
from placement_portal.models.application import Application
from placement_portal.models.certificate import Certificate
from placement_portal.models.enums import (
    TERMINAL_STATUSES,
    ApplicationStatus,
    NotificationType,
    PlacementStatus,
    Role,
    TrackingStepStatus,
)
from placement_portal.models.feedback import Feedback
from placement_portal.models.internship import Internship
from placement_portal.models.interview import InterviewSchedule
from placement_portal.models.offer import PlacementOffer
from placement_portal.models.user import User
from placement_portal.schemas.application import (
    ApplicationCreate,
    ApplicationDetail,
    ApplicationResponse,
    CompleteApplicationRequest,
    MentorDecisionRequest,
    ResumeViewStatus,
    TrackingProgress,
    TrackingStepUpdate,
    VersionedRequest,
)
from placement_portal.schemas.feedback import FeedbackResponse
from placement_portal.schemas.interview import InterviewResponse
from placement_portal.schemas.offer import OfferResponse
from placement_portal.services import access
from placement_portal.services.certificate_service import (
    CertificateService,
    CompletionData,
)
from placement_portal.services.mentor_workflow_service import MentorWorkflowService
from placement_portal.services.notification_service import NotificationService
from placement_portal.services.tracking_service import (
    STEP_EMPLOYER_REVIEW,
    STEP_FINAL_DECISION,
    STEP_MENTOR_REVIEW,
    STEP_OFFER_PROCESSING,
    TrackingService,
)

logger = logging.getLogger(__name__)

MENTOR_DECIDABLE = (ApplicationStatus.APPLIED, ApplicationStatus.MENTOR_REVIEW)
NOT_OFFERABLE_FROM = (
    ApplicationStatus.EMPLOYER_REVIEW,
    ApplicationStatus.INTERVIEW_SCHEDULED,
    ApplicationStatus.INTERVIEWED,
)
COMPLETABLE = (ApplicationStatus.OFFERED, ApplicationStatus.OFFER_ACCEPTED)


class ApplicationService:
    """State machine over the application aggregate.

    Every public mutation validates role, existence, ownership, version and
    current status in that order, then writes the application row, its tracking
    steps and notifications in a single commit.
    """

    def __init__(
        self,
        session: AsyncSession,
        certificates: CertificateService,
        tracking: TrackingService | None = None,
        notifications: NotificationService | None = None,
        mentor_workflow: MentorWorkflowService | None = None,
    ):
        self.session = session
        self.certificates = certificates
        self.tracking = tracking or TrackingService(session)
        self.notifications = notifications or NotificationService(session)
        self.mentor_workflow = mentor_workflow or MentorWorkflowService(
            session, self.notifications
        )

    async def submit(self, student: CurrentUser, data: ApplicationCreate) -> Application:
        """Create an application in APPLIED, route it to a mentor and seed its tracking steps."""
        profile = await access.get_user(self.session, student.id)
        internship = await self.session.get(Internship, data.internship_id)
        if internship is None or not internship.is_active:
            raise NotFoundError("Internship", data.internship_id)

        if internship.application_deadline and internship.application_deadline < utc_now():
            raise ValidationFailedError("Application deadline has passed")

        eligible = internship.eligible_departments or []
        if eligible and profile.department not in eligible:
            raise ValidationFailedError(
                f"Department {profile.department} is not eligible for this internship"
            )

        if await self._has_open_application(student.id, internship.id):
            raise DuplicateApplicationError(student.id, internship.id)

        mentor = await self.mentor_workflow.pick_mentor(profile.department)
        application = Application(
            student_id=student.id,
            internship_id=internship.id,
            mentor_id=mentor.id if mentor else None,
            status=ApplicationStatus.APPLIED.value,
            cover_letter=data.cover_letter,
            applied_at=utc_now(),
        )
        self.session.add(application)
        try:
            await self.session.flush()
        except IntegrityError:
            await self.session.rollback()
            raise DuplicateApplicationError(student.id, internship.id)

        self.tracking.seed_steps(application.id, actor_id=student.id)
        self.notifications.notify(
            internship.posted_by,
            NotificationType.APPLICATION,
            "New application",
            f"{profile.name} applied to {internship.title}",
            {"application_id": application.id},
        )
        if mentor is not None:
            self.mentor_workflow.announce_assignment(mentor, application, profile, internship)
        else:
            logger.warning(f"No mentor available in department {profile.department}")
        await access.commit(self.session)
        logger.info(
            f"Student {student.id} applied to internship {internship.id} "
            f"(application {application.id})"
        )
        return application

    async def _has_open_application(self, student_id: int, internship_id: int) -> bool:
        result = await self.session.execute(
            select(Application.id).where(
                Application.student_id == student_id,
                Application.internship_id == internship_id,
                Application.status.not_in([s.value for s in TERMINAL_STATUSES]),
            )
        )
        return result.first() is not None

    async def list_for_user(
        self, user: CurrentUser, status: ApplicationStatus | None = None
    ) -> Sequence[Application]:
        query = select(Application)
        if user.role == Role.STUDENT:
            query = query.where(Application.student_id == user.id)
        elif user.role == Role.EMPLOYER:
            query = query.join(
                Internship, Internship.id == Application.internship_id
            ).where(Internship.posted_by == user.id)
        elif user.role == Role.MENTOR:
            mentor = await access.get_user(self.session, user.id)
            query = query.join(User, User.id == Application.student_id).where(
                User.department == mentor.department
            )
        if status is not None:
            query = query.where(Application.status == status.value)
        result = await self.session.execute(
            query.order_by(Application.applied_at.desc(), Application.id.desc())
        )
        return result.scalars().all()

    async def get_for_user(self, user: CurrentUser, application_id: int) -> Application:
        application = await access.get_application(self.session, application_id)
        await access.ensure_can_view(self.session, user, application)
        return application

    async def get_detail(self, user: CurrentUser, application_id: int) -> ApplicationDetail:
        application = await self.get_for_user(user, application_id)

        interviews = await self.session.execute(
            select(InterviewSchedule)
            .where(InterviewSchedule.application_id == application_id)
            .order_by(InterviewSchedule.scheduled_datetime)
        )
        offers = await self.session.execute(
            select(PlacementOffer)
            .where(PlacementOffer.application_id == application_id)
            .order_by(PlacementOffer.offer_date)
        )
        feedback = await self.session.execute(
            select(Feedback).where(Feedback.application_id == application_id)
        )
        feedback_row = feedback.scalars().first()

        return ApplicationDetail(
            application=ApplicationResponse.model_validate(application),
            tracking=await self.tracking.get_progress(application_id),
            interviews=[
                InterviewResponse.model_validate(i) for i in interviews.scalars().all()
            ],
            offers=[OfferResponse.model_validate(o) for o in offers.scalars().all()],
            feedback=FeedbackResponse.model_validate(feedback_row) if feedback_row else None,
        )

    async def get_progress(self, user: CurrentUser, application_id: int) -> TrackingProgress:
        await self.get_for_user(user, application_id)
        return await self.tracking.get_progress(application_id)

    async def _load_for_mentor(
        self, mentor_user: CurrentUser, application_id: int
    ) -> tuple[Application, User]:
        application = await access.get_application(self.session, application_id)
        mentor = await access.get_user(self.session, mentor_user.id)
        student = await access.get_user(self.session, application.student_id)
        access.ensure_same_department(mentor, student)
        return application, student

    @access.lost_update_as_conflict
    async def start_mentor_review(
        self, mentor: CurrentUser, application_id: int, data: VersionedRequest
    ) -> Application:
        """APPLIED -> MENTOR_REVIEW."""
        application, student = await self._load_for_mentor(mentor, application_id)
        access.check_version(application, data.expected_version)
        access.require_status(application, [ApplicationStatus.APPLIED], "start review of")

        access.move_to(application, ApplicationStatus.MENTOR_REVIEW, mentor.id)
        application.mentor_id = mentor.id
        await self.tracking.update_step(
            application.id,
            STEP_MENTOR_REVIEW,
            TrackingStepStatus.IN_PROGRESS,
            notes=data.notes,
            actor_id=mentor.id,
        )
        self.notifications.notify(
            student.id,
            NotificationType.APPLICATION,
            "Mentor review started",
            f"A mentor is reviewing application {application.id}",
            {"application_id": application.id},
        )
        await access.commit(self.session)
        return application

    @access.lost_update_as_conflict
    async def mentor_decision(
        self, mentor: CurrentUser, application_id: int, data: MentorDecisionRequest
    ) -> Application:
        """APPLIED | MENTOR_REVIEW -> MENTOR_APPROVED | MENTOR_REJECTED."""
        application, student = await self._load_for_mentor(mentor, application_id)
        access.check_version(application, data.expected_version)
        access.require_status(application, MENTOR_DECIDABLE, "decide on")

        approved = data.decision == "APPROVED"
        target = (
            ApplicationStatus.MENTOR_APPROVED if approved else ApplicationStatus.MENTOR_REJECTED
        )
        access.move_to(application, target, mentor.id)
        application.mentor_id = mentor.id
        application.mentor_approved_at = utc_now()

        await self.tracking.update_step(
            application.id,
            STEP_MENTOR_REVIEW,
            TrackingStepStatus.COMPLETED,
            notes=data.comments or data.notes or ("Approved" if approved else "Rejected"),
            actor_id=mentor.id,
        )
        self.notifications.notify(
            student.id,
            NotificationType.APPROVAL,
            "Mentor approved your application" if approved else "Mentor rejected your application",
            data.comments or f"Application {application.id} was {data.decision.lower()}",
            {"application_id": application.id, "decision": data.decision},
        )
        await access.commit(self.session)
        return application

    async def _load_for_employer(
        self, actor: CurrentUser, application_id: int
    ) -> tuple[Application, Internship]:
        application = await access.get_application(self.session, application_id)
        internship = await access.get_internship(self.session, application.internship_id)
        access.ensure_internship_owner(actor, internship)
        return application, internship

    @access.lost_update_as_conflict
    async def start_employer_review(
        self, actor: CurrentUser, application_id: int, data: VersionedRequest
    ) -> Application:
        """MENTOR_APPROVED -> EMPLOYER_REVIEW."""
        application, internship = await self._load_for_employer(actor, application_id)
        access.check_version(application, data.expected_version)
        access.require_status(
            application, [ApplicationStatus.MENTOR_APPROVED], "start employer review of"
        )

        access.move_to(application, ApplicationStatus.EMPLOYER_REVIEW, actor.id)
        await self.tracking.update_step(
            application.id,
            STEP_EMPLOYER_REVIEW,
            TrackingStepStatus.IN_PROGRESS,
            notes=data.notes,
            actor_id=actor.id,
        )
        self.notifications.notify(
            application.student_id,
            NotificationType.APPLICATION,
            "Employer review started",
            f"{internship.company_name} is reviewing your application to {internship.title}",
            {"application_id": application.id},
        )
        await access.commit(self.session)
        return application

    @access.lost_update_as_conflict
    async def mark_not_offered(
        self, actor: CurrentUser, application_id: int, data: VersionedRequest
    ) -> Application:
        """EMPLOYER_REVIEW | INTERVIEW_SCHEDULED | INTERVIEWED -> NOT_OFFERED."""
        application, internship = await self._load_for_employer(actor, application_id)
        access.check_version(application, data.expected_version)
        access.require_status(application, NOT_OFFERABLE_FROM, "decline")

        access.move_to(application, ApplicationStatus.NOT_OFFERED, actor.id)
        await self.tracking.update_step(
            application.id,
            STEP_FINAL_DECISION,
            TrackingStepStatus.COMPLETED,
            notes=data.notes or "Not offered",
            actor_id=actor.id,
        )
        self.notifications.notify(
            application.student_id,
            NotificationType.APPLICATION,
            "Application closed",
            f"Your application to {internship.title} did not result in an offer",
            {"application_id": application.id},
        )
        await access.commit(self.session)
        return application

    @access.lost_update_as_conflict
    async def withdraw(
        self, student: CurrentUser, application_id: int, data: VersionedRequest
    ) -> Application:
        application = await access.get_application(self.session, application_id)
        if application.student_id != student.id:
            raise PermissionDeniedError("Only the applicant can withdraw an application")
        access.check_version(application, data.expected_version)
        if application.is_terminal:
            raise ValidationFailedError(
                f"Application {application.id} is already closed ({application.status})"
            )

        access.move_to(application, ApplicationStatus.WITHDRAWN, student.id)
        await self.tracking.skip_open_steps(
            application.id, "Application withdrawn by student", actor_id=student.id
        )
        internship = await access.get_internship(self.session, application.internship_id)
        recipients = [internship.posted_by]
        if application.mentor_id is not None:
            recipients.append(application.mentor_id)
        for user_id in dict.fromkeys(recipients):
            self.notifications.notify(
                user_id,
                NotificationType.APPLICATION,
                "Application withdrawn",
                f"Application {application.id} to {internship.title} was withdrawn",
                {"application_id": application.id},
            )
        await access.commit(self.session)
        return application

    async def mark_resume_viewed(
        self, employer: CurrentUser, application_id: int
    ) -> ResumeViewStatus:
        application, _ = await self._load_for_employer(employer, application_id)
        await self.tracking.mark_resume_viewed(application.id, employer.id)
        await access.commit(self.session)
        return await self.tracking.resume_view_status(application.id)

    async def resume_view_status(
        self, user: CurrentUser, application_id: int
    ) -> ResumeViewStatus:
        await self.get_for_user(user, application_id)
        return await self.tracking.resume_view_status(application_id)

    async def update_tracking_step(
        self,
        user: CurrentUser,
        application_id: int,
        step_id: int,
        data: TrackingStepUpdate,
    ) -> TrackingProgress:
        """Manually move one tracking step; the application status is untouched."""
        application = await access.get_application(self.session, application_id)
        await access.ensure_can_view(self.session, user, application)
        await self.tracking.update_step_by_id(
            application_id, step_id, data.status, notes=data.notes, actor_id=user.id
        )
        await self.session.commit()
        return await self.tracking.get_progress(application_id)

    @access.lost_update_as_conflict
    async def complete(
        self, actor: CurrentUser, application_id: int, data: CompleteApplicationRequest
    ) -> tuple[Application, Certificate]:
        """OFFERED | OFFER_ACCEPTED -> COMPLETED, issuing a certificate."""
        application, internship = await self._load_for_employer(actor, application_id)
        access.check_version(application, data.expected_version)
        access.require_status(application, COMPLETABLE, "complete")

        completion = CompletionData(
            performance_rating=data.performance_rating,
            start_date=data.start_date,
            end_date=data.end_date,
            skills_demonstrated=data.skills_demonstrated
            or list(internship.required_skills or []),
            supervisor_id=actor.id,
            supervisor_comments=data.supervisor_comments,
        )
        certificate = await self.finalize_completion(application, internship, actor.id, completion)

        if data.supervisor_comments:
            existing = await self.session.execute(
                select(Feedback.id).where(Feedback.application_id == application.id)
            )
            if existing.first() is None:
                self.session.add(
                    Feedback(
                        application_id=application.id,
                        supervisor_id=actor.id,
                        rating=data.performance_rating,
                        comments=data.supervisor_comments,
                        skills_gained=completion.skills_demonstrated,
                    )
                )
                await self.tracking.record_feedback(application.id, actor.id)

        await access.commit(self.session)
        return application, certificate

    async def finalize_completion(
        self,
        application: Application,
        internship: Internship,
        actor_id: int,
        completion: CompletionData,
    ) -> Certificate:
        """Move to COMPLETED and call both completion collaborators. Does not commit."""
        student = await access.get_user(self.session, application.student_id)
        access.move_to(application, ApplicationStatus.COMPLETED, actor_id)
        application.completion_date = utc_now()

        certificate = await self.certificates.issue_certificate(
            application, student, internship, completion
        )
        await self.certificates.update_employability_record(
            student.id, completion, certificate.certificate_id
        )

        if student.placement_status == PlacementStatus.INTERNING.value:
            student.placement_status = PlacementStatus.AVAILABLE.value

        await self.tracking.update_step(
            application.id,
            STEP_OFFER_PROCESSING,
            TrackingStepStatus.COMPLETED,
            notes=f"Internship completed; certificate {certificate.certificate_id} issued",
            actor_id=actor_id,
        )
        self.notifications.notify(
            student.id,
            NotificationType.GENERAL,
            "Internship completed",
            f"Your certificate for {internship.title} is ready",
            {"application_id": application.id, "certificate_id": certificate.certificate_id},
        )
        return certificate
