"""Integration tests for the application state machine against a real store."""

import pytest
from sqlalchemy import select

from helpers import as_current
from placement_portal.core.exceptions import (
    DuplicateApplicationError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    StaleVersionError,
    ValidationFailedError,
)
from placement_portal.models.application import Application
from placement_portal.models.enums import ApplicationStatus, TrackingStepStatus
from placement_portal.models.notification import Notification
from placement_portal.schemas.application import (
    ApplicationCreate,
    MentorDecisionRequest,
    VersionedRequest,
)
from placement_portal.services.application_service import ApplicationService
from placement_portal.services.certificate_service import DatabaseCertificateService
from placement_portal.services.tracking_service import (
    DEFAULT_TRACKING_STEPS,
    STEP_MENTOR_REVIEW,
    STEP_SUBMITTED,
)


def service_for(session) -> ApplicationService:
    return ApplicationService(session, DatabaseCertificateService(session))


class TestSubmit:
    """Test application submission."""

    @pytest.mark.asyncio
    async def test_submit_seeds_tracking_steps(self, session, student, internship, employer):
        """Test a new application starts APPLIED with ten seeded steps."""
        service = service_for(session)

        application = await service.submit(
            as_current(student), ApplicationCreate(internship_id=internship.id)
        )

        assert application.status == ApplicationStatus.APPLIED.value
        assert application.version == 1
        progress = await service.tracking.get_progress(application.id)
        assert [s.step for s in progress.steps] == list(DEFAULT_TRACKING_STEPS)
        assert progress.steps[0].step == STEP_SUBMITTED
        assert progress.steps[0].status == TrackingStepStatus.COMPLETED
        assert all(s.status == TrackingStepStatus.PENDING for s in progress.steps[1:])
        assert progress.completed_steps == 1
        assert progress.progress_percentage == 10

        notifications = await session.execute(
            select(Notification).where(Notification.user_id == employer.id)
        )
        assert len(notifications.scalars().all()) == 1

    @pytest.mark.asyncio
    async def test_duplicate_open_application_rejected(self, session, student, internship):
        """Test a second open application for the same posting conflicts."""
        service = service_for(session)
        await service.submit(as_current(student), ApplicationCreate(internship_id=internship.id))

        with pytest.raises(DuplicateApplicationError) as exc_info:
            await service.submit(
                as_current(student), ApplicationCreate(internship_id=internship.id)
            )
        assert exc_info.value.status_code == 409

    @pytest.mark.asyncio
    async def test_reapply_after_withdrawal(self, session, student, internship):
        """Test a closed application does not block a new one."""
        service = service_for(session)
        first = await service.submit(
            as_current(student), ApplicationCreate(internship_id=internship.id)
        )
        await service.withdraw(as_current(student), first.id, VersionedRequest(expected_version=1))

        second = await service.submit(
            as_current(student), ApplicationCreate(internship_id=internship.id)
        )

        assert second.id != first.id
        assert first.status == ApplicationStatus.WITHDRAWN.value

    @pytest.mark.asyncio
    async def test_ineligible_department(self, session, other_student, internship):
        """Test students outside the eligible departments are refused."""
        with pytest.raises(ValidationFailedError, match="not eligible"):
            await service_for(session).submit(
                as_current(other_student), ApplicationCreate(internship_id=internship.id)
            )

    @pytest.mark.asyncio
    async def test_inactive_internship_not_found(self, session, student, internship):
        """Test deactivated postings cannot be applied to."""
        internship.is_active = False
        await session.commit()

        with pytest.raises(NotFoundError):
            await service_for(session).submit(
                as_current(student), ApplicationCreate(internship_id=internship.id)
            )


class TestMentorGate:
    """Test the mentor review and decision transitions."""

    @pytest.mark.asyncio
    async def test_mentor_approves(self, session, student, mentor, internship):
        """Test approval moves the application and completes the review step."""
        service = service_for(session)
        application = await service.submit(
            as_current(student), ApplicationCreate(internship_id=internship.id)
        )

        approved = await service.mentor_decision(
            as_current(mentor),
            application.id,
            MentorDecisionRequest(expected_version=1, decision="APPROVED", comments="Good fit"),
        )

        assert approved.status == ApplicationStatus.MENTOR_APPROVED.value
        assert approved.mentor_id == mentor.id
        assert approved.mentor_approved_at is not None
        assert approved.version == 2
        step = await service.tracking.find_step(application.id, STEP_MENTOR_REVIEW)
        assert step.status == TrackingStepStatus.COMPLETED.value
        assert step.actor_id == mentor.id
        assert step.notes == "Good fit"

    @pytest.mark.asyncio
    async def test_review_then_reject(self, session, student, mentor, internship):
        """Test APPLIED -> MENTOR_REVIEW -> MENTOR_REJECTED."""
        service = service_for(session)
        application = await service.submit(
            as_current(student), ApplicationCreate(internship_id=internship.id)
        )
        await service.start_mentor_review(
            as_current(mentor), application.id, VersionedRequest(expected_version=1)
        )
        assert application.status == ApplicationStatus.MENTOR_REVIEW.value

        rejected = await service.mentor_decision(
            as_current(mentor),
            application.id,
            MentorDecisionRequest(expected_version=2, decision="REJECTED"),
        )

        assert rejected.status == ApplicationStatus.MENTOR_REJECTED.value
        assert rejected.is_terminal

    @pytest.mark.asyncio
    async def test_mentor_of_other_department_denied(
        self, session, student, other_mentor, internship
    ):
        """Test mentors only act on their own department's students."""
        service = service_for(session)
        application = await service.submit(
            as_current(student), ApplicationCreate(internship_id=internship.id)
        )

        with pytest.raises(PermissionDeniedError):
            await service.mentor_decision(
                as_current(other_mentor),
                application.id,
                MentorDecisionRequest(expected_version=1, decision="APPROVED"),
            )

    @pytest.mark.asyncio
    async def test_stale_expected_version(self, session, student, mentor, internship):
        """Test a decision based on an outdated read is refused."""
        service = service_for(session)
        application = await service.submit(
            as_current(student), ApplicationCreate(internship_id=internship.id)
        )
        await service.start_mentor_review(
            as_current(mentor), application.id, VersionedRequest(expected_version=1)
        )

        with pytest.raises(StaleVersionError) as exc_info:
            await service.mentor_decision(
                as_current(mentor),
                application.id,
                MentorDecisionRequest(expected_version=1, decision="APPROVED"),
            )
        assert exc_info.value.status_code == 409
        assert application.status == ApplicationStatus.MENTOR_REVIEW.value


class TestTransitions:
    """Test guarded transitions and concurrency."""

    @pytest.mark.asyncio
    async def test_invalid_transition(self, session, student, employer, internship):
        """Test employer review cannot start before mentor approval."""
        service = service_for(session)
        application = await service.submit(
            as_current(student), ApplicationCreate(internship_id=internship.id)
        )

        with pytest.raises(InvalidTransitionError) as exc_info:
            await service.start_employer_review(
                as_current(employer), application.id, VersionedRequest(expected_version=1)
            )
        assert exc_info.value.status_code == 400
        assert "APPLIED" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_non_owner_employer_denied(
        self, session, student, mentor, other_employer, internship
    ):
        """Test employers cannot act on other companies' postings."""
        service = service_for(session)
        application = await service.submit(
            as_current(student), ApplicationCreate(internship_id=internship.id)
        )

        with pytest.raises(PermissionDeniedError):
            await service.start_employer_review(
                as_current(other_employer),
                application.id,
                VersionedRequest(expected_version=1),
            )

    @pytest.mark.asyncio
    async def test_concurrent_writers_lose_update(
        self, database, session, student, mentor, employer, internship
    ):
        """Test that the second of two writers on the same version is refused."""
        service = service_for(session)
        application = await service.submit(
            as_current(student), ApplicationCreate(internship_id=internship.id)
        )

        async with database.session() as first, database.session() as second:
            stale = await second.get(Application, application.id)
            assert stale.version == 1

            await service_for(first).start_mentor_review(
                as_current(mentor), application.id, VersionedRequest(expected_version=1)
            )

            with pytest.raises(StaleVersionError):
                await service_for(second).withdraw(
                    as_current(student), application.id, VersionedRequest(expected_version=1)
                )

    @pytest.mark.asyncio
    async def test_lost_update_detected_on_autoflush(
        self, database, session, student, mentor, internship
    ):
        """Test a stale decision is refused when a later query flushes it."""
        service = service_for(session)
        application = await service.submit(
            as_current(student), ApplicationCreate(internship_id=internship.id)
        )

        async with database.session() as first, database.session() as second:
            stale = await second.get(Application, application.id)
            assert stale.version == 1

            await service_for(first).withdraw(
                as_current(student), application.id, VersionedRequest(expected_version=1)
            )

            # The tracking update queries after the status change, so the
            # versioned UPDATE is flushed before the commit.
            with pytest.raises(StaleVersionError):
                await service_for(second).mentor_decision(
                    as_current(mentor),
                    application.id,
                    MentorDecisionRequest(expected_version=1, decision="APPROVED"),
                )

        async with database.session() as fresh:
            stored = await fresh.get(Application, application.id)
            assert stored.status == ApplicationStatus.WITHDRAWN.value
            assert stored.version == 2

    @pytest.mark.asyncio
    async def test_withdraw_requires_owner(self, session, student, other_student, internship):
        """Test only the applicant may withdraw."""
        service = service_for(session)
        application = await service.submit(
            as_current(student), ApplicationCreate(internship_id=internship.id)
        )

        with pytest.raises(PermissionDeniedError):
            await service.withdraw(
                as_current(other_student), application.id, VersionedRequest(expected_version=1)
            )

    @pytest.mark.asyncio
    async def test_withdraw_closed_application(self, session, student, internship):
        """Test a terminal application cannot be withdrawn again."""
        service = service_for(session)
        application = await service.submit(
            as_current(student), ApplicationCreate(internship_id=internship.id)
        )
        await service.withdraw(as_current(student), application.id, VersionedRequest(expected_version=1))

        with pytest.raises(ValidationFailedError, match="already closed"):
            await service.withdraw(
                as_current(student), application.id, VersionedRequest(expected_version=2)
            )

    @pytest.mark.asyncio
    async def test_resume_view_recorded(self, session, student, employer, internship):
        """Test marking the resume as viewed completes the resume review step."""
        service = service_for(session)
        application = await service.submit(
            as_current(student), ApplicationCreate(internship_id=internship.id)
        )

        status = await service.mark_resume_viewed(as_current(employer), application.id)

        assert status.viewed
        assert status.viewed_by == employer.id


async def notifications_for(session, user_id: int) -> list[Notification]:
    result = await session.execute(
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.id)
    )
    return list(result.scalars().all())


class TestTransitionSideEffects:
    """Test notifications and tracking updates made by transitions."""

    @pytest.mark.asyncio
    async def test_review_starts_notify_student(
        self, session, student, mentor, employer, internship
    ):
        """Test the student hears when the mentor and the employer start reviewing."""
        service = service_for(session)
        application = await service.submit(
            as_current(student), ApplicationCreate(internship_id=internship.id)
        )
        await service.start_mentor_review(
            as_current(mentor), application.id, VersionedRequest(expected_version=1)
        )
        await service.mentor_decision(
            as_current(mentor),
            application.id,
            MentorDecisionRequest(expected_version=2, decision="APPROVED"),
        )
        await service.start_employer_review(
            as_current(employer), application.id, VersionedRequest(expected_version=3)
        )

        titles = [n.title for n in await notifications_for(session, student.id)]
        assert titles == [
            "Mentor review started",
            "Mentor approved your application",
            "Employer review started",
        ]

    @pytest.mark.asyncio
    async def test_withdraw_notifies_and_skips_open_steps(
        self, session, student, mentor, employer, internship
    ):
        """Test withdrawal tells the employer and mentor and closes the ledger."""
        service = service_for(session)
        application = await service.submit(
            as_current(student), ApplicationCreate(internship_id=internship.id)
        )
        await service.start_mentor_review(
            as_current(mentor), application.id, VersionedRequest(expected_version=1)
        )

        await service.withdraw(
            as_current(student), application.id, VersionedRequest(expected_version=2)
        )

        assert (await notifications_for(session, employer.id))[-1].title == "Application withdrawn"
        assert (await notifications_for(session, mentor.id))[-1].title == "Application withdrawn"
        progress = await service.get_progress(as_current(student), application.id)
        assert progress.current_step is None
        statuses = {s.step: s.status for s in progress.steps}
        assert statuses[STEP_SUBMITTED] == TrackingStepStatus.COMPLETED
        assert statuses[STEP_MENTOR_REVIEW] == TrackingStepStatus.SKIPPED
        assert all(
            status in (TrackingStepStatus.COMPLETED, TrackingStepStatus.SKIPPED)
            for status in statuses.values()
        )
