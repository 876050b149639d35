"""Integration tests for offers, feedback and internship completion."""

from datetime import date, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import select

from helpers import as_current
from placement_portal.core.exceptions import (
    DuplicateFeedbackError,
    InvalidTransitionError,
    OfferConflictError,
    PermissionDeniedError,
    ValidationFailedError,
)
from placement_portal.core.storage import utc_now
from placement_portal.models.certificate import Certificate, EmployabilityRecord
from placement_portal.models.enums import (
    ApplicationStatus,
    OfferStatus,
    OfferType,
    PlacementStatus,
)
from placement_portal.models.feedback import Feedback
from placement_portal.schemas.application import CompleteApplicationRequest
from placement_portal.schemas.feedback import FeedbackCreate
from placement_portal.schemas.offer import OfferCreate, OfferRespond
from placement_portal.services.application_service import ApplicationService
from placement_portal.services.certificate_service import CertificateService
from placement_portal.services.feedback_service import FeedbackService
from placement_portal.services.offer_service import OfferService


async def extend_offer(session, employer, application, **overrides):
    data = {
        "application_id": application.id,
        "position_title": "Backend Intern",
        "offer_type": OfferType.INTERNSHIP,
        "offer_details": {"stipend": 25000},
    }
    data.update(overrides)
    return await OfferService(session).create(as_current(employer), OfferCreate(**data))


class TestOfferLifecycle:
    """Test extending and answering offers."""

    @pytest.mark.asyncio
    async def test_create_offer(self, session, approved_application, employer, student):
        """Test a new offer is EXTENDED and listed once for the student."""
        offer = await extend_offer(session, employer, approved_application)

        assert offer.offer_status == OfferStatus.EXTENDED.value
        assert offer.company_id == employer.id
        assert offer.response_deadline > utc_now() + timedelta(days=6)
        assert approved_application.status == ApplicationStatus.OFFERED.value
        assert approved_application.offer_made_at is not None

        offers = await OfferService(session).list_for_user(as_current(student))
        assert [o.id for o in offers] == [offer.id]

    @pytest.mark.asyncio
    async def test_second_open_offer_conflicts(self, session, approved_application, employer):
        """Test an application holds at most one open offer."""
        await extend_offer(session, employer, approved_application)

        with pytest.raises(OfferConflictError):
            await extend_offer(session, employer, approved_application)

    @pytest.mark.asyncio
    async def test_accept_sets_placement_status(
        self, session, approved_application, employer, student
    ):
        """Test acceptance marks the student as interning."""
        offer = await extend_offer(session, employer, approved_application)

        accepted = await OfferService(session).respond(
            as_current(student), offer.id, OfferRespond(response="ACCEPTED")
        )

        assert accepted.offer_status == OfferStatus.ACCEPTED.value
        assert accepted.acceptance_date is not None
        assert approved_application.status == ApplicationStatus.OFFER_ACCEPTED.value
        await session.refresh(student)
        assert student.placement_status == PlacementStatus.INTERNING.value

    @pytest.mark.asyncio
    async def test_reject_records_reason(self, session, approved_application, employer, student):
        """Test rejection closes the application."""
        offer = await extend_offer(session, employer, approved_application)

        rejected = await OfferService(session).respond(
            as_current(student),
            offer.id,
            OfferRespond(response="REJECTED", rejection_reason="Accepted elsewhere"),
        )

        assert rejected.offer_status == OfferStatus.REJECTED.value
        assert rejected.rejection_reason == "Accepted elsewhere"
        assert approved_application.status == ApplicationStatus.OFFER_REJECTED.value

    @pytest.mark.asyncio
    async def test_only_recipient_may_respond(
        self, session, approved_application, employer, other_student
    ):
        """Test another student cannot answer the offer."""
        offer = await extend_offer(session, employer, approved_application)

        with pytest.raises(PermissionDeniedError):
            await OfferService(session).respond(
                as_current(other_student), offer.id, OfferRespond(response="ACCEPTED")
            )

    @pytest.mark.asyncio
    async def test_late_response_expires_offer(
        self, session, approved_application, employer, student
    ):
        """Test answering after the deadline expires the offer instead."""
        offer = await extend_offer(session, employer, approved_application)
        offer.response_deadline = utc_now() - timedelta(hours=1)
        await session.commit()

        with pytest.raises(ValidationFailedError, match="deadline"):
            await OfferService(session).respond(
                as_current(student), offer.id, OfferRespond(response="ACCEPTED")
            )

        await session.refresh(offer)
        assert offer.offer_status == OfferStatus.EXPIRED.value
        assert approved_application.status == ApplicationStatus.OFFER_REJECTED.value

    @pytest.mark.asyncio
    async def test_expire_overdue_sweep(self, session, approved_application, employer):
        """Test the periodic sweep expires offers past their deadline."""
        offer = await extend_offer(session, employer, approved_application)
        service = OfferService(session)

        assert await service.expire_overdue(now=utc_now()) == 0
        assert await service.expire_overdue(now=utc_now() + timedelta(days=30)) == 1

        assert offer.offer_status == OfferStatus.EXPIRED.value
        assert approved_application.status == ApplicationStatus.OFFER_REJECTED.value

    @pytest.mark.asyncio
    async def test_withdraw_offer(self, session, approved_application, employer):
        """Test withdrawing an offer ends the application without an offer."""
        offer = await extend_offer(session, employer, approved_application)

        withdrawn = await OfferService(session).withdraw(as_current(employer), offer.id)

        assert withdrawn.offer_status == OfferStatus.WITHDRAWN.value
        assert approved_application.status == ApplicationStatus.NOT_OFFERED.value

    @pytest.mark.asyncio
    async def test_analytics(self, session, approved_application, employer, student):
        """Test offer counts and acceptance rate for the company."""
        offer = await extend_offer(session, employer, approved_application)
        await OfferService(session).respond(
            as_current(student), offer.id, OfferRespond(response="ACCEPTED")
        )

        analytics = await OfferService(session).analytics(as_current(employer))

        assert analytics.total_offers == 1
        assert analytics.by_status["ACCEPTED"] == 1
        assert analytics.acceptance_rate == 100.0


class TestCompletion:
    """Test completion and its certificate collaborators."""

    @pytest.mark.asyncio
    async def test_complete_calls_both_collaborators(
        self, session, approved_application, employer, student
    ):
        """Test completion issues a certificate and updates the record."""
        offer = await extend_offer(session, employer, approved_application)
        await OfferService(session).respond(
            as_current(student), offer.id, OfferRespond(response="ACCEPTED")
        )
        certificates = AsyncMock(spec=CertificateService)
        certificates.issue_certificate.return_value = MagicMock(certificate_id="CERT-TEST")
        service = ApplicationService(session, certificates)

        application, certificate = await service.complete(
            as_current(employer),
            approved_application.id,
            CompleteApplicationRequest(
                expected_version=approved_application.version,
                performance_rating=5,
                start_date=date(2026, 1, 5),
                end_date=date(2026, 3, 30),
                supervisor_comments="Excellent work",
            ),
        )

        assert application.status == ApplicationStatus.COMPLETED.value
        assert application.completion_date is not None
        assert certificate.certificate_id == "CERT-TEST"
        certificates.issue_certificate.assert_awaited_once()
        certificates.update_employability_record.assert_awaited_once()
        _, completion, certificate_id = certificates.update_employability_record.await_args.args
        assert completion.duration_weeks == 12
        assert completion.skills_demonstrated == ["Python", "FastAPI", "SQL"]
        assert certificate_id == "CERT-TEST"

        await session.refresh(student)
        assert student.placement_status == PlacementStatus.AVAILABLE.value
        feedback = await session.execute(
            select(Feedback).where(Feedback.application_id == application.id)
        )
        assert feedback.scalars().one().comments == "Excellent work"

    @pytest.mark.asyncio
    async def test_complete_requires_offer(self, session, approved_application, employer):
        """Test completion is refused before an offer exists."""
        certificates = AsyncMock(spec=CertificateService)
        service = ApplicationService(session, certificates)

        with pytest.raises(InvalidTransitionError):
            await service.complete(
                as_current(employer),
                approved_application.id,
                CompleteApplicationRequest(
                    expected_version=approved_application.version,
                    performance_rating=4,
                    start_date=date(2026, 1, 5),
                    end_date=date(2026, 2, 5),
                ),
            )
        certificates.issue_certificate.assert_not_awaited()


class TestFeedback:
    """Test supervisor feedback."""

    @pytest.mark.asyncio
    async def test_feedback_on_offered_completes_application(
        self, session, application_service, approved_application, employer, student
    ):
        """Test feedback on an OFFERED application issues the certificate."""
        await extend_offer(session, employer, approved_application)
        service = FeedbackService(session, application_service)

        feedback = await service.submit(
            as_current(employer),
            FeedbackCreate(
                application_id=approved_application.id,
                rating=4,
                skills_gained=["FastAPI", "Docker"],
                recommendation_for_placement=True,
            ),
        )

        assert feedback.rating == 4
        assert approved_application.status == ApplicationStatus.COMPLETED.value
        certificate = await session.execute(
            select(Certificate).where(Certificate.application_id == approved_application.id)
        )
        assert certificate.scalars().one().certificate_type == "INTERNSHIP"
        record = await session.execute(
            select(EmployabilityRecord).where(EmployabilityRecord.student_id == student.id)
        )
        record = record.scalars().one()
        assert record.internships_completed == 1
        assert record.skills_acquired == ["fastapi", "docker"]

    @pytest.mark.asyncio
    async def test_feedback_twice(self, session, application_service, approved_application, employer):
        """Test a second feedback for the same application is refused."""
        await extend_offer(session, employer, approved_application)
        service = FeedbackService(session, application_service)
        data = FeedbackCreate(application_id=approved_application.id, rating=5)
        await service.submit(as_current(employer), data)

        with pytest.raises(DuplicateFeedbackError) as exc_info:
            await service.submit(as_current(employer), data)
        assert "already exists" in exc_info.value.message
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_feedback_from_other_employer(
        self, session, application_service, approved_application, employer, other_employer
    ):
        """Test only the posting's employer may give feedback."""
        await extend_offer(session, employer, approved_application)
        service = FeedbackService(session, application_service)

        with pytest.raises(PermissionDeniedError):
            await service.submit(
                as_current(other_employer),
                FeedbackCreate(application_id=approved_application.id, rating=3),
            )
