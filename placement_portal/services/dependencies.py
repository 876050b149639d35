"""FastAPI dependencies wiring services to the request session."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from placement_portal.core.storage import get_session
from placement_portal.services.application_service import ApplicationService
from placement_portal.services.calendar_service import CalendarService
from placement_portal.services.certificate_service import (
    CertificateService,
    DatabaseCertificateService,
)
from placement_portal.services.chat_service import ChatService
from placement_portal.services.feedback_service import FeedbackService
from placement_portal.services.heatmap_service import HeatmapService
from placement_portal.services.internship_service import InternshipService
from placement_portal.services.interview_service import InterviewService
from placement_portal.services.mentor_workflow_service import MentorWorkflowService
from placement_portal.services.notification_service import NotificationService
from placement_portal.services.offer_service import OfferService
from placement_portal.services.search_service import SearchService
from placement_portal.services.user_service import UserService


def get_certificate_service(
    session: AsyncSession = Depends(get_session),
) -> CertificateService:
    return DatabaseCertificateService(session)


def get_application_service(
    session: AsyncSession = Depends(get_session),
    certificates: CertificateService = Depends(get_certificate_service),
) -> ApplicationService:
    """Create application service with its collaborators."""
    return ApplicationService(session, certificates)


def get_feedback_service(
    session: AsyncSession = Depends(get_session),
    applications: ApplicationService = Depends(get_application_service),
) -> FeedbackService:
    return FeedbackService(session, applications)


def get_interview_service(
    session: AsyncSession = Depends(get_session),
) -> InterviewService:
    return InterviewService(session)


def get_offer_service(session: AsyncSession = Depends(get_session)) -> OfferService:
    return OfferService(session)


def get_calendar_service(
    session: AsyncSession = Depends(get_session),
) -> CalendarService:
    return CalendarService(session)


def get_chat_service(session: AsyncSession = Depends(get_session)) -> ChatService:
    return ChatService(session)


def get_internship_service(
    session: AsyncSession = Depends(get_session),
) -> InternshipService:
    return InternshipService(session)


def get_search_service(session: AsyncSession = Depends(get_session)) -> SearchService:
    return SearchService(session)


def get_mentor_workflow_service(
    session: AsyncSession = Depends(get_session),
) -> MentorWorkflowService:
    return MentorWorkflowService(session)


def get_heatmap_service(session: AsyncSession = Depends(get_session)) -> HeatmapService:
    return HeatmapService(session)


def get_notification_service(
    session: AsyncSession = Depends(get_session),
) -> NotificationService:
    return NotificationService(session)


def get_user_service(session: AsyncSession = Depends(get_session)) -> UserService:
    return UserService(session)
