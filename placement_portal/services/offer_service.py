"""Placement offers: extension, student response, withdrawal and expiry."""

import logging
from collections import Counter
from datetime import datetime, timedelta

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from placement_portal.core.auth import CurrentUser
from placement_portal.core.config import settings
from placement_portal.core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    OfferConflictError,
    PermissionDeniedError,
    ValidationFailedError,
)
from placement_portal.core.storage import utc_now
from placement_portal.models.application import Application
from placement_portal.models.enums import (
    OPEN_OFFER_STATUSES,
    ApplicationStatus,
    NotificationType,
    OfferStatus,
    OfferType,
    PlacementStatus,
    Role,
    TrackingStepStatus,
)
from placement_portal.models.internship import Internship
from placement_portal.models.offer import PlacementOffer
from placement_portal.models.user import User
from placement_portal.schemas.offer import (
    OfferAnalytics,
    OfferContractUpdate,
    OfferCreate,
    OfferRespond,
)
from placement_portal.services import access
from placement_portal.services.notification_service import NotificationService
from placement_portal.services.tracking_service import (
    STEP_FINAL_DECISION,
    STEP_OFFER_PROCESSING,
    TrackingService,
)

logger = logging.getLogger(__name__)


def acceptance_rate(by_status: dict[str, int]) -> float:
    """Accepted offers as a percentage of offers the students answered."""
    accepted = by_status.get(OfferStatus.ACCEPTED.value, 0)
    responded = accepted + by_status.get(OfferStatus.REJECTED.value, 0)
    if not responded:
        return 0.0
    return round(accepted / responded * 100, 2)


def placement_status_for(offer_type: OfferType) -> PlacementStatus:
    if offer_type == OfferType.INTERNSHIP:
        return PlacementStatus.INTERNING
    return PlacementStatus.PLACED


class OfferService:
    """Offer lifecycle.

    Offers are extended immediately (status EXTENDED); at most one open offer
    (DRAFT, EXTENDED or ACCEPTED) exists per application.
    """

    def __init__(
        self,
        session: AsyncSession,
        tracking: TrackingService | None = None,
        notifications: NotificationService | None = None,
        response_days: int | None = None,
    ):
        self.session = session
        self.tracking = tracking or TrackingService(session)
        self.notifications = notifications or NotificationService(session)
        self.response_days = response_days or settings.offer_default_response_days

    async def _get_offer(self, offer_id: int) -> PlacementOffer:
        offer = await self.session.get(PlacementOffer, offer_id)
        if offer is None:
            raise NotFoundError("Offer", offer_id)
        return offer

    async def _has_open_offer(self, application_id: int) -> bool:
        result = await self.session.execute(
            select(PlacementOffer.id).where(
                PlacementOffer.application_id == application_id,
                PlacementOffer.offer_status.in_([s.value for s in OPEN_OFFER_STATUSES]),
            )
        )
        return result.first() is not None

    @access.lost_update_as_conflict
    async def create(self, actor: CurrentUser, data: OfferCreate) -> PlacementOffer:
        """Extend an offer; allowed from any non-terminal application state."""
        application = await access.get_application(self.session, data.application_id)
        internship = await access.get_internship(self.session, application.internship_id)
        access.ensure_internship_owner(actor, internship)
        access.check_version(application, data.expected_version)
        if application.is_terminal:
            raise InvalidTransitionError(application.id, application.status, "make an offer for")
        if await self._has_open_offer(application.id):
            raise OfferConflictError(
                f"Application {application.id} already has an open offer"
            )

        now = utc_now()
        deadline = data.response_deadline or now + timedelta(days=self.response_days)
        if deadline <= now:
            raise ValidationFailedError("response_deadline must be in the future")

        offer = PlacementOffer(
            application_id=application.id,
            student_id=application.student_id,
            company_id=internship.posted_by,
            position_title=data.position_title,
            offer_type=data.offer_type.value,
            offer_details=data.offer_details,
            offer_status=OfferStatus.EXTENDED.value,
            offer_date=now,
            response_deadline=deadline,
            contract_signed=False,
        )
        self.session.add(offer)

        access.move_to(application, ApplicationStatus.OFFERED, actor.id)
        application.offer_made_at = now
        await self.tracking.update_step(
            application.id,
            STEP_FINAL_DECISION,
            TrackingStepStatus.COMPLETED,
            notes=f"Offer extended: {data.position_title}",
            actor_id=actor.id,
        )
        await self.tracking.update_step(
            application.id, STEP_OFFER_PROCESSING, TrackingStepStatus.IN_PROGRESS
        )
        self.notifications.notify(
            application.student_id,
            NotificationType.OFFER,
            "You received an offer",
            f"{internship.company_name} offered you {data.position_title}; "
            f"respond by {deadline:%Y-%m-%d}",
            {"application_id": application.id},
        )
        await access.commit(self.session)
        logger.info(f"Offer {offer.id} extended for application {application.id}")
        return offer

    async def _expire(self, offer: PlacementOffer, application: Application) -> None:
        offer.offer_status = OfferStatus.EXPIRED.value
        if application.status == ApplicationStatus.OFFERED.value:
            access.move_to(application, ApplicationStatus.OFFER_REJECTED, None)
        await self.tracking.update_step(
            application.id,
            STEP_OFFER_PROCESSING,
            TrackingStepStatus.COMPLETED,
            notes="Offer expired without a response",
        )
        self.notifications.notify(
            offer.student_id,
            NotificationType.OFFER,
            "Offer expired",
            f"The offer for {offer.position_title} expired on {offer.response_deadline:%Y-%m-%d}",
            {"application_id": application.id, "offer_id": offer.id},
        )

    @access.lost_update_as_conflict
    async def respond(
        self, student: CurrentUser, offer_id: int, data: OfferRespond
    ) -> PlacementOffer:
        offer = await self._get_offer(offer_id)
        if offer.student_id != student.id:
            raise PermissionDeniedError("Only the student who received the offer can respond")
        if offer.offer_status != OfferStatus.EXTENDED.value:
            raise ValidationFailedError(f"Offer {offer.id} is {offer.offer_status}")

        application = await access.get_application(self.session, offer.application_id)
        now = utc_now()
        if offer.response_deadline < now:
            await self._expire(offer, application)
            await access.commit(self.session)
            raise ValidationFailedError("Offer response deadline has passed")
        access.require_status(application, [ApplicationStatus.OFFERED], "respond to an offer on")

        if data.response == "ACCEPTED":
            offer.offer_status = OfferStatus.ACCEPTED.value
            offer.acceptance_date = now
            access.move_to(application, ApplicationStatus.OFFER_ACCEPTED, student.id)
            application.offer_accepted_at = now
            profile = await access.get_user(self.session, student.id)
            profile.placement_status = placement_status_for(OfferType(offer.offer_type)).value
            notes = "Offer accepted"
        else:
            offer.offer_status = OfferStatus.REJECTED.value
            offer.rejection_date = now
            offer.rejection_reason = data.rejection_reason
            access.move_to(application, ApplicationStatus.OFFER_REJECTED, student.id)
            notes = f"Offer rejected: {data.rejection_reason}" if data.rejection_reason else "Offer rejected"

        await self.tracking.update_step(
            application.id,
            STEP_OFFER_PROCESSING,
            TrackingStepStatus.COMPLETED,
            notes=notes,
            actor_id=student.id,
        )
        self.notifications.notify(
            offer.company_id,
            NotificationType.OFFER,
            f"Offer {data.response.lower()}",
            f"{notes} for {offer.position_title}",
            {"application_id": application.id, "offer_id": offer.id},
        )
        await access.commit(self.session)
        return offer

    async def _load_for_company(
        self, actor: CurrentUser, offer_id: int
    ) -> tuple[PlacementOffer, Application]:
        offer = await self._get_offer(offer_id)
        application = await access.get_application(self.session, offer.application_id)
        internship = await access.get_internship(self.session, application.internship_id)
        access.ensure_internship_owner(actor, internship)
        return offer, application

    @access.lost_update_as_conflict
    async def withdraw(self, actor: CurrentUser, offer_id: int) -> PlacementOffer:
        offer, application = await self._load_for_company(actor, offer_id)
        if offer.offer_status not in (OfferStatus.DRAFT.value, OfferStatus.EXTENDED.value):
            raise ValidationFailedError(f"Offer {offer.id} is {offer.offer_status}")

        offer.offer_status = OfferStatus.WITHDRAWN.value
        if application.status == ApplicationStatus.OFFERED.value:
            access.move_to(application, ApplicationStatus.NOT_OFFERED, actor.id)
        await self.tracking.update_step(
            application.id,
            STEP_OFFER_PROCESSING,
            TrackingStepStatus.SKIPPED,
            notes="Offer withdrawn by employer",
            actor_id=actor.id,
        )
        self.notifications.notify(
            offer.student_id,
            NotificationType.OFFER,
            "Offer withdrawn",
            f"The offer for {offer.position_title} was withdrawn",
            {"application_id": application.id, "offer_id": offer.id},
        )
        await access.commit(self.session)
        return offer

    async def update_contract(
        self, actor: CurrentUser, offer_id: int, data: OfferContractUpdate
    ) -> PlacementOffer:
        offer, _ = await self._load_for_company(actor, offer_id)
        if offer.offer_status != OfferStatus.ACCEPTED.value:
            raise ValidationFailedError("Contracts can only be recorded for accepted offers")
        offer.contract_signed = data.contract_signed
        if data.contract_details is not None:
            offer.contract_details = data.contract_details
        await self.session.commit()
        return offer

    def _scoped(self, query, user: CurrentUser, mentor: User | None = None):
        if user.role == Role.STUDENT:
            return query.where(PlacementOffer.student_id == user.id)
        if user.role == Role.EMPLOYER:
            return (
                query.join(Application, Application.id == PlacementOffer.application_id)
                .join(Internship, Internship.id == Application.internship_id)
                .where(
                    or_(
                        PlacementOffer.company_id == user.id,
                        Internship.posted_by == user.id,
                    )
                )
            )
        if user.role == Role.MENTOR and mentor is not None:
            return query.join(User, User.id == PlacementOffer.student_id).where(
                User.department == mentor.department
            )
        return query

    async def list_for_user(
        self, user: CurrentUser, application_id: int | None = None
    ) -> list[PlacementOffer]:
        query = select(PlacementOffer)
        if application_id is not None:
            application = await access.get_application(self.session, application_id)
            await access.ensure_can_view(self.session, user, application)
            query = query.where(PlacementOffer.application_id == application_id)
        else:
            mentor = (
                await access.get_user(self.session, user.id)
                if user.role == Role.MENTOR
                else None
            )
            query = self._scoped(query, user, mentor)
        result = await self.session.execute(query.order_by(PlacementOffer.offer_date.desc()))
        return list(result.scalars().all())

    async def get_for_user(self, user: CurrentUser, offer_id: int) -> PlacementOffer:
        offer = await self._get_offer(offer_id)
        application = await access.get_application(self.session, offer.application_id)
        await access.ensure_can_view(self.session, user, application)
        return offer

    async def analytics(self, user: CurrentUser) -> OfferAnalytics:
        offers = await self.list_for_user(user)
        by_status = Counter(o.offer_status for o in offers)
        counts = {s.value: by_status.get(s.value, 0) for s in OfferStatus}
        return OfferAnalytics(
            total_offers=len(offers),
            by_status=counts,
            acceptance_rate=acceptance_rate(counts),
        )

    async def expire_overdue(self, now: datetime | None = None) -> int:
        """Expire every EXTENDED offer past its deadline; returns how many."""
        now = now or utc_now()
        result = await self.session.execute(
            select(PlacementOffer).where(
                PlacementOffer.offer_status == OfferStatus.EXTENDED.value,
                PlacementOffer.response_deadline < now,
            )
        )
        overdue = result.scalars().all()
        for offer in overdue:
            application = await access.get_application(self.session, offer.application_id)
            await self._expire(offer, application)
        if overdue:
            await access.commit(self.session)
            logger.info(f"Expired {len(overdue)} overdue offer(s)")
        return len(overdue)
