"""Interview scheduling on top of the calendar conflict checker."""

import logging
from datetime import date, datetime, timedelta

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from placement_portal.core.auth import CurrentUser
from placement_portal.core.exceptions import (
    NotFoundError,
    SchedulingConflictError,
    ValidationFailedError,
)
from placement_portal.models.application import Application
from placement_portal.models.calendar import CalendarEvent
from placement_portal.models.enums import (
    ApplicationStatus,
    CalendarEventStatus,
    CalendarEventType,
    InterviewStatus,
    NotificationType,
    Role,
    TrackingStepStatus,
)
from placement_portal.models.internship import Internship
from placement_portal.models.interview import InterviewSchedule
from placement_portal.models.user import User
from placement_portal.schemas.calendar import AvailableSlot, ConflictReport
from placement_portal.schemas.interview import (
    InterviewCreate,
    InterviewReschedule,
    InterviewStatusUpdate,
)
from placement_portal.services import access
from placement_portal.services.calendar_service import CalendarService
from placement_portal.services.notification_service import NotificationService
from placement_portal.services.tracking_service import (
    STEP_INTERVIEW_PROCESS,
    STEP_INTERVIEW_SCHEDULING,
    TrackingService,
)

logger = logging.getLogger(__name__)

SCHEDULABLE_FROM = (
    ApplicationStatus.MENTOR_APPROVED,
    ApplicationStatus.EMPLOYER_REVIEW,
    ApplicationStatus.INTERVIEWED,
)
ACTIVE_INTERVIEW_STATUSES = (InterviewStatus.SCHEDULED, InterviewStatus.CONFIRMED)


class InterviewService:
    """Schedules, follows up and reschedules interviews."""

    def __init__(
        self,
        session: AsyncSession,
        calendar: CalendarService | None = None,
        tracking: TrackingService | None = None,
        notifications: NotificationService | None = None,
    ):
        self.session = session
        self.calendar = calendar or CalendarService(session)
        self.tracking = tracking or TrackingService(session)
        self.notifications = notifications or NotificationService(session)

    async def _get_interview(self, interview_id: int) -> InterviewSchedule:
        interview = await self.session.get(InterviewSchedule, interview_id)
        if interview is None:
            raise NotFoundError("Interview", interview_id)
        return interview

    async def _ensure_conflict_free(
        self,
        user_ids: list[int],
        start: datetime,
        end: datetime,
        exclude_event_ids: list[int] | None = None,
    ) -> None:
        report = await self.calendar.check_conflicts(
            user_ids, start, end, exclude_event_ids or []
        )
        if report.has_conflicts:
            logger.warning(
                f"Interview at {start} rejected: {len(report.conflicts)} conflict(s)"
            )
            raise SchedulingConflictError(report.model_dump(mode="json"))

    def _add_interview_event(
        self,
        internship: Internship,
        interviewer_id: int,
        student_id: int,
        start: datetime,
        end: datetime,
        link: str | None,
        location: str | None,
    ) -> CalendarEvent:
        return self.calendar.add_event(
            title=f"Interview: {internship.title}",
            event_type=CalendarEventType.INTERVIEW,
            start=start,
            end=end,
            organizer_id=interviewer_id,
            participants=[interviewer_id, student_id],
            description=f"Interview for {internship.company_name}",
            location=location,
            meeting_url=link,
        )

    @access.lost_update_as_conflict
    async def schedule(self, actor: CurrentUser, data: InterviewCreate) -> InterviewSchedule:
        """Book an interview and move the application to INTERVIEW_SCHEDULED.

        Both the interviewer and the student are checked against the calendar;
        any overlap rejects the request with the conflict report attached.
        """
        application = await access.get_application(self.session, data.application_id)
        internship = await access.get_internship(self.session, application.internship_id)
        access.ensure_internship_owner(actor, internship)
        access.check_version(application, data.expected_version)
        access.require_status(application, SCHEDULABLE_FROM, "schedule an interview for")

        interviewer_id = data.interviewer_id or actor.id
        await access.get_user(self.session, interviewer_id)

        start = data.scheduled_datetime
        end = start + timedelta(minutes=data.duration_minutes)
        await self._ensure_conflict_free([interviewer_id, application.student_id], start, end)

        event = self._add_interview_event(
            internship,
            interviewer_id,
            application.student_id,
            start,
            end,
            data.meeting_link,
            data.location,
        )
        await self.session.flush()

        interview = InterviewSchedule(
            application_id=application.id,
            interviewer_id=interviewer_id,
            student_id=application.student_id,
            scheduled_datetime=start,
            duration_minutes=data.duration_minutes,
            mode=data.mode.value,
            interview_type=data.interview_type.value,
            meeting_link=data.meeting_link,
            location=data.location,
            notes=data.notes,
            status=InterviewStatus.SCHEDULED.value,
            calendar_event_id=event.id,
        )
        self.session.add(interview)

        access.move_to(application, ApplicationStatus.INTERVIEW_SCHEDULED, actor.id)
        application.interview_scheduled_at = start
        await self.tracking.update_step(
            application.id,
            STEP_INTERVIEW_SCHEDULING,
            TrackingStepStatus.COMPLETED,
            notes=f"{data.interview_type.value} interview on {start:%Y-%m-%d %H:%M}",
            actor_id=actor.id,
        )
        self.notifications.notify(
            application.student_id,
            NotificationType.INTERVIEW,
            "Interview scheduled",
            f"Your {data.interview_type.value.lower()} interview for {internship.title} "
            f"is on {start:%Y-%m-%d at %H:%M}",
            {"application_id": application.id, "scheduled_datetime": start.isoformat()},
        )
        await access.commit(self.session)
        return interview

    async def _load_for_follow_up(
        self, actor: CurrentUser, interview_id: int
    ) -> tuple[InterviewSchedule, Application, Internship]:
        interview = await self._get_interview(interview_id)
        application = await access.get_application(self.session, interview.application_id)
        internship = await access.get_internship(self.session, application.internship_id)
        if interview.interviewer_id != actor.id:
            access.ensure_internship_owner(actor, internship)
        return interview, application, internship

    async def _set_event_status(
        self, interview: InterviewSchedule, event_status: CalendarEventStatus
    ) -> None:
        if interview.calendar_event_id is None:
            return
        event = await self.session.get(CalendarEvent, interview.calendar_event_id)
        if event is not None:
            event.status = event_status.value

    @access.lost_update_as_conflict
    async def update_status(
        self, actor: CurrentUser, interview_id: int, data: InterviewStatusUpdate
    ) -> InterviewSchedule:
        interview, application, _ = await self._load_for_follow_up(actor, interview_id)

        if InterviewStatus(interview.status) not in ACTIVE_INTERVIEW_STATUSES:
            raise ValidationFailedError(
                f"Interview {interview.id} is already {interview.status}"
            )
        if data.status == InterviewStatus.RESCHEDULED:
            raise ValidationFailedError("Use the reschedule operation to move an interview")

        interview.status = data.status.value
        if data.feedback is not None:
            interview.feedback = data.feedback
        if data.rating is not None:
            interview.rating = data.rating

        if data.status == InterviewStatus.COMPLETED:
            await self._set_event_status(interview, CalendarEventStatus.COMPLETED)
            await self.tracking.update_step(
                application.id,
                STEP_INTERVIEW_PROCESS,
                TrackingStepStatus.COMPLETED,
                notes=data.feedback or f"{interview.interview_type} interview completed",
                actor_id=actor.id,
            )
            if application.status == ApplicationStatus.INTERVIEW_SCHEDULED.value:
                access.move_to(application, ApplicationStatus.INTERVIEWED, actor.id)
        elif data.status == InterviewStatus.CANCELLED:
            await self._set_event_status(interview, CalendarEventStatus.CANCELLED)
            self.notifications.notify(
                interview.student_id,
                NotificationType.INTERVIEW,
                "Interview cancelled",
                f"Your interview on {interview.scheduled_datetime:%Y-%m-%d %H:%M} was cancelled",
                {"application_id": application.id, "interview_id": interview.id},
            )
        elif data.status == InterviewStatus.CONFIRMED:
            await self._set_event_status(interview, CalendarEventStatus.CONFIRMED)

        logger.info(f"Interview {interview.id} marked {data.status.value} by user {actor.id}")
        await access.commit(self.session)
        return interview

    @access.lost_update_as_conflict
    async def reschedule(
        self, actor: CurrentUser, interview_id: int, data: InterviewReschedule
    ) -> InterviewSchedule:
        """Retire an interview and book its successor at a new time."""
        interview, application, internship = await self._load_for_follow_up(
            actor, interview_id
        )
        if InterviewStatus(interview.status) not in ACTIVE_INTERVIEW_STATUSES:
            raise ValidationFailedError(
                f"Interview {interview.id} is already {interview.status}"
            )

        duration = data.duration_minutes or interview.duration_minutes
        start = data.scheduled_datetime
        end = start + timedelta(minutes=duration)
        excluded = [interview.calendar_event_id] if interview.calendar_event_id else []
        await self._ensure_conflict_free(
            [interview.interviewer_id, interview.student_id], start, end, excluded
        )

        interview.status = InterviewStatus.RESCHEDULED.value
        await self._set_event_status(interview, CalendarEventStatus.RESCHEDULED)

        event = self._add_interview_event(
            internship,
            interview.interviewer_id,
            interview.student_id,
            start,
            end,
            interview.meeting_link,
            interview.location,
        )
        await self.session.flush()

        successor = InterviewSchedule(
            application_id=interview.application_id,
            interviewer_id=interview.interviewer_id,
            student_id=interview.student_id,
            scheduled_datetime=start,
            duration_minutes=duration,
            mode=interview.mode,
            interview_type=interview.interview_type,
            meeting_link=interview.meeting_link,
            location=interview.location,
            notes=data.notes or interview.notes,
            status=InterviewStatus.SCHEDULED.value,
            rescheduled_from_id=interview.id,
            calendar_event_id=event.id,
        )
        self.session.add(successor)
        application.interview_scheduled_at = start

        self.notifications.notify(
            interview.student_id,
            NotificationType.INTERVIEW,
            "Interview rescheduled",
            f"Your interview for {internship.title} moved to {start:%Y-%m-%d at %H:%M}",
            {"application_id": application.id, "interview_id": interview.id},
        )
        await access.commit(self.session)
        logger.info(f"Interview {interview.id} rescheduled as {successor.id}")
        return successor

    async def list_for_user(
        self, user: CurrentUser, application_id: int | None = None
    ) -> list[InterviewSchedule]:
        query = select(InterviewSchedule)
        if application_id is not None:
            application = await access.get_application(self.session, application_id)
            await access.ensure_can_view(self.session, user, application)
            query = query.where(InterviewSchedule.application_id == application_id)
        elif user.role == Role.STUDENT:
            query = query.where(InterviewSchedule.student_id == user.id)
        elif user.role == Role.EMPLOYER:
            query = (
                query.join(Application, Application.id == InterviewSchedule.application_id)
                .join(Internship, Internship.id == Application.internship_id)
                .where(
                    or_(
                        Internship.posted_by == user.id,
                        InterviewSchedule.interviewer_id == user.id,
                    )
                )
            )
        elif user.role == Role.MENTOR:
            mentor = await access.get_user(self.session, user.id)
            query = query.join(User, User.id == InterviewSchedule.student_id).where(
                User.department == mentor.department
            )

        result = await self.session.execute(
            query.order_by(InterviewSchedule.scheduled_datetime)
        )
        return list(result.scalars().all())

    async def available_slots(
        self, interviewer_id: int, day: date, duration_minutes: int = 60
    ) -> list[AvailableSlot]:
        await access.get_user(self.session, interviewer_id)
        return await self.calendar.available_slots(interviewer_id, day, duration_minutes)

    async def check_conflicts(
        self, user_ids: list[int], start: datetime, end: datetime
    ) -> ConflictReport:
        return await self.calendar.check_conflicts(user_ids, start, end)
