"""Mentor approval routing, workqueue and workflow analytics."""

import logging
from collections import defaultdict
from datetime import datetime, timedelta

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from placement_portal.core.auth import CurrentUser
from placement_portal.core.storage import utc_now
from placement_portal.models.application import Application
from placement_portal.models.enums import (
    MENTOR_PENDING_STATUSES,
    ApplicationStatus,
    ApprovalPriority,
    NotificationType,
    Role,
)
from placement_portal.models.internship import Internship
from placement_portal.models.user import User
from placement_portal.schemas.mentor import (
    MentorPerformance,
    MentorWorkflowAnalytics,
    MentorWorkqueue,
    WorkqueueItem,
    WorkqueueSummary,
)
from placement_portal.services import access
from placement_portal.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

MAX_RESPONSE_HOURS = {
    ApprovalPriority.URGENT: 12,
    ApprovalPriority.HIGH: 24,
    ApprovalPriority.MEDIUM: 48,
    ApprovalPriority.LOW: 72,
}
PRIORITY_ORDER = (
    ApprovalPriority.URGENT,
    ApprovalPriority.HIGH,
    ApprovalPriority.MEDIUM,
    ApprovalPriority.LOW,
)
ANALYTICS_WINDOW = timedelta(days=30)

_PENDING = [s.value for s in MENTOR_PENDING_STATUSES]


def approval_priority(
    applied_at: datetime, deadline: datetime | None, now: datetime
) -> ApprovalPriority:
    """Closing deadlines first, then requests that have waited longest."""
    if deadline is not None:
        days_left = (deadline - now) / timedelta(days=1)
        if days_left < 3:
            return ApprovalPriority.URGENT
        if days_left < 7:
            return ApprovalPriority.HIGH
    age_days = (now - applied_at) / timedelta(days=1)
    if age_days > 5:
        return ApprovalPriority.HIGH
    if age_days > 2:
        return ApprovalPriority.MEDIUM
    return ApprovalPriority.LOW


def is_overdue(priority: ApprovalPriority, waiting_hours: float) -> bool:
    return waiting_hours > MAX_RESPONSE_HOURS[priority]


def hours_between(start: datetime, end: datetime) -> float:
    return (end - start) / timedelta(hours=1)


class MentorWorkflowService:
    """Routes new applications to mentors and reports on the mentor gate.

    Assignment picks the mentor of the student's department with the fewest
    pending decisions. Any mentor of the department may still decide; the
    decider becomes the application's mentor.
    """

    def __init__(
        self, session: AsyncSession, notifications: NotificationService | None = None
    ):
        self.session = session
        self.notifications = notifications or NotificationService(session)

    async def pick_mentor(self, department: str | None) -> User | None:
        """Least-loaded mentor of the department, ties broken by id."""
        if not department:
            return None
        workload = func.count(Application.id)
        result = await self.session.execute(
            select(User, workload)
            .outerjoin(
                Application,
                and_(Application.mentor_id == User.id, Application.status.in_(_PENDING)),
            )
            .where(User.role == Role.MENTOR.value, User.department == department)
            .group_by(User.id)
            .order_by(workload, User.id)
            .limit(1)
        )
        row = result.first()
        return row[0] if row else None

    def announce_assignment(
        self,
        mentor: User,
        application: Application,
        student: User,
        internship: Internship,
    ) -> ApprovalPriority:
        """Tell the assigned mentor about a new request. Does not commit."""
        priority = approval_priority(
            application.applied_at, internship.application_deadline, utc_now()
        )
        self.notifications.notify(
            mentor.id,
            NotificationType.APPROVAL,
            "New application for review",
            f"{student.name} applied to {internship.title} at {internship.company_name}",
            {"application_id": application.id, "priority": priority.value},
        )
        logger.info(
            f"Application {application.id} assigned to mentor {mentor.id} ({priority.value})"
        )
        return priority

    async def workqueue(self, mentor_user: CurrentUser) -> MentorWorkqueue:
        """Pending decisions assigned to the mentor, plus unassigned ones of their department."""
        mentor = await access.get_user(self.session, mentor_user.id)
        mine = Application.mentor_id == mentor.id
        if mentor.department:
            mine = or_(
                mine,
                and_(Application.mentor_id.is_(None), User.department == mentor.department),
            )
        result = await self.session.execute(
            select(Application, Internship, User)
            .join(Internship, Internship.id == Application.internship_id)
            .join(User, User.id == Application.student_id)
            .where(Application.status.in_(_PENDING), mine)
        )

        now = utc_now()
        items = []
        for application, internship, student in result.all():
            priority = approval_priority(
                application.applied_at, internship.application_deadline, now
            )
            waiting = hours_between(application.applied_at, now)
            items.append(
                WorkqueueItem(
                    application_id=application.id,
                    student_id=student.id,
                    student_name=student.name,
                    internship_title=internship.title,
                    company_name=internship.company_name,
                    status=application.status,
                    priority=priority,
                    applied_at=application.applied_at,
                    application_deadline=internship.application_deadline,
                    waiting_hours=round(waiting),
                    is_overdue=is_overdue(priority, waiting),
                )
            )
        items.sort(key=lambda i: (PRIORITY_ORDER.index(i.priority), i.applied_at))

        return MentorWorkqueue(
            pending_requests=items,
            overdue_requests=[i for i in items if i.is_overdue],
            summary=WorkqueueSummary(
                total_pending=len(items),
                high_priority=sum(
                    1
                    for i in items
                    if i.priority in (ApprovalPriority.HIGH, ApprovalPriority.URGENT)
                ),
                avg_waiting_time_hours=(
                    round(sum(i.waiting_hours for i in items) / len(items)) if items else 0
                ),
            ),
        )

    async def analytics(self) -> MentorWorkflowAnalytics:
        now = utc_now()
        result = await self.session.execute(
            select(Application, User)
            .outerjoin(User, User.id == Application.mentor_id)
            .where(Application.applied_at >= now - ANALYTICS_WINDOW)
        )
        rows = result.all()

        decided_total = approved_total = 0
        response_hours: list[float] = []
        per_mentor: dict[int, dict] = defaultdict(
            lambda: {"name": "", "pending": 0, "decided": 0, "approved": 0, "hours": []}
        )
        for application, mentor in rows:
            stats = per_mentor[mentor.id] if mentor is not None else None
            if stats is not None:
                stats["name"] = mentor.name
            if application.status in _PENDING:
                if stats is not None:
                    stats["pending"] += 1
                continue
            if application.mentor_approved_at is None:
                continue
            approved = application.status != ApplicationStatus.MENTOR_REJECTED.value
            hours = hours_between(application.applied_at, application.mentor_approved_at)
            decided_total += 1
            approved_total += approved
            response_hours.append(hours)
            if stats is not None:
                stats["decided"] += 1
                stats["approved"] += approved
                stats["hours"].append(hours)

        performance = [
            MentorPerformance(
                mentor_id=mentor_id,
                mentor_name=stats["name"],
                pending_requests=stats["pending"],
                requests_handled=stats["decided"],
                approval_rate=(
                    round(stats["approved"] / stats["decided"] * 100, 1)
                    if stats["decided"]
                    else 0.0
                ),
                avg_response_time_hours=(
                    round(sum(stats["hours"]) / len(stats["hours"])) if stats["hours"] else 0
                ),
            )
            for mentor_id, stats in per_mentor.items()
        ]
        performance.sort(key=lambda p: (-p.requests_handled, p.mentor_name))

        return MentorWorkflowAnalytics(
            total_requests=len(rows),
            decided_requests=decided_total,
            avg_approval_time_hours=(
                round(sum(response_hours) / len(response_hours)) if response_hours else 0
            ),
            approval_rate=(
                round(approved_total / decided_total * 100, 1) if decided_total else 0.0
            ),
            mentor_performance=performance,
            generated_at=now,
        )
