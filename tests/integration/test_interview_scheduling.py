"""Integration tests for interview scheduling and calendar conflicts."""

from datetime import datetime, time, timedelta

import pytest

from helpers import as_current
from placement_portal.core.exceptions import (
    InvalidTransitionError,
    SchedulingConflictError,
    StaleVersionError,
    ValidationFailedError,
)
from placement_portal.core.config import Settings
from placement_portal.core.storage import utc_now
from placement_portal.models.application import Application
from placement_portal.models.calendar import CalendarEvent
from placement_portal.models.enums import (
    ApplicationStatus,
    CalendarEventStatus,
    CalendarEventType,
    InterviewStatus,
)
from placement_portal.schemas.application import ApplicationCreate, VersionedRequest
from placement_portal.schemas.interview import (
    InterviewCreate,
    InterviewReschedule,
    InterviewStatusUpdate,
)
from placement_portal.services.application_service import ApplicationService
from placement_portal.services.calendar_service import CalendarService
from placement_portal.services.certificate_service import DatabaseCertificateService
from placement_portal.services.interview_service import InterviewService


def next_morning(days: int = 3):
    return (utc_now() + timedelta(days=days)).replace(hour=10, minute=0, second=0, microsecond=0)


class TestSchedule:
    """Test booking interviews."""

    @pytest.mark.asyncio
    async def test_schedule_books_calendar_event(
        self, session, approved_application, employer, student
    ):
        """Test scheduling moves the application and adds an interview event."""
        service = InterviewService(session)
        when = next_morning()

        interview = await service.schedule(
            as_current(employer),
            InterviewCreate(application_id=approved_application.id, scheduled_datetime=when),
        )

        assert interview.status == InterviewStatus.SCHEDULED.value
        assert interview.interviewer_id == employer.id
        assert interview.student_id == student.id
        assert approved_application.status == ApplicationStatus.INTERVIEW_SCHEDULED.value
        assert approved_application.interview_scheduled_at == when

        event = await session.get(CalendarEvent, interview.calendar_event_id)
        assert event.event_type == CalendarEventType.INTERVIEW.value
        assert set(event.participants) == {employer.id, student.id}

    @pytest.mark.asyncio
    async def test_exam_conflict_rejects_interview(
        self, session, approved_application, employer, student
    ):
        """Test an overlapping exam blocks the interview and is reported."""
        when = next_morning()
        session.add(
            CalendarEvent(
                title="Operating Systems Midterm",
                event_type=CalendarEventType.EXAM.value,
                start_datetime=when - timedelta(minutes=30),
                end_datetime=when + timedelta(minutes=90),
                organizer_id=None,
                participants=[student.id],
            )
        )
        await session.commit()

        with pytest.raises(SchedulingConflictError) as exc_info:
            await InterviewService(session).schedule(
                as_current(employer),
                InterviewCreate(application_id=approved_application.id, scheduled_datetime=when),
            )

        report = exc_info.value.report
        assert exc_info.value.status_code == 409
        assert report["has_conflicts"]
        assert report["has_blocking_conflicts"]
        assert "exam" in report["conflicts"][0]["reason"]
        assert report["conflicts"][0]["user_id"] == student.id
        assert approved_application.status == ApplicationStatus.MENTOR_APPROVED.value

    @pytest.mark.asyncio
    async def test_cannot_schedule_before_mentor_approval(
        self, session, application_service, student, employer, internship
    ):
        """Test scheduling is refused while the mentor gate is open."""
        application = await application_service.submit(
            as_current(student), ApplicationCreate(internship_id=internship.id)
        )

        with pytest.raises(InvalidTransitionError):
            await InterviewService(session).schedule(
                as_current(employer),
                InterviewCreate(application_id=application.id, scheduled_datetime=next_morning()),
            )


class TestFollowUp:
    """Test interview completion, cancellation and rescheduling."""

    @pytest.mark.asyncio
    async def test_complete_moves_to_interviewed(self, session, approved_application, employer):
        """Test completing the interview records the outcome."""
        service = InterviewService(session)
        interview = await service.schedule(
            as_current(employer),
            InterviewCreate(application_id=approved_application.id, scheduled_datetime=next_morning()),
        )

        updated = await service.update_status(
            as_current(employer),
            interview.id,
            InterviewStatusUpdate(status=InterviewStatus.COMPLETED, feedback="Strong", rating=4),
        )

        assert updated.status == InterviewStatus.COMPLETED.value
        assert updated.rating == 4
        assert approved_application.status == ApplicationStatus.INTERVIEWED.value
        event = await session.get(CalendarEvent, interview.calendar_event_id)
        assert event.status == CalendarEventStatus.COMPLETED.value

    @pytest.mark.asyncio
    async def test_finished_interview_cannot_change(self, session, approved_application, employer):
        """Test a cancelled interview stays cancelled."""
        service = InterviewService(session)
        interview = await service.schedule(
            as_current(employer),
            InterviewCreate(application_id=approved_application.id, scheduled_datetime=next_morning()),
        )
        await service.update_status(
            as_current(employer), interview.id, InterviewStatusUpdate(status=InterviewStatus.CANCELLED)
        )

        with pytest.raises(ValidationFailedError):
            await service.update_status(
                as_current(employer),
                interview.id,
                InterviewStatusUpdate(status=InterviewStatus.CONFIRMED),
            )

    @pytest.mark.asyncio
    async def test_reschedule_links_successor(self, session, approved_application, employer):
        """Test rescheduling retires the old interview and frees its slot."""
        service = InterviewService(session)
        first_slot = next_morning()
        interview = await service.schedule(
            as_current(employer),
            InterviewCreate(application_id=approved_application.id, scheduled_datetime=first_slot),
        )

        # Overlaps the original slot, which must not count as a conflict
        successor = await service.reschedule(
            as_current(employer),
            interview.id,
            InterviewReschedule(scheduled_datetime=first_slot + timedelta(minutes=30)),
        )

        assert successor.rescheduled_from_id == interview.id
        assert successor.status == InterviewStatus.SCHEDULED.value
        assert interview.status == InterviewStatus.RESCHEDULED.value
        old_event = await session.get(CalendarEvent, interview.calendar_event_id)
        assert old_event.status == CalendarEventStatus.RESCHEDULED.value

    @pytest.mark.asyncio
    async def test_available_slots_skip_busy_hours(self, session, employer):
        """Test free slots exclude lunch and booked events."""
        service = InterviewService(session)
        day = next_morning(days=7).date()
        while day.weekday() >= 5:
            day += timedelta(days=1)
        busy_start = datetime.combine(day, time(10))
        session.add(
            CalendarEvent(
                title="Team sync",
                event_type=CalendarEventType.OTHER.value,
                start_datetime=busy_start,
                end_datetime=busy_start + timedelta(hours=1),
                organizer_id=employer.id,
                participants=[employer.id],
            )
        )
        await session.commit()

        slots = await service.available_slots(employer.id, day, 60)
        starts = [s.start.hour for s in slots]

        assert 10 not in starts
        assert 12 not in starts
        assert 9 in starts

    @pytest.mark.asyncio
    async def test_no_slots_on_weekends(self, session, employer):
        """Test weekends offer no interview slots."""
        service = InterviewService(session)
        day = next_morning(days=7).date()
        while day.weekday() != 5:
            day += timedelta(days=1)

        assert await service.available_slots(employer.id, day, 60) == []


def next_weekday(days: int = 2):
    day = (utc_now() + timedelta(days=days)).date()
    while day.weekday() >= 5:
        day += timedelta(days=1)
    return day


class TestSuggestedTimes:
    """Test alternative slots offered with a conflict report."""

    @pytest.mark.asyncio
    async def test_suggestions_skip_busy_hours(
        self, session, approved_application, employer, student
    ):
        """Test suggestions avoid every busy event and stop at the configured count."""
        day = next_weekday()
        proposed = datetime.combine(day, time(10))
        session.add_all(
            [
                CalendarEvent(
                    title="Compilers Quiz",
                    event_type=CalendarEventType.EXAM.value,
                    start_datetime=proposed,
                    end_datetime=proposed + timedelta(hours=1),
                    participants=[student.id],
                ),
                CalendarEvent(
                    title="Hiring committee",
                    event_type=CalendarEventType.OTHER.value,
                    start_datetime=proposed + timedelta(hours=1),
                    end_datetime=proposed + timedelta(hours=2),
                    organizer_id=employer.id,
                    participants=[employer.id],
                ),
            ]
        )
        await session.commit()
        service = InterviewService(session)

        with pytest.raises(SchedulingConflictError) as exc_info:
            await service.schedule(
                as_current(employer),
                InterviewCreate(application_id=approved_application.id, scheduled_datetime=proposed),
            )

        suggested = [datetime.fromisoformat(s) for s in exc_info.value.report["suggested_times"]]
        assert len(suggested) == 3
        assert proposed + timedelta(hours=1) not in suggested
        assert suggested == sorted(suggested)
        for start in suggested:
            assert start.weekday() < 5
            assert proposed < start <= proposed + timedelta(days=7)
            report = await service.check_conflicts(
                [employer.id, student.id], start, start + timedelta(hours=1)
            )
            assert not report.has_conflicts

    @pytest.mark.asyncio
    async def test_suggestions_stay_within_horizon(self, session, employer):
        """Test nothing is suggested beyond the search horizon."""
        after = datetime.combine(next_weekday(), time(9))
        session.add(
            CalendarEvent(
                title="Offsite",
                event_type=CalendarEventType.OTHER.value,
                start_datetime=after,
                end_datetime=after + timedelta(days=2),
                organizer_id=employer.id,
                participants=[employer.id],
            )
        )
        await session.commit()
        calendar = CalendarService(
            session, Settings(_env_file=None, slot_search_horizon_days=1)
        )

        slots = await calendar.suggest_times([employer.id], after, timedelta(hours=1))

        assert slots == []


class TestConcurrentScheduling:
    """Test lost updates while scheduling."""

    @pytest.mark.asyncio
    async def test_schedule_on_stale_application(
        self, database, approved_application, employer
    ):
        """Test scheduling against a row changed by another writer is refused."""
        async with database.session() as first, database.session() as second:
            stale = await second.get(Application, approved_application.id)
            assert stale.status == ApplicationStatus.MENTOR_APPROVED.value

            await ApplicationService(first, DatabaseCertificateService(first)).start_employer_review(
                as_current(employer),
                approved_application.id,
                VersionedRequest(expected_version=stale.version),
            )

            with pytest.raises(StaleVersionError):
                await InterviewService(second).schedule(
                    as_current(employer),
                    InterviewCreate(
                        application_id=approved_application.id,
                        scheduled_datetime=next_morning(),
                    ),
                )

        async with database.session() as fresh:
            stored = await fresh.get(Application, approved_application.id)
            assert stored.status == ApplicationStatus.EMPLOYER_REVIEW.value
            assert stored.interview_scheduled_at is None
