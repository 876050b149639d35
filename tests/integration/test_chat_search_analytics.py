"""Integration tests for chat, search, heatmap and internship management."""

from datetime import timedelta

import pytest

from helpers import as_current, make_user
from placement_portal.core.exceptions import (
    NotFoundError,
    PermissionDeniedError,
    ValidationFailedError,
)
from placement_portal.core.storage import utc_now
from placement_portal.models.application import Application
from placement_portal.models.enums import PlacementStatus, Role
from placement_portal.models.internship import Internship
from placement_portal.models.offer import PlacementOffer
from placement_portal.schemas.application import ApplicationCreate
from placement_portal.schemas.calendar import CalendarEventCreate
from placement_portal.schemas.chat import ChatMessageCreate
from placement_portal.schemas.internship import InternshipCreate, InternshipUpdate
from placement_portal.schemas.search import SearchFilters
from placement_portal.services.calendar_service import CalendarService
from placement_portal.services.chat_service import ChatService
from placement_portal.services.heatmap_service import HeatmapService
from placement_portal.services.internship_service import InternshipService
from placement_portal.services.notification_service import NotificationService
from placement_portal.services.search_service import SearchService


class TestChat:
    """Test student and mentor messaging."""

    @pytest.mark.asyncio
    async def test_first_message_opens_room_with_department_mentor(
        self, session, application_service, student, mentor, internship
    ):
        """Test a student's first message picks a mentor from their department."""
        application = await application_service.submit(
            as_current(student), ApplicationCreate(internship_id=internship.id)
        )
        service = ChatService(session)

        message = await service.send(
            as_current(student),
            ChatMessageCreate(application_id=application.id, message="Can you review my CV?"),
        )

        assert message.sender_id == student.id
        assert not message.is_read
        assert await service.unread_count(as_current(mentor)) == 1
        rooms = await service.list_rooms(as_current(mentor))
        assert len(rooms) == 1
        assert rooms[0].room.mentor_id == mentor.id
        assert rooms[0].latest_message.message == "Can you review my CV?"

    @pytest.mark.asyncio
    async def test_reading_thread_marks_messages_read(
        self, session, approved_application, student, mentor
    ):
        """Test the recipient reading the thread clears their unread count."""
        service = ChatService(session)
        await service.send(
            as_current(student),
            ChatMessageCreate(application_id=approved_application.id, message="Hello"),
        )
        await service.send(
            as_current(mentor),
            ChatMessageCreate(application_id=approved_application.id, message="Hi there"),
        )

        thread = await service.get_thread(as_current(mentor), approved_application.id)

        assert [m.message for m in thread.messages] == ["Hello", "Hi there"]
        assert thread.messages[0].is_read
        assert not thread.messages[1].is_read
        assert await service.unread_count(as_current(mentor)) == 0
        assert await service.unread_count(as_current(student)) == 1

    @pytest.mark.asyncio
    async def test_outsiders_cannot_chat(
        self, session, approved_application, other_student, other_mentor, employer
    ):
        """Test chat is limited to the applicant and department mentors."""
        service = ChatService(session)
        for outsider in (other_student, other_mentor, employer):
            with pytest.raises(PermissionDeniedError):
                await service.send(
                    as_current(outsider),
                    ChatMessageCreate(application_id=approved_application.id, message="Hi"),
                )

    @pytest.mark.asyncio
    async def test_no_mentor_in_department(self, session, other_student, employer):
        """Test a room cannot open when the department has no mentor."""
        posting = Internship(
            title="Embedded Intern",
            description="Firmware work",
            company_name="ChipCo",
            posted_by=employer.id,
        )
        session.add(posting)
        await session.flush()
        application = Application(
            student_id=other_student.id,
            internship_id=posting.id,
            status="APPLIED",
            applied_at=utc_now(),
        )
        session.add(application)
        await session.commit()

        with pytest.raises(ValidationFailedError, match="No mentor"):
            await ChatService(session).send(
                as_current(other_student),
                ChatMessageCreate(application_id=application.id, message="Hello?"),
            )


class TestSearch:
    """Test internship search and suggestions."""

    @pytest.mark.asyncio
    async def test_search_scores_and_pages(self, session, internship, employer, student):
        """Test results are filtered, scored by the student's skills and paged."""
        session.add(
            Internship(
                title="Marketing Intern",
                description="Campaigns and social media",
                company_name="BrandHouse",
                required_skills=["Communication"],
                eligible_departments=[],
                location="Mumbai",
                posted_by=employer.id,
            )
        )
        await session.commit()
        service = SearchService(session)

        response = await service.search(SearchFilters(limit=1), student.skills)

        assert response.total == 2
        assert response.has_more
        top = response.results[0]
        assert top.internship.id == internship.id
        assert set(top.matching_skills) == {"Python", "SQL"}

        filtered = await service.search(SearchFilters(locations=["mumbai"]), [])
        assert [r.internship.company_name for r in filtered.results] == ["BrandHouse"]

    @pytest.mark.asyncio
    async def test_inactive_postings_are_hidden(self, session, internship):
        """Test deactivated postings never appear in search."""
        internship.is_active = False
        await session.commit()

        response = await SearchService(session).search(SearchFilters(), [])

        assert response.total == 0

    @pytest.mark.asyncio
    async def test_suggestions(self, session, internship):
        """Test suggestions come from active postings."""
        suggestions = await SearchService(session).suggestions("fa")

        assert "FastAPI" in suggestions.skills


class TestHeatmap:
    """Test department placement statistics."""

    @pytest.mark.asyncio
    async def test_department_stats(self, session, student, other_student, employer):
        """Test placement percentage and recent activity per department."""
        await make_user(session, "student.cse2", Role.STUDENT, "Computer Science")
        student.placement_status = PlacementStatus.PLACED.value
        session.add(
            PlacementOffer(
                application_id=1,
                student_id=student.id,
                company_id=employer.id,
                position_title="Engineer",
                offer_type="PLACEMENT",
                offer_details={},
                offer_status="ACCEPTED",
                offer_date=utc_now() - timedelta(days=3),
                response_deadline=utc_now() + timedelta(days=4),
                acceptance_date=utc_now() - timedelta(days=1),
                contract_signed=False,
            )
        )
        await session.commit()

        heatmap = await HeatmapService(session).department_stats()

        by_name = {d.department: d for d in heatmap.departments}
        cse = by_name["Computer Science"]
        assert cse.total_students == 2
        assert cse.placed_students == 1
        assert cse.placement_percentage == 50.0
        assert cse.recent_placements == 1
        assert cse.heat_score == 60.0
        assert by_name["Electronics"].heat_score == 0.0
        assert heatmap.departments[0].department == "Computer Science"
        assert heatmap.total_students == 3
        assert heatmap.total_placed == 1


class TestInternshipsAndCalendar:
    """Test posting management, calendar events and notifications."""

    @pytest.mark.asyncio
    async def test_create_update_deactivate(self, session, employer, other_employer):
        """Test the posting owner manages the posting's lifecycle."""
        service = InternshipService(session)
        posting = await service.create(
            as_current(employer),
            InternshipCreate(
                title="QA Intern",
                description="Test automation",
                company_name="TechCorp",
                stipend_min=10000,
                stipend_max=15000,
            ),
        )
        assert posting.posted_by == employer.id

        updated = await service.update(
            as_current(employer), posting.id, InternshipUpdate(location="Remote")
        )
        assert updated.location == "Remote"

        with pytest.raises(ValidationFailedError):
            await service.update(
                as_current(employer), posting.id, InternshipUpdate(stipend_min=20000)
            )
        with pytest.raises(PermissionDeniedError):
            await service.deactivate(as_current(other_employer), posting.id)

        await service.deactivate(as_current(employer), posting.id)
        with pytest.raises(NotFoundError):
            await service.get(posting.id)
        assert (await service.get(posting.id, include_inactive=True)).is_active is False

    @pytest.mark.asyncio
    async def test_students_only_add_own_events(self, session, student, other_student):
        """Test students cannot put events on other calendars."""
        service = CalendarService(session)
        start = utc_now() + timedelta(days=2)

        event = await service.create_event(
            as_current(student),
            CalendarEventCreate(
                title="Exam", event_type="EXAM", start_datetime=start, end_datetime=start + timedelta(hours=2)
            ),
        )
        assert event.participants == [student.id]

        with pytest.raises(PermissionDeniedError):
            await service.create_event(
                as_current(student),
                CalendarEventCreate(
                    title="Study group",
                    start_datetime=start,
                    end_datetime=start + timedelta(hours=1),
                    participants=[other_student.id],
                ),
            )

    @pytest.mark.asyncio
    async def test_mark_notification_read(self, session, application_service, student, employer, internship):
        """Test a user reads their own notification only."""
        await application_service.submit(
            as_current(student), ApplicationCreate(internship_id=internship.id)
        )
        service = NotificationService(session)
        [notification] = await service.list_for_user(as_current(employer))

        with pytest.raises(PermissionDeniedError):
            await service.mark_read(as_current(student), notification.id)

        read = await service.mark_read(as_current(employer), notification.id)
        assert read.is_read
        assert await service.list_for_user(as_current(employer), unread_only=True) == []
