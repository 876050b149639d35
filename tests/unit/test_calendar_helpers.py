"""Unit tests for calendar overlap and slot helpers."""

from datetime import datetime, timedelta

from placement_portal.core.config import Settings
from placement_portal.models.calendar import CalendarEvent
from placement_portal.models.enums import CalendarEventType
from placement_portal.services.calendar_service import (
    describe_conflict,
    iter_candidate_starts,
    overlaps,
)


def event(event_type: CalendarEventType, title: str = "Event") -> CalendarEvent:
    return CalendarEvent(
        id=1,
        title=title,
        event_type=event_type.value,
        start_datetime=datetime(2026, 3, 2, 10, 0),
        end_datetime=datetime(2026, 3, 2, 11, 0),
        organizer_id=5,
        participants=[5, 9],
    )


class TestOverlaps:
    """Test half-open interval overlap."""

    def test_touching_intervals_do_not_overlap(self):
        """Test that back-to-back intervals are free."""
        a = datetime(2026, 3, 2, 10, 0)
        b = datetime(2026, 3, 2, 11, 0)
        c = datetime(2026, 3, 2, 12, 0)
        assert not overlaps(a, b, b, c)
        assert overlaps(a, c, b, c)

    def test_contained_interval(self):
        """Test that a contained interval overlaps."""
        start = datetime(2026, 3, 2, 9, 0)
        assert overlaps(start, start + timedelta(hours=4), start + timedelta(hours=1), start + timedelta(hours=2))


class TestDescribeConflict:
    """Test conflict classification."""

    def test_exam_is_blocking(self):
        """Test exams block and are named in the reason."""
        blocking, reason = describe_conflict(event(CalendarEventType.EXAM, "Midterm"), 9)
        assert blocking
        assert "exam" in reason
        assert "Midterm" in reason

    def test_academic_is_blocking(self):
        """Test academic commitments block."""
        blocking, reason = describe_conflict(event(CalendarEventType.ACADEMIC), 9)
        assert blocking
        assert "academic" in reason

    def test_interview_is_not_blocking(self):
        """Test other event types are reported but not blocking."""
        blocking, reason = describe_conflict(event(CalendarEventType.INTERVIEW), 5)
        assert not blocking
        assert "interview" in reason

    def test_involves_organizer_and_participants(self):
        """Test event membership."""
        e = event(CalendarEventType.OTHER)
        assert e.involves(5)
        assert e.involves(9)
        assert not e.involves(11)


class TestCandidateStarts:
    """Test alternative slot generation."""

    def test_skips_weekend_and_after_hours(self):
        """Test that candidates fall on weekdays inside working hours."""
        config = Settings(slot_search_horizon_days=3)
        friday_evening = datetime(2026, 3, 6, 16, 30)

        starts = list(iter_candidate_starts(friday_evening, timedelta(hours=1), config))

        assert starts
        assert starts[0] == datetime(2026, 3, 9, 9, 0)
        for start in starts:
            assert start.weekday() < 5
            assert config.working_day_start_hour <= start.hour
            assert start + timedelta(hours=1) <= start.replace(hour=config.working_day_end_hour, minute=0)

    def test_lunch_skipped_when_requested(self):
        """Test that the lunch hour can be excluded."""
        config = Settings(slot_search_horizon_days=1)
        morning = datetime(2026, 3, 2, 8, 0)

        with_lunch = list(iter_candidate_starts(morning, timedelta(hours=1), config))
        without_lunch = list(
            iter_candidate_starts(morning, timedelta(hours=1), config, skip_lunch=True)
        )

        assert datetime(2026, 3, 2, 12, 0) in with_lunch
        assert datetime(2026, 3, 2, 12, 0) not in without_lunch
