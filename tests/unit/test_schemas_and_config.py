"""Unit tests for settings, request schemas, domain errors and model helpers."""

from datetime import date, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from placement_portal.core.config import Settings
from placement_portal.core.exceptions import (
    DuplicateApplicationError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    SchedulingConflictError,
    StaleVersionError,
    ValidationFailedError,
    to_http_exception,
)
from placement_portal.models.application import Application
from placement_portal.models.calendar import CalendarEvent
from placement_portal.models.enums import ApplicationStatus
from placement_portal.schemas.application import CompleteApplicationRequest
from placement_portal.schemas.interview import InterviewCreate
from placement_portal.schemas.internship import InternshipCreate
from placement_portal.schemas.offer import OfferRespond


class TestSettings:
    """Test configuration defaults and bounds."""

    def test_defaults(self):
        """Test the documented defaults."""
        config = Settings(_env_file=None)

        assert config.offer_default_response_days == 7
        assert config.working_day_start_hour == 9
        assert config.working_day_end_hour == 17
        assert config.max_suggested_slots == 3

    def test_bounds_are_enforced(self):
        """Test out-of-range values are rejected."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, offer_expiry_check_minutes=0)


class TestErrors:
    """Test domain errors and their HTTP mapping."""

    def test_status_codes(self):
        """Test each error carries its HTTP status."""
        assert ValidationFailedError("bad").status_code == 400
        assert InvalidTransitionError(1, "APPLIED", "complete").status_code == 400
        assert PermissionDeniedError("no").status_code == 403
        assert NotFoundError("Application", 7).status_code == 404
        assert DuplicateApplicationError(1, 2).status_code == 409
        assert StaleVersionError(1, 2, 3).status_code == 409

    def test_messages(self):
        """Test messages name the resource and state."""
        assert NotFoundError("Application", 7).message == "Application 7 not found"
        assert "in status APPLIED" in InvalidTransitionError(1, "APPLIED", "complete").message

    def test_conflict_report_in_detail(self):
        """Test the conflict report travels in the HTTP detail."""
        report = {"has_conflicts": True, "conflicts": []}

        exc = to_http_exception(SchedulingConflictError(report))

        assert exc.status_code == 409
        assert exc.detail == {
            "message": "Scheduling conflict detected",
            "conflict_check": report,
        }


class TestSchemas:
    """Test request schema validation."""

    def test_aware_datetimes_become_naive_utc(self):
        """Test timezone-aware input is normalised to naive UTC."""
        ist = timezone(timedelta(hours=5, minutes=30))

        request = InterviewCreate(
            application_id=1, scheduled_datetime=datetime(2026, 5, 4, 15, 30, tzinfo=ist)
        )

        assert request.scheduled_datetime == datetime(2026, 5, 4, 10, 0)
        assert request.scheduled_datetime.tzinfo is None

    def test_offline_interview_needs_location(self):
        """Test offline interviews must say where."""
        with pytest.raises(ValidationError):
            InterviewCreate(
                application_id=1, scheduled_datetime=datetime(2026, 5, 4, 10), mode="OFFLINE"
            )

    def test_completion_dates_ordered(self):
        """Test the end date cannot precede the start date."""
        with pytest.raises(ValidationError):
            CompleteApplicationRequest(
                expected_version=1,
                performance_rating=4,
                start_date=date(2026, 3, 1),
                end_date=date(2026, 2, 1),
            )

    def test_rejection_reason_only_on_reject(self):
        """Test acceptances cannot carry a rejection reason."""
        with pytest.raises(ValidationError):
            OfferRespond(response="ACCEPTED", rejection_reason="Changed my mind")

        assert OfferRespond(response="REJECTED", rejection_reason="Other offer").rejection_reason

    def test_stipend_range(self):
        """Test the minimum stipend cannot exceed the maximum."""
        with pytest.raises(ValidationError):
            InternshipCreate(
                title="Intern",
                description="Work",
                company_name="Acme",
                stipend_min=5000,
                stipend_max=1000,
            )


class TestModelHelpers:
    """Test helpers on mapped models."""

    @pytest.mark.parametrize(
        "status,terminal",
        [
            (ApplicationStatus.APPLIED, False),
            (ApplicationStatus.OFFERED, False),
            (ApplicationStatus.OFFER_ACCEPTED, False),
            (ApplicationStatus.COMPLETED, True),
            (ApplicationStatus.WITHDRAWN, True),
            (ApplicationStatus.NOT_OFFERED, True),
        ],
    )
    def test_is_terminal(self, status, terminal):
        """Test which states close an application."""
        assert Application(status=status.value).is_terminal is terminal

    def test_event_involves_organizer_and_participants(self):
        """Test calendar events know who they involve."""
        event = CalendarEvent(organizer_id=1, participants=[2, 3])

        assert event.involves(1)
        assert event.involves(3)
        assert not event.involves(4)
