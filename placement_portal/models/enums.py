"""Enumerations shared by models, schemas and services."""

from enum import Enum


class Role(str, Enum):
    """User roles."""

    STUDENT = "STUDENT"
    STAFF = "STAFF"
    MENTOR = "MENTOR"
    EMPLOYER = "EMPLOYER"


class PlacementStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    PLACED = "PLACED"
    INTERNING = "INTERNING"


class ApplicationStatus(str, Enum):
    """Authoritative summary state of an application."""

    APPLIED = "APPLIED"
    MENTOR_REVIEW = "MENTOR_REVIEW"
    MENTOR_APPROVED = "MENTOR_APPROVED"
    MENTOR_REJECTED = "MENTOR_REJECTED"
    EMPLOYER_REVIEW = "EMPLOYER_REVIEW"
    INTERVIEW_SCHEDULED = "INTERVIEW_SCHEDULED"
    INTERVIEWED = "INTERVIEWED"
    OFFERED = "OFFERED"
    OFFER_ACCEPTED = "OFFER_ACCEPTED"
    OFFER_REJECTED = "OFFER_REJECTED"
    NOT_OFFERED = "NOT_OFFERED"
    COMPLETED = "COMPLETED"
    WITHDRAWN = "WITHDRAWN"


TERMINAL_STATUSES = frozenset(
    {
        ApplicationStatus.MENTOR_REJECTED,
        ApplicationStatus.NOT_OFFERED,
        ApplicationStatus.COMPLETED,
        ApplicationStatus.OFFER_REJECTED,
        ApplicationStatus.WITHDRAWN,
    }
)


class ApprovalPriority(str, Enum):
    """Urgency of a pending mentor decision."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


MENTOR_PENDING_STATUSES = frozenset(
    {ApplicationStatus.APPLIED, ApplicationStatus.MENTOR_REVIEW}
)


class TrackingStepStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    SKIPPED = "SKIPPED"


class InterviewMode(str, Enum):
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"
    PHONE = "PHONE"


class InterviewStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"
    RESCHEDULED = "RESCHEDULED"


class InterviewType(str, Enum):
    TECHNICAL = "TECHNICAL"
    HR = "HR"
    MANAGER = "MANAGER"
    FINAL = "FINAL"


class OfferType(str, Enum):
    INTERNSHIP = "INTERNSHIP"
    PLACEMENT = "PLACEMENT"
    FULL_TIME = "FULL_TIME"


class OfferStatus(str, Enum):
    DRAFT = "DRAFT"
    EXTENDED = "EXTENDED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"
    EXPIRED = "EXPIRED"


OPEN_OFFER_STATUSES = frozenset(
    {OfferStatus.DRAFT, OfferStatus.EXTENDED, OfferStatus.ACCEPTED}
)


class CalendarEventType(str, Enum):
    INTERVIEW = "INTERVIEW"
    EXAM = "EXAM"
    ACADEMIC = "ACADEMIC"
    DEADLINE = "DEADLINE"
    PLACEMENT = "PLACEMENT"
    OTHER = "OTHER"


BLOCKING_EVENT_TYPES = frozenset({CalendarEventType.EXAM, CalendarEventType.ACADEMIC})


class CalendarEventStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    RESCHEDULED = "RESCHEDULED"


class NotificationType(str, Enum):
    APPLICATION = "APPLICATION"
    APPROVAL = "APPROVAL"
    INTERVIEW = "INTERVIEW"
    OFFER = "OFFER"
    FEEDBACK = "FEEDBACK"
    GENERAL = "GENERAL"
