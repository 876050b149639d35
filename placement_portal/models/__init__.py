"""Database models."""

from placement_portal.models.application import Application, TrackingStep
from placement_portal.models.calendar import CalendarEvent
from placement_portal.models.certificate import Certificate, EmployabilityRecord
from placement_portal.models.chat import ChatMessage, ChatRoom
from placement_portal.models.feedback import Feedback
from placement_portal.models.internship import Internship
from placement_portal.models.interview import InterviewSchedule
from placement_portal.models.notification import Notification
from placement_portal.models.offer import PlacementOffer
from placement_portal.models.user import User

__all__ = [
    "Application",
    "CalendarEvent",
    "Certificate",
    "ChatMessage",
    "ChatRoom",
    "EmployabilityRecord",
    "Feedback",
    "Internship",
    "InterviewSchedule",
    "Notification",
    "PlacementOffer",
    "TrackingStep",
    "User",
]
