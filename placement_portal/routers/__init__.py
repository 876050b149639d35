"""API routers."""

from placement_portal.routers.analytics import router as analytics_router
from placement_portal.routers.applications import router as applications_router
from placement_portal.routers.auth import router as auth_router
from placement_portal.routers.calendar import router as calendar_router
from placement_portal.routers.certificates import router as certificates_router
from placement_portal.routers.chat import router as chat_router
from placement_portal.routers.feedback import router as feedback_router
from placement_portal.routers.internships import router as internships_router
from placement_portal.routers.interviews import router as interviews_router
from placement_portal.routers.mentor import router as mentor_router
from placement_portal.routers.notifications import router as notifications_router
from placement_portal.routers.offers import router as offers_router
from placement_portal.routers.search import router as search_router

__all__ = [
    "analytics_router",
    "applications_router",
    "auth_router",
    "calendar_router",
    "certificates_router",
    "chat_router",
    "feedback_router",
    "internships_router",
    "interviews_router",
    "mentor_router",
    "notifications_router",
    "offers_router",
    "search_router",
]
