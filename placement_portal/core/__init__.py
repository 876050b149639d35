"""Core application components."""

from placement_portal.core.config import settings
from placement_portal.core.exceptions import ApplicationError
from placement_portal.core.storage import Base, Database, get_session, utc_now

__all__ = [
    "ApplicationError",
    "Base",
    "Database",
    "get_session",
    "settings",
    "utc_now",
]
