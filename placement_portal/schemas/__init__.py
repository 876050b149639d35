"""Pydantic schemas for request/response validation."""

from placement_portal.schemas.common import ApiResponse, UTCDateTime

__all__ = ["ApiResponse", "UTCDateTime"]
