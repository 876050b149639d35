"""Utility functions and classes."""

from placement_portal.utils.filters import InternshipFilter
from placement_portal.utils.validators import ValidationResult, validate_search_filters

__all__ = ["InternshipFilter", "ValidationResult", "validate_search_filters"]
