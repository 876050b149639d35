"""Validation logic for search and listing requests."""

from dataclasses import dataclass, field

from placement_portal.schemas.search import SearchFilters


@dataclass
class ValidationResult:
    """Result of validation process."""

    is_valid: bool
    error: str | None = None
    warnings: list[str] = field(default_factory=list)


def validate_search_filters(filters: SearchFilters) -> ValidationResult:
    """Validate a search request before it is run."""
    warnings = []

    if (
        filters.stipend_min is not None
        and filters.stipend_max is not None
        and filters.stipend_min > filters.stipend_max
    ):
        return ValidationResult(
            is_valid=False,
            error="stipend_min cannot exceed stipend_max",
        )

    if filters.query is not None and len(filters.query.strip()) < 2:
        warnings.append("Very short query; results may be broad")

    if len(filters.skills) > 20:
        warnings.append("Many skills given; only partial matches are likely")

    return ValidationResult(is_valid=True, warnings=warnings)
