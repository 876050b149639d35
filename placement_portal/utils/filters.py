"""Internship search filtering logic."""

from datetime import datetime, timedelta

from placement_portal.models.internship import Internship
from placement_portal.schemas.search import SearchFilters

DATE_POSTED_WINDOWS = {
    "today": timedelta(days=1),
    "week": timedelta(days=7),
    "month": timedelta(days=30),
}


def duration_bucket(weeks: int | None) -> str | None:
    """Classify a posting's length as short, medium or long."""
    if weeks is None:
        return None
    if weeks <= 8:
        return "short"
    if weeks <= 16:
        return "medium"
    return "long"


class InternshipFilter:
    """Predicates applied to active internships before scoring."""

    def __init__(self, filters: SearchFilters, now: datetime):
        self.filters = filters
        self.now = now

    def should_include(self, internship: Internship) -> tuple[bool, str]:
        """Determine if the internship passes every requested filter."""
        f = self.filters

        if f.query and not self._matches_query(internship):
            return False, f"No match for query: {f.query}"

        if f.skills:
            missing = self._missing_skills(internship)
            if len(missing) == len(f.skills):
                return False, f"None of the skills match: {', '.join(missing)}"

        if f.departments:
            eligible = internship.eligible_departments or []
            if eligible and not set(eligible) & set(f.departments):
                return False, "Department not eligible"

        if f.stipend_min is not None and (internship.stipend_max or 0) < f.stipend_min:
            return False, "Stipend below minimum"

        if f.stipend_max is not None and (internship.stipend_min or 0) > f.stipend_max:
            return False, "Stipend above maximum"

        if f.type == "internship" and internship.is_placement:
            return False, "Placement excluded"
        if f.type == "placement" and not internship.is_placement:
            return False, "Internship excluded"

        if f.locations:
            location = (internship.location or "").lower()
            if not any(loc.lower() in location for loc in f.locations):
                return False, f"Location not in {', '.join(f.locations)}"

        if f.duration and duration_bucket(internship.duration_weeks) != f.duration:
            return False, f"Duration is not {f.duration}"

        if f.companies:
            company = internship.company_name.lower()
            if not any(c.lower() in company for c in f.companies):
                return False, f"Company not in {', '.join(f.companies)}"

        window = DATE_POSTED_WINDOWS.get(f.date_posted)
        if window and internship.created_at < self.now - window:
            return False, f"Posted before the last {f.date_posted}"

        return True, "Passed all filters"

    def _matches_query(self, internship: Internship) -> bool:
        query = self.filters.query.lower()
        fields = [
            internship.title,
            internship.company_name,
            internship.description,
            *(internship.required_skills or []),
        ]
        return any(query in (value or "").lower() for value in fields)

    def _missing_skills(self, internship: Internship) -> list[str]:
        """Requested skills that appear in no required skill of the posting."""
        required = [s.lower() for s in internship.required_skills or []]
        missing = []
        for skill in self.filters.skills:
            skill_lower = skill.lower()
            if not any(skill_lower in r or r in skill_lower for r in required):
                missing.append(skill)
        return missing
