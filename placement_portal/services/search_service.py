"""Internship search: filtering, relevance scoring, sorting and paging."""

import logging
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from placement_portal.core.storage import utc_now
from placement_portal.models.application import Application
from placement_portal.models.internship import Internship
from placement_portal.schemas.internship import InternshipResponse
from placement_portal.schemas.search import (
    SearchFilters,
    SearchResponse,
    SearchResultItem,
    SearchSuggestions,
)
from placement_portal.utils.filters import InternshipFilter

logger = logging.getLogger(__name__)


def skill_matches(internship: Internship, skills: list[str]) -> list[str]:
    """Required skills of the posting that overlap the given skills."""
    wanted = [s.lower() for s in skills]
    return [
        required
        for required in internship.required_skills or []
        if any(w in required.lower() or required.lower() in w for w in wanted)
    ]


def relevance_score(
    internship: Internship,
    filters: SearchFilters,
    user_skills: list[str],
    application_count: int,
    now: datetime,
) -> int:
    score = 10

    if filters.query:
        query = filters.query.lower()
        if query in internship.title.lower():
            score += 50
        if query in internship.company_name.lower():
            score += 30
        if query in internship.description.lower():
            score += 20
        score += 15 * sum(
            1 for s in internship.required_skills or [] if query in s.lower()
        )

    required = [s.lower() for s in internship.required_skills or []]
    for skill in {s.lower() for s in [*user_skills, *filters.skills]}:
        if skill in required:
            score += 40
        elif any(skill in r or r in skill for r in required):
            score += 20

    age_days = (now - internship.created_at).days
    if age_days <= 7:
        score += 15
    elif age_days <= 30:
        score += 10

    if application_count < 10:
        score += 10
    elif application_count > 50:
        score -= 5

    return score


class SearchService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _application_counts(self) -> dict[int, int]:
        result = await self.session.execute(
            select(Application.internship_id, func.count(Application.id)).group_by(
                Application.internship_id
            )
        )
        return {internship_id: count for internship_id, count in result.all()}

    async def _active_internships(self) -> list[Internship]:
        result = await self.session.execute(
            select(Internship).where(Internship.is_active.is_(True))
        )
        return list(result.scalars().all())

    async def search(
        self, filters: SearchFilters, user_skills: list[str] | None = None
    ) -> SearchResponse:
        """Filter active internships, score them and return one page."""
        now = utc_now()
        user_skills = user_skills or []
        predicate = InternshipFilter(filters, now)
        counts = await self._application_counts()

        scored = []
        for internship in await self._active_internships():
            include, reason = predicate.should_include(internship)
            if not include:
                logger.debug(f"Internship {internship.id} filtered out: {reason}")
                continue
            matching = skill_matches(internship, user_skills) if user_skills else []
            total_skills = len(internship.required_skills or [])
            scored.append(
                SearchResultItem(
                    internship=InternshipResponse.model_validate(internship),
                    relevance_score=relevance_score(
                        internship, filters, user_skills, counts.get(internship.id, 0), now
                    ),
                    matching_skills=matching,
                    match_percentage=round(len(matching) / total_skills * 100)
                    if total_skills
                    else 0,
                )
            )

        reverse = filters.sort_order == "desc"
        if filters.sort_by == "date":
            scored.sort(key=lambda r: r.internship.created_at, reverse=reverse)
        elif filters.sort_by == "stipend":
            scored.sort(key=lambda r: r.internship.stipend_max or 0, reverse=reverse)
        else:
            scored.sort(
                key=lambda r: (r.relevance_score, r.internship.created_at), reverse=reverse
            )

        page = scored[filters.offset : filters.offset + filters.limit]
        return SearchResponse(
            results=page,
            total=len(scored),
            limit=filters.limit,
            offset=filters.offset,
            has_more=filters.offset + filters.limit < len(scored),
            filters=filters,
        )

    async def suggestions(self, prefix: str | None = None, limit: int = 10) -> SearchSuggestions:
        skills: set[str] = set()
        companies: set[str] = set()
        locations: set[str] = set()
        for internship in await self._active_internships():
            skills.update(internship.required_skills or [])
            companies.add(internship.company_name)
            if internship.location:
                locations.add(internship.location)

        def pick(values: set[str]) -> list[str]:
            if prefix:
                values = {v for v in values if v.lower().startswith(prefix.lower())}
            return sorted(values, key=str.lower)[:limit]

        return SearchSuggestions(
            skills=pick(skills), companies=pick(companies), locations=pick(locations)
        )
